"""Runs the inspector from a source checkout without installing it."""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent / "src"))

from hierarchy_inspector.main import main

if __name__ == "__main__":
    main()
