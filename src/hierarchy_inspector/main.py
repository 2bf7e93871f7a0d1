"""
Application Entry Point.

This module initializes the PySide6 application, configures logging, applies the
global theme and launches the inspector window.
"""

import logging
import os
import sys
import traceback
from pathlib import Path

from PySide6.QtGui import QFont, QFontDatabase
from PySide6.QtWidgets import QApplication, QMessageBox

if __name__ == "__main__" and __package__ is None:
    sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from hierarchy_inspector.config import get_config_dir
from hierarchy_inspector.gui import MainWindow
from hierarchy_inspector.theme import Theme

ENV_LOG_LEVEL = "HIERARCHY_INSPECTOR_LOG_LEVEL"


def configure_logging() -> None:
    level_name = os.environ.get(ENV_LOG_LEVEL, "INFO").upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def write_crash_report() -> Path:
    crash_path = get_config_dir() / "last_crash.txt"
    crash_path.write_text(traceback.format_exc(), encoding="utf-8")
    return crash_path


def main() -> None:
    """
    Main execution function.
    Initializes the Qt Application context and event loop.
    """
    configure_logging()
    logger = logging.getLogger("hierarchy_inspector")
    try:
        app = QApplication(sys.argv)
        app.setApplicationName("Hierarchy Inspector")

        font_family = Theme.FONT_FAMILY
        if font_family not in QFontDatabase.families():
            font_family = QFont().defaultFamily()
            Theme.FONT_FAMILY = font_family

        base_font = QFont(font_family)
        base_font.setPointSize(10)
        app.setFont(base_font)
        app.setStyleSheet(Theme.get_stylesheet())

        window = MainWindow()
        window.show()
        logger.info("Font family active: %s", font_family)
        sys.exit(app.exec())
    except Exception:
        crash_path = write_crash_report()
        logger.critical("Fatal error. Crash report saved to %s", crash_path)
        if QApplication.instance() is not None:
            QMessageBox.critical(None, "Fatal Error", f"The app crashed. Crash report saved to:\n{crash_path}")
        sys.exit(1)


if __name__ == "__main__":
    main()
