"""
Configuration Module.

User settings, Appium server history and device profiles. Everything lives in small
JSON files; unreadable files fall back to defaults.
"""

import json
import logging
import os
import sys
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, List, Optional, Tuple

from hierarchy_inspector.coordinate_reconciler import KNOWN_DEVICE_SIZES

logger = logging.getLogger(__name__)

DEFAULT_SERVER_URL = "http://localhost:4723"
HISTORY_LIMIT = 20
MAX_DEPTH_RANGE = (1, 500)

ENV_SERVER_URL = "HIERARCHY_INSPECTOR_SERVER_URL"
ENV_MAX_DEPTH = "HIERARCHY_INSPECTOR_MAX_DEPTH"
ENV_HOME = "HIERARCHY_INSPECTOR_HOME"


def get_app_root() -> Path:
    """Returns the application root directory (repo root in dev, _MEIPASS in frozen)."""
    if getattr(sys, "frozen", False):
        return Path(sys._MEIPASS)
    return Path(__file__).resolve().parents[2]


def get_config_dir() -> Path:
    override = os.environ.get(ENV_HOME)
    base = Path(override) if override else Path.home() / ".hierarchy_inspector"
    base.mkdir(parents=True, exist_ok=True)
    return base


def _read_json(path: Path) -> Any:
    if not path.exists():
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable config file %s: %s", path, e)
        return None


def _coerce(default: Any, raw: Any) -> Any:
    if isinstance(default, bool):
        if isinstance(raw, str):
            return raw.strip().lower() in ("1", "true", "yes", "on")
        return bool(raw)
    return type(default)(raw)


def _clamp_depth(value: Any, default: int) -> int:
    try:
        depth = int(value)
    except (TypeError, ValueError):
        return default
    low, high = MAX_DEPTH_RANGE
    return max(low, min(high, depth))


@dataclass
class InspectorSettings:
    server_url: str = DEFAULT_SERVER_URL
    max_depth: int = 20
    optimize_source: bool = True
    request_timeout: float = 30.0
    canvas_max_width: int = 500
    canvas_max_height: int = 900
    min_box_size: float = 2.0

    @property
    def canvas_max_size(self) -> Optional[Tuple[int, int]]:
        if self.canvas_max_width <= 0 or self.canvas_max_height <= 0:
            return None
        return self.canvas_max_width, self.canvas_max_height

    @staticmethod
    def path() -> Path:
        return get_config_dir() / "settings.json"

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "InspectorSettings":
        """
        Reads settings from disk, then applies environment overrides.
        """
        settings = cls()
        data = _read_json(path or cls.path())
        if isinstance(data, dict):
            for f in fields(cls):
                if f.name not in data:
                    continue
                try:
                    value = _coerce(getattr(settings, f.name), data[f.name])
                except (TypeError, ValueError):
                    logger.warning("Invalid value for setting %r: %r", f.name, data[f.name])
                    continue
                setattr(settings, f.name, value)

        env_url = os.environ.get(ENV_SERVER_URL)
        if env_url:
            settings.server_url = env_url
        env_depth = os.environ.get(ENV_MAX_DEPTH)
        settings.max_depth = _clamp_depth(env_depth or settings.max_depth, cls.max_depth)
        settings.server_url = settings.server_url.strip().rstrip("/") or DEFAULT_SERVER_URL
        return settings

    def save(self, path: Optional[Path] = None) -> None:
        target = path or self.path()
        target.write_text(json.dumps(asdict(self), indent=2), encoding="utf-8")


class ServerHistory:
    """Recently used Appium server URLs, most recent first."""

    @staticmethod
    def path() -> Path:
        return get_config_dir() / "server_history.json"

    @staticmethod
    def load(path: Optional[Path] = None) -> List[str]:
        data = _read_json(path or ServerHistory.path())
        if isinstance(data, list):
            return [str(url) for url in data if url]
        return []

    @staticmethod
    def record(url: str, path: Optional[Path] = None) -> List[str]:
        url = url.strip().rstrip("/")
        entries = [u for u in ServerHistory.load(path) if u != url]
        entries.insert(0, url)
        entries = entries[:HISTORY_LIMIT]
        (path or ServerHistory.path()).write_text(json.dumps(entries, indent=2), encoding="utf-8")
        return entries


def load_known_devices(path: Optional[Path] = None) -> Tuple[Tuple[str, float, float], ...]:
    """
    Known-device table: entries from devices.json ("known_devices": [{name, width, height}])
    come first, then the built-in table.
    """
    config_path = path or (get_app_root() / "devices.json")
    data = _read_json(config_path)
    extra: List[Tuple[str, float, float]] = []
    if isinstance(data, dict):
        for entry in data.get("known_devices") or []:
            if not isinstance(entry, dict):
                continue
            try:
                name = str(entry["name"])
                width, height = float(entry["width"]), float(entry["height"])
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed device profile: %r", entry)
                continue
            if name and width > 0 and height > 0:
                extra.append((name, width, height))
    if extra:
        logger.info("Device profiles loaded: %d", len(extra))
    return tuple(extra) + KNOWN_DEVICE_SIZES
