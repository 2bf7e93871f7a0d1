"""
Live Session Module.

Background fetching for the GUI. Network calls to the Appium server run on a QThread
so the window stays responsive; results come back through Qt signals.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from PySide6.QtCore import QThread, Signal

from hierarchy_inspector.appium_client import AppiumClient, AppiumError
from hierarchy_inspector.coordinate_reconciler import DeviceMetadata

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LiveSnapshot:
    session_id: str
    screenshot: bytes
    page_source: Optional[str]
    metadata: Optional[DeviceMetadata]


class SnapshotThread(QThread):
    """
    One-shot fetch of everything needed to redraw the inspector.

    With `screenshot_only` the page source and device metadata are skipped and the
    emitted snapshot carries None for both.
    """
    snapshot_ready = Signal(object)  # Emits LiveSnapshot
    fetch_error = Signal(str)

    def __init__(self, client: AppiumClient, session_id: str, max_depth: int,
                 optimize: bool = True, screenshot_only: bool = False):
        super().__init__()
        self.client = client
        self.session_id = session_id
        self.max_depth = max_depth
        self.optimize = optimize
        self.screenshot_only = screenshot_only

    def run(self) -> None:
        try:
            if self.screenshot_only:
                snapshot = LiveSnapshot(self.session_id, self.client.get_screenshot(self.session_id), None, None)
            else:
                metadata = self.client.get_device_metadata(self.session_id)
                data = self.client.fetch_snapshot(self.session_id, self.max_depth, self.optimize)
                snapshot = LiveSnapshot(self.session_id, data.screenshot, data.page_source, metadata)
        except AppiumError as e:
            logger.error("Fetch for session %s failed: %s", self.session_id, e)
            self.fetch_error.emit(str(e))
            return
        self.snapshot_ready.emit(snapshot)
