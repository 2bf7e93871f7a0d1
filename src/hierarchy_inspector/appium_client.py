"""
Appium Client Module.

Thin HTTP client for an Appium server: session discovery, page source, screenshots
and the best-effort device metadata used to reconcile coordinates. Every transport,
HTTP or decoding failure surfaces as `AppiumError`; the caller decides how to show it.
"""

import base64
import binascii
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from hierarchy_inspector.config import DEFAULT_SERVER_URL
from hierarchy_inspector.coordinate_reconciler import DeviceMetadata

logger = logging.getLogger(__name__)

SNAPSHOT_TIMEOUT = 600
EXCLUDED_ATTRIBUTES = ["visible", "accessible"]


class AppiumError(Exception):
    """Raised when the Appium server cannot be reached or answers with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class AppiumSession:
    id: str
    capabilities: Dict[str, Any]

    @property
    def platform_name(self) -> str:
        return str(self.capabilities.get("platformName") or "")

    @property
    def device_name(self) -> str:
        return str(self.capabilities.get("deviceName") or "")

    @property
    def label(self) -> str:
        parts = [p for p in (self.device_name, self.platform_name) if p]
        return f"{self.id} ({', '.join(parts)})" if parts else self.id


@dataclass(frozen=True)
class SnapshotData:
    screenshot: bytes
    page_source: str


class AppiumClient:
    """
    Client for one Appium server.
    """

    def __init__(self, base_url: str = DEFAULT_SERVER_URL, timeout: float = 30.0,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = session or requests.Session()

    def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        """
        Performs a request and returns the W3C `value` field of the JSON answer.

        Args:
            method (str): HTTP method.
            path (str): Path relative to the server URL.
            payload (Optional[Dict[str, Any]]): JSON body for POST requests.

        Returns:
            Any: The `value` of the response body (None when absent).
        """
        url = f"{self.base_url}{path}"
        try:
            resp = self.http.request(method, url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise AppiumError(f"{method} {path} failed: {e}") from e

        if not resp.ok:
            raise AppiumError(f"HTTP error! status: {resp.status_code} ({method} {path})", resp.status_code)
        try:
            body = resp.json()
        except ValueError as e:
            raise AppiumError(f"{method} {path} returned invalid JSON", resp.status_code) from e
        if not isinstance(body, dict):
            return None
        return body.get("value")

    def get_sessions(self) -> List[AppiumSession]:
        value = self._request("GET", "/sessions") or []
        sessions: List[AppiumSession] = []
        for entry in value:
            if isinstance(entry, dict) and entry.get("id"):
                sessions.append(AppiumSession(str(entry["id"]), entry.get("capabilities") or {}))
        return sessions

    def get_session(self, session_id: str) -> AppiumSession:
        value = self._request("GET", f"/session/{session_id}")
        return AppiumSession(session_id, value if isinstance(value, dict) else {})

    def set_settings(self, session_id: str, settings: Dict[str, Any]) -> None:
        self._request("POST", f"/session/{session_id}/appium/settings", {"settings": settings})

    def set_snapshot_max_depth(self, session_id: str, depth: int, optimize: bool = True) -> None:
        settings: Dict[str, Any] = {
            "snapshotMaxDepth": depth,
            "customSnapshotTimeout": SNAPSHOT_TIMEOUT,
            "snapshotTimeout": SNAPSHOT_TIMEOUT,
        }
        if optimize:
            settings["pageSourceExcludedAttributes"] = ",".join(EXCLUDED_ATTRIBUTES)
        self.set_settings(session_id, settings)

    def get_page_source(self, session_id: str) -> str:
        return self._request("GET", f"/session/{session_id}/source") or ""

    def get_page_source_optimized(self, session_id: str) -> str:
        """
        Uses `mobile: source` with excluded attributes (faster on XCUITest), falling back
        to the standard source endpoint when the driver does not support it.
        """
        try:
            value = self._request("POST", f"/session/{session_id}/execute", {
                "script": "mobile: source",
                "args": [{"excludedAttributes": EXCLUDED_ATTRIBUTES}],
            })
            if isinstance(value, str) and value:
                return value
        except AppiumError as e:
            logger.info("mobile: source not supported, using standard source: %s", e)
        return self.get_page_source(session_id)

    def get_screenshot(self, session_id: str) -> bytes:
        value = self._request("GET", f"/session/{session_id}/screenshot") or ""
        try:
            return base64.b64decode(value, validate=False)
        except (binascii.Error, TypeError) as e:
            raise AppiumError("Screenshot is not valid base64") from e

    def get_window_size(self, session_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/session/{session_id}/window/size") or {}

    def get_window_rect(self, session_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/session/{session_id}/window/rect") or {}

    def get_screen_info(self, session_id: str) -> Dict[str, Any]:
        try:
            return self._request("GET", f"/session/{session_id}/appium/device/screen_info") or {}
        except AppiumError:
            logger.info("Screen info not available, falling back to window size")
            return self.get_window_size(session_id)

    def _probe(self, label: str, func, session_id: str) -> Any:
        try:
            return func(session_id)
        except AppiumError as e:
            logger.warning("%s failed: %s", label, e)
            return None

    def get_device_metadata(self, session_id: str) -> DeviceMetadata:
        """
        Collects window size, window rect and capabilities concurrently. Each probe is
        optional; a failing one is logged and left out.
        """
        probes = {
            "window_size": ("Window size", self.get_window_size),
            "window_rect": ("Window rect", self.get_window_rect),
            "screen_info": ("Screen info", self.get_screen_info),
            "session": ("Session info", self.get_session),
        }
        with ThreadPoolExecutor(max_workers=len(probes)) as pool:
            futures = {
                key: pool.submit(self._probe, label, func, session_id)
                for key, (label, func) in probes.items()
            }
            results = {key: future.result() for key, future in futures.items()}

        session = results["session"]
        metadata = DeviceMetadata(
            window_size=results["window_size"] or None,
            window_rect=results["window_rect"] or None,
            capabilities=dict(session.capabilities) if session else {},
        )
        logger.debug("Device metadata: %s (screen info: %s)", metadata, results["screen_info"])
        return metadata

    def fetch_snapshot(self, session_id: str, max_depth: int, optimize: bool = True) -> SnapshotData:
        """
        Applies the depth settings, then fetches screenshot and page source in parallel.
        """
        logger.info("Getting screenshot and page source with depth: %d", max_depth)
        self.set_snapshot_max_depth(session_id, max_depth, optimize)
        get_source = self.get_page_source_optimized if optimize else self.get_page_source
        with ThreadPoolExecutor(max_workers=2) as pool:
            screenshot = pool.submit(self.get_screenshot, session_id)
            source = pool.submit(get_source, session_id)
            return SnapshotData(screenshot.result(), source.result())
