"""
Coordinate Reconciler Module.

Maps element bounds (logical units reported by the automation server) onto the
pixels of the captured screenshot, and canvas clicks back onto logical points.

The device's logical screen size is never reported reliably, so it is resolved from a
prioritized chain of sources. The last link, the screenshot's own pixel size, always
succeeds, which keeps reconciliation total.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from hierarchy_inspector.element_tree import Bounds, ElementNode, iter_nodes

logger = logging.getLogger(__name__)

Size = Tuple[float, float]
Point = Tuple[float, float]

# Most specific names first: "iPhone 16 Pro Max" must not match "iPhone 16 Pro".
KNOWN_DEVICE_SIZES: Tuple[Tuple[str, float, float], ...] = (
    ("iPhone 16 Pro Max", 440, 956),
    ("iPhone 16 Pro", 402, 874),
    ("iPhone 15 Pro Max", 430, 932),
    ("iPhone 15 Pro", 393, 852),
    ("iPhone 14 Pro Max", 430, 932),
    ("iPhone 14 Pro", 393, 852),
)

PLATFORM_FALLBACK_SIZES: Dict[str, Size] = {
    "ios": (375, 812),
}

MIN_DRAW_SIZE = 2.0


@dataclass(frozen=True)
class DeviceMetadata:
    """Best-effort device facts from the automation session. Every field is optional."""
    window_size: Optional[Dict[str, Any]] = None
    window_rect: Optional[Dict[str, Any]] = None
    capabilities: Dict[str, Any] = field(default_factory=dict)

    @property
    def platform_name(self) -> str:
        return str(self.capabilities.get("platformName") or "")

    @property
    def device_name(self) -> str:
        return str(self.capabilities.get("deviceName") or "")


@dataclass(frozen=True)
class DeviceFrame:
    screenshot_pixel_size: Size
    device_logical_size: Size
    source: str

    @property
    def device_pixel_ratio(self) -> float:
        return self.screenshot_pixel_size[0] / self.device_logical_size[0]


def _positive_size(value: Optional[Dict[str, Any]]) -> Optional[Size]:
    if not isinstance(value, dict):
        return None
    try:
        width = float(value.get("width") or 0)
        height = float(value.get("height") or 0)
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(width) and math.isfinite(height)):
        return None
    if width > 0 and height > 0:
        return width, height
    return None


def _clamp_size(size: Size) -> Size:
    width, height = size
    return (width if width > 0 else 1.0, height if height > 0 else 1.0)


def match_known_device(
    device_name: str,
    known_devices: Sequence[Tuple[str, float, float]] = KNOWN_DEVICE_SIZES,
) -> Optional[Tuple[str, Size]]:
    """Returns (entry name, logical size) for the first entry contained in `device_name`."""
    if not device_name:
        return None
    for name, width, height in known_devices:
        if name and name in device_name:
            return name, (float(width), float(height))
    return None


def resolve_device_frame(
    screenshot_pixel_size: Size,
    metadata: Optional[DeviceMetadata] = None,
    known_devices: Sequence[Tuple[str, float, float]] = KNOWN_DEVICE_SIZES,
) -> DeviceFrame:
    """
    Resolves the device's logical size, first available source wins:

    1. reported window size,
    2. reported window rect,
    3. device name matched against the known-device table,
    4. a generic size for the platform,
    5. the screenshot's own pixel size (pixel ratio 1).

    Args:
        screenshot_pixel_size (Size): Decoded screenshot (width, height) in pixels.
        metadata (Optional[DeviceMetadata]): Whatever the session reported.
        known_devices: Device-name table, see `KNOWN_DEVICE_SIZES`.

    Returns:
        DeviceFrame: Never fails.
    """
    pixel_size = _clamp_size(screenshot_pixel_size)
    metadata = metadata or DeviceMetadata()

    logical: Optional[Size] = None
    source = "screenshot"

    window_size = _positive_size(metadata.window_size)
    window_rect = _positive_size(metadata.window_rect)
    known = match_known_device(metadata.device_name, known_devices)
    generic = PLATFORM_FALLBACK_SIZES.get(metadata.platform_name.lower())

    if window_size:
        logical, source = window_size, "windowSize"
    elif window_rect:
        logical, source = window_rect, "windowRect"
    elif known:
        logical, source = known[1], f"known device: {known[0]}"
    elif generic:
        logical, source = generic, f"{metadata.platform_name} generic"
    else:
        logical = pixel_size

    frame = DeviceFrame(pixel_size, logical, source)
    logger.debug(
        "Device frame: screenshot %gx%g, logical %gx%g (%s), pixel ratio %.2f",
        pixel_size[0], pixel_size[1], logical[0], logical[1], source, frame.device_pixel_ratio,
    )
    return frame


def fit_render_size(pixel_size: Size, max_size: Optional[Size] = None) -> Size:
    """
    Aspect-preserving downscale of the screenshot onto a bounded canvas. Never upscales.
    A missing or non-positive max size keeps the screenshot size.
    """
    width, height = _clamp_size(pixel_size)
    if not max_size or max_size[0] <= 0 or max_size[1] <= 0:
        return width, height
    max_w, max_h = max_size
    if width <= max_w and height <= max_h:
        return width, height
    scale = min(max_w / width, max_h / height)
    return float(round(width * scale)), float(round(height * scale))


@dataclass(frozen=True)
class ScaleTransform:
    """
    Logical <-> render-target mapping. Forward and inverse use the same two factors.
    """
    scale_x: float
    scale_y: float

    @staticmethod
    def for_render_target(frame: DeviceFrame, render_size: Optional[Size] = None) -> "ScaleTransform":
        """
        Args:
            frame (DeviceFrame): Resolved device frame.
            render_size (Optional[Size]): Canvas the boxes are drawn onto; defaults to the
                screenshot's pixel size.
        """
        target_w, target_h = _clamp_size(render_size or frame.screenshot_pixel_size)
        logical_w, logical_h = frame.device_logical_size
        return ScaleTransform(target_w / logical_w, target_h / logical_h)

    def to_pixels(self, point: Point) -> Point:
        return point[0] * self.scale_x, point[1] * self.scale_y

    def to_logical(self, point: Point) -> Point:
        return point[0] / self.scale_x, point[1] / self.scale_y

    def box_to_pixels(self, bounds: Bounds) -> Bounds:
        return Bounds(
            bounds.x * self.scale_x,
            bounds.y * self.scale_y,
            bounds.width * self.scale_x,
            bounds.height * self.scale_y,
        )


IDENTITY = ScaleTransform(1.0, 1.0)


def is_drawable(pixel_box: Bounds, min_size: float = MIN_DRAW_SIZE) -> bool:
    return pixel_box.width >= min_size and pixel_box.height >= min_size


def overlay_boxes(
    root: Optional[ElementNode],
    transform: ScaleTransform,
    min_size: float = MIN_DRAW_SIZE,
) -> List[Tuple[ElementNode, Bounds]]:
    """
    Render-ready pixel boxes in pre-order. Zero-area nodes and boxes under `min_size`
    pixels are left out of drawing; they stay valid for hit-testing.
    """
    boxes: List[Tuple[ElementNode, Bounds]] = []
    for node in iter_nodes(root):
        if node.bounds.is_empty:
            continue
        pixel_box = transform.box_to_pixels(node.bounds)
        if is_drawable(pixel_box, min_size):
            boxes.append((node, pixel_box))
    return boxes
