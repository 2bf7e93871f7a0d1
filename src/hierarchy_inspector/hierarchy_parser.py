"""
Hierarchy Parser Module.

Turns a platform-specific page source (iOS XCUITest or Android UiAutomator XML) into a
tree of platform-neutral `ElementNode` objects. Each node's bounds come from exactly
one scheme, picked once per node: four numeric attributes on iOS, a single
"[x1,y1][x2,y2]" string on Android. Nodes whose bounds cannot be read are left out.

The parser never raises; a missing tree (None) is the error signal.
"""

import logging
import math
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from hierarchy_inspector.element_tree import UNKNOWN_TYPE, Bounds, ElementNode

logger = logging.getLogger(__name__)

IOS_PLATFORM = "iOS"
ANDROID_PLATFORM = "Android"

IOS_TYPE_PREFIX = "XCUIElementType"
IOS_DOCUMENT_TAG = "AppiumAUT"
IOS_APPLICATION_TAG = "XCUIElementTypeApplication"
ANDROID_DOCUMENT_TAG = "hierarchy"
ANDROID_NODE_TAG = "node"

NAME_ATTRIBUTES = ("name", "text", "content-desc", "resource-id")
TYPE_ATTRIBUTES = ("type", "class")

_ANDROID_BOUNDS_RE = re.compile(r"^\s*\[(-?\d+),(-?\d+)\]\[(-?\d+),(-?\d+)\]\s*$")


@dataclass(frozen=True)
class IosBounds:
    """iOS scheme: direct x / y / width / height attributes (floats)."""
    x: Optional[str]
    y: Optional[str]
    width: Optional[str]
    height: Optional[str]

    def to_bounds(self) -> Optional[Bounds]:
        values: List[float] = []
        for raw in (self.x, self.y, self.width, self.height):
            if raw is None:
                return None
            try:
                value = float(raw)
            except ValueError:
                return None
            if not math.isfinite(value):
                return None
            values.append(value)
        return Bounds(*values)


@dataclass(frozen=True)
class AndroidBounds:
    """Android scheme: a single "[x1,y1][x2,y2]" string (integers)."""
    raw: str

    def to_bounds(self) -> Optional[Bounds]:
        match = _ANDROID_BOUNDS_RE.match(self.raw)
        if not match:
            return None
        x1, y1, x2, y2 = (int(g) for g in match.groups())
        return Bounds(x1, y1, x2 - x1, y2 - y1)


BoundsSource = Union[IosBounds, AndroidBounds]


def bounds_source(element: ET.Element) -> Optional[BoundsSource]:
    """Picks the bounds scheme for a node; the two schemes are never mixed."""
    attrib = element.attrib
    if "x" in attrib:
        return IosBounds(attrib.get("x"), attrib.get("y"), attrib.get("width"), attrib.get("height"))
    if attrib.get("bounds"):
        return AndroidBounds(attrib["bounds"])
    return None


def detect_platform(document: Optional[ET.Element]) -> Optional[str]:
    """Guesses the platform from the document's root tag (used for offline dumps)."""
    if document is None:
        return None
    tag = document.tag
    if tag == IOS_DOCUMENT_TAG or tag.startswith(IOS_TYPE_PREFIX):
        return IOS_PLATFORM
    if tag in (ANDROID_DOCUMENT_TAG, ANDROID_NODE_TAG):
        return ANDROID_PLATFORM
    return None


class IosSchema:
    """Root lookup for XCUITest sources: <AppiumAUT><XCUIElementTypeApplication ...>."""

    @staticmethod
    def locate_root(document: ET.Element) -> Optional[ET.Element]:
        if document.tag == IOS_DOCUMENT_TAG:
            return document.find(IOS_APPLICATION_TAG)
        return None


class AndroidSchema:
    """Root lookup for UiAutomator dumps: <hierarchy><node ...>."""

    @staticmethod
    def locate_root(document: ET.Element) -> Optional[ET.Element]:
        if document.tag == ANDROID_DOCUMENT_TAG:
            return document.find(ANDROID_NODE_TAG)
        return None


class HierarchyParser:
    """
    Static parser engine for page sources.
    """

    @staticmethod
    def locate_root(document: ET.Element) -> ET.Element:
        """
        Finds the element the tree is built from.

        Tries the iOS path and the Android path, then falls back to the document element
        itself (a bare application or node dump).
        """
        for schema in (IosSchema, AndroidSchema):
            root = schema.locate_root(document)
            if root is not None:
                return root
        return document

    @staticmethod
    def parse(document: Optional[ET.Element]) -> Optional[ElementNode]:
        """
        Builds the ElementNode tree from an already deserialized document.

        Args:
            document (Optional[ET.Element]): The document root element.

        Returns:
            Optional[ElementNode]: The tree, or None when the root's own bounds are invalid.
        """
        if document is None:
            return None
        root = HierarchyParser.locate_root(document)
        stats = {"kept": 0, "dropped": 0}
        tree = HierarchyParser._build(root, stats)
        logger.debug("Hierarchy parsed: %d nodes kept, %d dropped", stats["kept"], stats["dropped"])
        return tree

    @staticmethod
    def _build(root: ET.Element, stats: dict) -> Optional[ElementNode]:
        """
        Post-order walk with an explicit stack: a node is created once all of its
        children are. Children are evaluated even when their parent ends up dropped.
        """
        stack = [(root, iter(root), [])]
        tree: Optional[ElementNode] = None
        while stack:
            element, pending, children = stack[-1]
            child_element = next(pending, None)
            if child_element is not None:
                stack.append((child_element, iter(child_element), []))
                continue
            stack.pop()
            node = HierarchyParser._make_node(element, children, stats)
            if stack:
                if node is not None:
                    stack[-1][2].append(node)
            else:
                tree = node
        return tree

    @staticmethod
    def _make_node(element: ET.Element, children: List[ElementNode], stats: dict) -> Optional[ElementNode]:
        source = bounds_source(element)
        bounds = source.to_bounds() if source is not None else None
        if bounds is None:
            stats["dropped"] += 1
            return None

        stats["kept"] += 1
        return ElementNode(
            name=HierarchyParser._extract_name(element),
            element_type=HierarchyParser._extract_type(element),
            bounds=bounds,
            children=tuple(children),
            attributes=tuple(element.attrib.items()),
        )

    @staticmethod
    def _extract_name(element: ET.Element) -> Optional[str]:
        for key in NAME_ATTRIBUTES:
            value = element.get(key)
            if value:
                return value
        return None

    @staticmethod
    def _extract_type(element: ET.Element) -> str:
        for key in TYPE_ATTRIBUTES:
            value = element.get(key)
            if value:
                return value
        return UNKNOWN_TYPE

    @staticmethod
    def _sanitize_xml(raw: str) -> str:
        """
        Trims junk before the first tag and drops the XML declaration.
        """
        text = raw.strip()
        first_tag = text.find("<")
        if first_tag > 0:
            text = text[first_tag:]
        return re.sub(r"<\?xml.*?\?>", "", text, count=1).strip()

    @staticmethod
    def load_document(source: Union[str, bytes]) -> Optional[ET.Element]:
        """
        Deserializes XML text into an ElementTree document, or None when it is not XML.
        """
        if isinstance(source, bytes):
            source = source.decode("utf-8", errors="replace")
        text = HierarchyParser._sanitize_xml(source or "")
        if not text:
            return None
        try:
            return ET.fromstring(text)
        except ET.ParseError as e:
            logger.warning("Page source is not valid XML: %s", e)
            return None

    @staticmethod
    def parse_xml(source: Union[str, bytes]) -> Tuple[Optional[ElementNode], Optional[str]]:
        """
        Parses raw page source text.

        Args:
            source (Union[str, bytes]): XML content as returned by the automation server.

        Returns:
            Tuple[Optional[ElementNode], Optional[str]]:
                - Root of the parsed tree (or None).
                - The platform guessed from the document ("iOS", "Android" or None).
        """
        document = HierarchyParser.load_document(source)
        return HierarchyParser.parse(document), detect_platform(document)
