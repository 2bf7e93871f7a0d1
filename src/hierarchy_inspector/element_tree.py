"""
Element Tree Module.

Platform-neutral model of a UI hierarchy: `Bounds` and `ElementNode`, plus the
tree helpers shared by the canvas, the tree dock and the hit tester (pre-order
flattening, node counting, structural paths and display labels).
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

UNKNOWN_TYPE = "Unknown"


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned box in logical (automation server) units."""
    x: float
    y: float
    width: float
    height: float

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def contains(self, px: float, py: float) -> bool:
        """Inclusive on every edge."""
        return self.x <= px <= self.x + self.width and self.y <= py <= self.y + self.height


@dataclass(frozen=True)
class ElementNode:
    """
    One UI element of a parsed hierarchy.

    Nodes are immutable and compared structurally; a fresh tree is built on every
    hierarchy refresh.
    """
    name: Optional[str]
    element_type: str
    bounds: Bounds
    children: Tuple["ElementNode", ...] = ()
    attributes: Tuple[Tuple[str, str], ...] = field(default=(), compare=False)

    def attribute(self, key: str, default: str = "") -> str:
        for k, v in self.attributes:
            if k == key:
                return v
        return default


def flatten(node: Optional[ElementNode]) -> List[ElementNode]:
    """
    Depth-first, pre-order linearization (parent before its children).

    Args:
        node (Optional[ElementNode]): Root of the tree, may be None.

    Returns:
        List[ElementNode]: Every node of the tree; empty for None.
    """
    return list(iter_nodes(node))


def iter_nodes(node: Optional[ElementNode]) -> Iterator[ElementNode]:
    if node is None:
        return
    # Explicit stack keeps very deep hierarchies off the recursion limit.
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def count_nodes(node: Optional[ElementNode]) -> int:
    return sum(1 for _ in iter_nodes(node))


def node_path(root: Optional[ElementNode], target: ElementNode) -> Optional[Tuple[int, ...]]:
    """
    Returns the child-index path from `root` to `target` (matched by identity),
    or None when the node does not belong to this tree.
    """
    if root is None:
        return None
    stack: List[Tuple[ElementNode, Tuple[int, ...]]] = [(root, ())]
    while stack:
        current, path = stack.pop()
        if current is target:
            return path
        for i, child in enumerate(current.children):
            stack.append((child, path + (i,)))
    return None


def resolve_path(root: Optional[ElementNode], path: Tuple[int, ...]) -> Optional[ElementNode]:
    current = root
    for index in path:
        if current is None or index < 0 or index >= len(current.children):
            return None
        current = current.children[index]
    return current


_TYPE_PREFIXES = ("XCUIElementType", "android.widget.", "android.view.")

_TYPE_TAGS: Dict[str, str] = {
    # iOS
    "XCUIElementTypeApplication": "App",
    "XCUIElementTypeWindow": "Win",
    "XCUIElementTypeNavigationBar": "Nav",
    "XCUIElementTypeButton": "Btn",
    "XCUIElementTypeStaticText": "Text",
    "XCUIElementTypeTextField": "Input",
    "XCUIElementTypeSecureTextField": "SecInput",
    "XCUIElementTypeTextView": "TextView",
    "XCUIElementTypeImage": "Img",
    "XCUIElementTypeScrollView": "Scroll",
    "XCUIElementTypeTable": "Table",
    "XCUIElementTypeCell": "Cell",
    "XCUIElementTypeCollectionView": "Grid",
    "XCUIElementTypeTabBar": "Tabs",
    "XCUIElementTypeTabBarItem": "Tab",
    "XCUIElementTypeSearchField": "Search",
    "XCUIElementTypeSwitch": "Switch",
    "XCUIElementTypeSlider": "Slider",
    "XCUIElementTypePicker": "Picker",
    "XCUIElementTypeAlert": "Alert",
    "XCUIElementTypeWebView": "Web",
    "XCUIElementTypeLink": "Link",
    "XCUIElementTypeToolbar": "Toolbar",
    "XCUIElementTypeOther": "Other",
    # Android
    "android.widget.LinearLayout": "Linear",
    "android.widget.RelativeLayout": "Relative",
    "android.widget.FrameLayout": "Frame",
    "android.widget.ScrollView": "Scroll",
    "android.widget.ListView": "List",
    "android.widget.GridView": "Grid",
    "android.widget.TextView": "Text",
    "android.widget.EditText": "Input",
    "android.widget.Button": "Btn",
    "android.widget.ImageView": "Img",
    "android.widget.ImageButton": "ImgBtn",
    "android.widget.CheckBox": "Check",
    "android.widget.RadioButton": "Radio",
    "android.widget.Switch": "Switch",
    "android.widget.ProgressBar": "Progress",
    "android.widget.Spinner": "Spinner",
    "android.webkit.WebView": "Web",
    "android.view.View": "View",
    "android.view.ViewGroup": "Group",
}


def short_type(element_type: str) -> str:
    """'XCUIElementTypeButton' -> 'Button', 'android.widget.TextView' -> 'TextView'."""
    for prefix in _TYPE_PREFIXES:
        if element_type.startswith(prefix):
            return element_type[len(prefix):] or element_type
    return element_type


def type_tag(element_type: str) -> str:
    return _TYPE_TAGS.get(element_type, "Elem")


def display_name(node: ElementNode) -> str:
    label = short_type(node.element_type or UNKNOWN_TYPE)
    name = (node.name or "").strip()
    if name and name != node.element_type:
        return f'{label} "{name}"'
    return label
