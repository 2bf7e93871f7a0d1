"""
Unit tests for the Hierarchy Parser module.
"""
import xml.etree.ElementTree as ET

from hierarchy_inspector.element_tree import Bounds, count_nodes, flatten
from hierarchy_inspector.hierarchy_parser import (
    ANDROID_PLATFORM, IOS_PLATFORM, AndroidBounds, HierarchyParser, IosBounds, detect_platform
)

IOS_SOURCE = """<?xml version="1.0" encoding="UTF-8"?>
<AppiumAUT>
  <XCUIElementTypeApplication type="XCUIElementTypeApplication" name="Settings" x="0" y="0" width="390" height="844">
    <XCUIElementTypeButton type="XCUIElementTypeButton" name="Login" label="Login" x="10.5" y="20" width="100" height="44"/>
    <XCUIElementTypeStaticText type="XCUIElementTypeStaticText" value="Welcome" x="10" y="80" width="200" height="20"/>
  </XCUIElementTypeApplication>
</AppiumAUT>"""

ANDROID_SOURCE = """<hierarchy rotation="0">
  <node class="android.widget.FrameLayout" bounds="[0,0][1080,2340]">
    <node class="android.widget.Button" text="OK" resource-id="com.app:id/ok" bounds="[100,200][300,260]"/>
  </node>
</hierarchy>"""


class TestHierarchyParser:
    def test_ios_source(self):
        """iOS nodes take their bounds from the four numeric attributes."""
        root, platform = HierarchyParser.parse_xml(IOS_SOURCE)

        assert platform == IOS_PLATFORM
        assert root is not None
        assert root.element_type == "XCUIElementTypeApplication"
        assert root.name == "Settings"
        assert root.bounds == Bounds(0, 0, 390, 844)
        button, text = root.children
        assert button.bounds == Bounds(10.5, 20, 100, 44)
        assert button.name == "Login"
        # No name attribute, no text: name stays empty
        assert text.name is None

    def test_android_source(self):
        """Android bounds strings become x/y/width/height."""
        root, platform = HierarchyParser.parse_xml(ANDROID_SOURCE)

        assert platform == ANDROID_PLATFORM
        assert root.element_type == "android.widget.FrameLayout"
        assert root.bounds == Bounds(0, 0, 1080, 2340)
        button = root.children[0]
        assert button.bounds == Bounds(100, 200, 200, 60)
        assert button.name == "OK"
        assert button.attribute("resource-id") == "com.app:id/ok"

    def test_invalid_child_dropped_with_subtree(self):
        """A node with unreadable bounds is left out together with its descendants."""
        xml = ('<hierarchy><node class="Root" bounds="[0,0][100,100]">'
               '<node class="Broken" bounds="garbage">'
               '<node class="Inner" bounds="[0,0][10,10]"/></node>'
               '<node class="Kept" bounds="[0,0][50,50]"/>'
               '</node></hierarchy>')
        root, _ = HierarchyParser.parse_xml(xml)

        assert [n.element_type for n in flatten(root)] == ["Root", "Kept"]

    def test_invalid_root_bounds(self):
        """An invalid root means no tree at all."""
        xml = '<hierarchy><node class="Root" bounds="[0,0]"><node bounds="[0,0][10,10]"/></node></hierarchy>'
        root, platform = HierarchyParser.parse_xml(xml)

        assert root is None
        assert platform == ANDROID_PLATFORM

    def test_ios_missing_dimension(self):
        xml = '<AppiumAUT><XCUIElementTypeApplication x="0" y="0" width="10"/></AppiumAUT>'
        root, _ = HierarchyParser.parse_xml(xml)
        assert root is None

    def test_malformed_xml(self):
        """Test resilience against bad XML."""
        root, platform = HierarchyParser.parse_xml('<hierarchy><node bounds="...">')

        assert root is None
        assert platform is None

    def test_empty_source(self):
        assert HierarchyParser.parse_xml("") == (None, None)
        assert HierarchyParser.parse(None) is None

    def test_utf8_encoding(self):
        """Test parsing of content with special characters."""
        xml = b'<hierarchy><node text="Men\xc3\xbc" bounds="[0,0][100,100]" /></hierarchy>'
        root, _ = HierarchyParser.parse_xml(xml)

        assert root is not None
        assert root.name == "Menü"

    def test_leading_junk_is_ignored(self):
        xml = 'UI hierchary dumped to: /dev/tty<hierarchy><node bounds="[0,0][5,5]"/></hierarchy>'
        root, _ = HierarchyParser.parse_xml(xml)
        assert root is not None

    def test_reparse_is_structurally_equal(self):
        """Parsing the same source twice yields equal trees."""
        first, _ = HierarchyParser.parse_xml(ANDROID_SOURCE)
        second, _ = HierarchyParser.parse_xml(ANDROID_SOURCE)

        assert first == second
        assert first is not second
        assert count_nodes(first) == 2

    def test_name_priority(self):
        """name > text > content-desc > resource-id."""
        xml = ('<hierarchy><node bounds="[0,0][9,9]" text="Text" content-desc="Desc" resource-id="id">'
               '<node bounds="[0,0][1,1]" content-desc="Desc" resource-id="id"/>'
               '<node bounds="[0,0][1,1]" resource-id="id"/>'
               '<node bounds="[0,0][1,1]" text="" content-desc="Desc"/>'
               '</node></hierarchy>')
        root, _ = HierarchyParser.parse_xml(xml)

        assert root.name == "Text"
        assert [c.name for c in root.children] == ["Desc", "id", "Desc"]

    def test_type_priority(self):
        xml = ('<hierarchy><node bounds="[0,0][9,9]" type="TypeAttr" class="ClassAttr">'
               '<node bounds="[0,0][1,1]" class="ClassAttr"/>'
               '<node bounds="[0,0][1,1]"/>'
               '</node></hierarchy>')
        root, _ = HierarchyParser.parse_xml(xml)

        assert root.element_type == "TypeAttr"
        assert [c.element_type for c in root.children] == ["ClassAttr", "Unknown"]

    def test_tag_is_not_a_type(self):
        """Without a type or class attribute the type is "Unknown", whatever the tag."""
        xml = '<AppiumAUT><XCUIElementTypeApplication x="0" y="0" width="1" height="1"/></AppiumAUT>'
        root, _ = HierarchyParser.parse_xml(xml)
        assert root.element_type == "Unknown"

    def test_bare_application_root(self):
        xml = '<XCUIElementTypeApplication x="0" y="0" width="10" height="10"/>'
        root, platform = HierarchyParser.parse_xml(xml)

        assert root.bounds == Bounds(0, 0, 10, 10)
        assert platform == IOS_PLATFORM

    def test_unknown_wrapper_without_bounds(self):
        """An unrecognized document element is the root itself; without bounds there is no tree."""
        xml = '<dump><node bounds="[1,2][3,4]"/><node bounds="[0,0][9,9]"/></dump>'
        root, platform = HierarchyParser.parse_xml(xml)

        assert root is None
        assert platform is None

    def test_bare_node_root_keeps_children(self):
        xml = ('<node class="Root" bounds="[0,0][100,100]">'
               '<node class="Child" bounds="[0,0][10,10]"/></node>')
        root, platform = HierarchyParser.parse_xml(xml)

        assert [n.element_type for n in flatten(root)] == ["Root", "Child"]
        assert platform == ANDROID_PLATFORM

    def test_bare_window_root(self):
        xml = ('<XCUIElementTypeWindow type="XCUIElementTypeWindow" x="0" y="0" width="390" height="844">'
               '<XCUIElementTypeButton type="XCUIElementTypeButton" x="0" y="0" width="10" height="10"/>'
               '</XCUIElementTypeWindow>')
        root, platform = HierarchyParser.parse_xml(xml)

        assert root.element_type == "XCUIElementTypeWindow"
        assert root.children[0].element_type == "XCUIElementTypeButton"
        assert platform == IOS_PLATFORM

    def test_deep_source(self):
        """Deeply nested sources parse without hitting the recursion limit."""
        depth = 5000
        xml = "<hierarchy>" + '<node bounds="[0,0][10,10]">' * depth + "</node>" * depth + "</hierarchy>"
        root, _ = HierarchyParser.parse_xml(xml)

        assert count_nodes(root) == depth

    def test_children_keep_document_order(self):
        xml = ('<AppiumAUT><XCUIElementTypeApplication x="0" y="0" width="9" height="9">'
               '<XCUIElementTypeButton name="a" x="0" y="0" width="1" height="1"/>'
               '<XCUIElementTypeOther name="b" x="0" y="0" width="1" height="1"/>'
               '<XCUIElementTypeButton name="c" x="0" y="0" width="1" height="1"/>'
               '</XCUIElementTypeApplication></AppiumAUT>')
        root, _ = HierarchyParser.parse_xml(xml)
        assert [c.name for c in root.children] == ["a", "b", "c"]


class TestBoundsSchemes:
    def test_ios_bounds(self):
        assert IosBounds("1", "2.5", "3", "4").to_bounds() == Bounds(1, 2.5, 3, 4)
        assert IosBounds("1", "x", "3", "4").to_bounds() is None
        assert IosBounds("1", "2", "nan", "4").to_bounds() is None
        assert IosBounds("1", "2", None, "4").to_bounds() is None

    def test_android_bounds(self):
        assert AndroidBounds("[0,0][1080,100]").to_bounds() == Bounds(0, 0, 1080, 100)
        assert AndroidBounds("[-5,0][5,10]").to_bounds() == Bounds(-5, 0, 10, 10)
        assert AndroidBounds("[0,0][1.5,2]").to_bounds() is None
        assert AndroidBounds("").to_bounds() is None

    def test_detect_platform(self):
        assert detect_platform(ET.fromstring("<AppiumAUT/>")) == IOS_PLATFORM
        assert detect_platform(ET.fromstring("<hierarchy/>")) == ANDROID_PLATFORM
        assert detect_platform(ET.fromstring("<other/>")) is None
        assert detect_platform(None) is None
