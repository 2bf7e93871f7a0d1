"""
Unit tests for selector generation.
"""
from hierarchy_inspector.element_tree import Bounds, ElementNode
from hierarchy_inspector.selector_synthesizer import (
    STRATEGY_ACCESSIBILITY_ID, STRATEGY_COORDINATES, LocatorUtils, best_selector, format_selector,
    synthesize
)


def make_node(name, element_type, x=10, y=20):
    return ElementNode(name, element_type, Bounds(x, y, 100, 44))


class TestSynthesize:
    def test_ios_order(self):
        """Most robust selectors first, coordinates last."""
        selectors = synthesize(make_node("Login", "XCUIElementTypeButton"), "iOS")

        assert [s.label for s in selectors] == [
            "Accessibility ID", "Class Name", "XPath (name)", "XPath (type)",
            "XPath (combined)", "Predicate String", "Class Chain", "Coordinates",
        ]
        values = {s.label: s.value for s in selectors}
        assert values["XPath (name)"] == "//*[@name='Login']"
        assert values["XPath (combined)"] == "//XCUIElementTypeButton[@name='Login']"
        assert values["Predicate String"] == 'name == "Login"'
        assert values["Class Chain"] == "**/XCUIElementTypeButton"
        assert values["Coordinates"] == "x: 10, y: 20"

    def test_android_resource_id(self):
        selectors = synthesize(make_node("com.app:id/ok", "android.widget.Button"), "Android")
        values = {s.label: s.value for s in selectors}

        assert values["ID"] == "ok"
        assert values["XPath (content-desc)"] == "//*[@content-desc='com.app:id/ok']"
        assert values["XPath (class)"] == "//android.widget.Button"

    def test_android_without_resource_id(self):
        selectors = synthesize(make_node("OK", "android.widget.Button"), "Android")
        assert "ID" not in [s.label for s in selectors]

    def test_only_coordinates_without_name_or_type(self):
        """Absent attributes never produce selectors; coordinates are always there."""
        selectors = synthesize(make_node(None, "Unknown", x=1.5, y=2), "iOS")

        assert len(selectors) == 1
        assert selectors[0].strategy == STRATEGY_COORDINATES
        assert selectors[0].value == "x: 1.5, y: 2"
        assert selectors[0].description == "Element coordinates (not recommended)"

    def test_best_selector(self):
        selectors = synthesize(make_node("Login", "XCUIElementTypeButton"), "iOS")
        assert best_selector(selectors).strategy == STRATEGY_ACCESSIBILITY_ID
        assert best_selector([]) is None


class TestEscaping:
    def test_xpath_quotes(self):
        assert LocatorUtils.escape_xpath_string("plain") == "'plain'"
        assert LocatorUtils.escape_xpath_string("User's") == '"User\'s"'
        assert LocatorUtils.escape_xpath_string('Say "hi"') == "'Say \"hi\"'"

    def test_xpath_both_quotes(self):
        result = LocatorUtils.escape_xpath_string("Say \"hi\" to 'em")
        assert result == "concat('Say \"hi\" to ', \"'\", 'em')"

    def test_predicate_escaping(self):
        assert LocatorUtils.escape_predicate_string('a"b') == '"a\\"b"'

    def test_xpath_selector_is_escaped(self):
        selectors = synthesize(make_node("User's", "XCUIElementTypeCell"), "iOS")
        values = {s.label: s.value for s in selectors}
        assert values["XPath (name)"] == '//*[@name="User\'s"]'


class TestFormatSelector:
    def test_python(self):
        selector = synthesize(make_node("Login", "XCUIElementTypeButton"), "iOS")[0]
        assert format_selector(selector, "Python (Appium)") == \
            'driver.find_element(AppiumBy.ACCESSIBILITY_ID, "Login")'

    def test_java(self):
        selector = synthesize(make_node("Login", "XCUIElementTypeButton"), "iOS")[0]
        assert format_selector(selector, "Java (Appium)") == \
            'driver.findElement(AppiumBy.accessibilityId("Login"));'

    def test_raw_and_coordinates(self):
        coords = synthesize(make_node(None, "Unknown"), "iOS")[-1]
        assert format_selector(coords, "Raw") == "x: 10, y: 20"
        assert format_selector(coords, "Python (Appium)").startswith("#")
