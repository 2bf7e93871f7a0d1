"""
Selector Synthesizer Module.

Generates Appium locators for a selected `ElementNode`, most robust first:
accessibility id style selectors, then XPath variants (plus iOS predicate and
class chain), and raw coordinates last as a brittle fallback.
"""

import json
from dataclasses import dataclass
from typing import List, Optional

from hierarchy_inspector.element_tree import UNKNOWN_TYPE, ElementNode
from hierarchy_inspector.hierarchy_parser import IOS_PLATFORM, IOS_TYPE_PREFIX

STRATEGY_ACCESSIBILITY_ID = "accessibility id"
STRATEGY_CLASS_NAME = "class name"
STRATEGY_ID = "id"
STRATEGY_XPATH = "xpath"
STRATEGY_IOS_PREDICATE = "-ios predicate string"
STRATEGY_IOS_CLASS_CHAIN = "-ios class chain"
STRATEGY_COORDINATES = "coordinates"

CODE_FORMATS = ("Python (Appium)", "Java (Appium)", "Raw")

_PYTHON_BY = {
    STRATEGY_ACCESSIBILITY_ID: "AppiumBy.ACCESSIBILITY_ID",
    STRATEGY_CLASS_NAME: "AppiumBy.CLASS_NAME",
    STRATEGY_ID: "AppiumBy.ID",
    STRATEGY_XPATH: "AppiumBy.XPATH",
    STRATEGY_IOS_PREDICATE: "AppiumBy.IOS_PREDICATE",
    STRATEGY_IOS_CLASS_CHAIN: "AppiumBy.IOS_CLASS_CHAIN",
}

_JAVA_BY = {
    STRATEGY_ACCESSIBILITY_ID: "AppiumBy.accessibilityId",
    STRATEGY_CLASS_NAME: "AppiumBy.className",
    STRATEGY_ID: "AppiumBy.id",
    STRATEGY_XPATH: "AppiumBy.xpath",
    STRATEGY_IOS_PREDICATE: "AppiumBy.iOSNsPredicateString",
    STRATEGY_IOS_CLASS_CHAIN: "AppiumBy.iOSClassChain",
}


@dataclass(frozen=True)
class SelectorResult:
    label: str
    value: str
    description: str
    strategy: str


class LocatorUtils:
    """Utility functions for string escaping in locators."""

    @staticmethod
    def escape_xpath_string(text: str) -> str:
        """
        Quotes text as an XPath literal.
        Example: "User's" -> "User's" (double quotes), 'Say "hi"' -> 'Say "hi"',
        and text holding both kinds -> concat('Say "hi" to ', "'", 'em').
        """
        if "'" not in text:
            return f"'{text}'"
        if '"' not in text:
            return f'"{text}"'
        parts = text.split("'")
        args = [f"'{p}'" for p in parts]
        concat = ", \"'\", ".join(args)
        return f"concat({concat})"

    @staticmethod
    def escape_predicate_string(text: str) -> str:
        escaped = text.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def _ios_selectors(name: Optional[str], element_type: Optional[str]) -> List[SelectorResult]:
    selectors: List[SelectorResult] = []
    if name:
        selectors.append(SelectorResult(
            "Accessibility ID", name, "Recommended for iOS automation", STRATEGY_ACCESSIBILITY_ID))
    if element_type:
        selectors.append(SelectorResult(
            "Class Name", element_type, "Element type selector", STRATEGY_CLASS_NAME))
    if name:
        selectors.append(SelectorResult(
            "XPath (name)", f"//*[@name={LocatorUtils.escape_xpath_string(name)}]",
            "XPath by name attribute", STRATEGY_XPATH))
    if element_type:
        selectors.append(SelectorResult(
            "XPath (type)", f"//{element_type}", "XPath by element type", STRATEGY_XPATH))
    if name and element_type:
        selectors.append(SelectorResult(
            "XPath (combined)", f"//{element_type}[@name={LocatorUtils.escape_xpath_string(name)}]",
            "XPath by type and name", STRATEGY_XPATH))
    if name:
        selectors.append(SelectorResult(
            "Predicate String", f"name == {LocatorUtils.escape_predicate_string(name)}",
            "iOS predicate selector", STRATEGY_IOS_PREDICATE))
    if element_type:
        bare_type = element_type[len(IOS_TYPE_PREFIX):] if element_type.startswith(IOS_TYPE_PREFIX) else element_type
        selectors.append(SelectorResult(
            "Class Chain", f"**/{IOS_TYPE_PREFIX}{bare_type}",
            "iOS class chain selector", STRATEGY_IOS_CLASS_CHAIN))
    return selectors


def _android_selectors(name: Optional[str], element_type: Optional[str]) -> List[SelectorResult]:
    selectors: List[SelectorResult] = []
    if name:
        selectors.append(SelectorResult(
            "Accessibility ID", name, "Content description selector", STRATEGY_ACCESSIBILITY_ID))
    if element_type:
        selectors.append(SelectorResult(
            "Class Name", element_type, "Android class name", STRATEGY_CLASS_NAME))
    if name and ":id/" in name:
        selectors.append(SelectorResult(
            "ID", name.split(":id/", 1)[1], "Android resource ID", STRATEGY_ID))
    if name:
        selectors.append(SelectorResult(
            "XPath (content-desc)", f"//*[@content-desc={LocatorUtils.escape_xpath_string(name)}]",
            "XPath by content description", STRATEGY_XPATH))
    if element_type:
        selectors.append(SelectorResult(
            "XPath (class)", f"//{element_type}", "XPath by class name", STRATEGY_XPATH))
    return selectors


def synthesize(node: ElementNode, platform: Optional[str]) -> List[SelectorResult]:
    """
    Builds the ordered selector list for a node.

    Args:
        node (ElementNode): The selected element.
        platform (Optional[str]): "iOS"; anything else is treated as Android.

    Returns:
        List[SelectorResult]: Best selector first, raw coordinates always last.
    """
    name = node.name or None
    element_type = node.element_type if node.element_type and node.element_type != UNKNOWN_TYPE else None

    if platform == IOS_PLATFORM:
        selectors = _ios_selectors(name, element_type)
    else:
        selectors = _android_selectors(name, element_type)

    selectors.append(SelectorResult(
        "Coordinates",
        f"x: {_format_number(node.bounds.x)}, y: {_format_number(node.bounds.y)}",
        "Element coordinates (not recommended)",
        STRATEGY_COORDINATES,
    ))
    return selectors


def best_selector(selectors: List[SelectorResult]) -> Optional[SelectorResult]:
    return selectors[0] if selectors else None


def format_selector(selector: SelectorResult, code_format: str) -> str:
    """
    Renders a selector as a copy-pasteable snippet ("Python (Appium)", "Java (Appium)"
    or "Raw"). Coordinates become a comment since they are not a locator strategy.
    """
    if code_format.startswith("Python"):
        if selector.strategy == STRATEGY_COORDINATES:
            return f"# tap target {selector.value} (not recommended)"
        return f"driver.find_element({_PYTHON_BY[selector.strategy]}, {json.dumps(selector.value)})"
    if code_format.startswith("Java"):
        if selector.strategy == STRATEGY_COORDINATES:
            return f"// tap target {selector.value} (not recommended)"
        return f"driver.findElement({_JAVA_BY[selector.strategy]}({json.dumps(selector.value)}));"
    return selector.value
