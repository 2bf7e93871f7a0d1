"""
Unit tests for hit testing on the canvas.
"""
from hierarchy_inspector.coordinate_reconciler import IDENTITY, ScaleTransform
from hierarchy_inspector.element_tree import Bounds, ElementNode
from hierarchy_inspector.hit_tester import elements_at, hit_test


def make_node(name, x, y, w, h, *children):
    return ElementNode(name, "Elem", Bounds(x, y, w, h), tuple(children))


class TestHitTest:
    def setup_method(self):
        self.button = make_node("button", 20, 20, 40, 20)
        self.panel = make_node("panel", 10, 10, 80, 80, self.button)
        self.overlay = make_node("overlay", 50, 50, 40, 40)
        self.root = make_node("root", 0, 0, 100, 100, self.panel, self.overlay)

    def test_most_specific_wins(self):
        """A child is reported over its ancestors."""
        assert hit_test(self.root, (30, 30), IDENTITY) is self.button

    def test_later_sibling_wins(self):
        """Overlapping siblings resolve to the later one in document order."""
        assert hit_test(self.root, (60, 60), IDENTITY) is self.overlay

    def test_miss(self):
        assert hit_test(self.root, (150, 150), IDENTITY) is None
        assert hit_test(None, (0, 0), IDENTITY) is None

    def test_edges_are_inclusive(self):
        assert hit_test(self.root, (100, 100), IDENTITY) is self.root

    def test_zero_size_never_hit(self):
        line = make_node("line", 0, 0, 100, 0)
        root = make_node("root", 0, 0, 100, 100, line)
        assert hit_test(root, (50, 0), IDENTITY) is root

    def test_uses_inverse_transform(self):
        """Render pixels are mapped back to logical units before matching."""
        transform = ScaleTransform(3.0, 3.0)
        assert hit_test(self.root, (90, 90), transform) is self.button

    def test_elements_at_preorder(self):
        hits = elements_at(self.root, (30, 30))
        assert [n.name for n in hits] == ["root", "panel", "button"]
