"""
Hit Tester Module.

Resolves a click on the canvas to the most specific element under it.
"""

import logging
from typing import List, Optional

from hierarchy_inspector.coordinate_reconciler import Point, ScaleTransform
from hierarchy_inspector.element_tree import ElementNode, iter_nodes

logger = logging.getLogger(__name__)


def elements_at(root: Optional[ElementNode], logical_point: Point) -> List[ElementNode]:
    """
    Every non-empty node whose logical box contains the point, in pre-order.
    """
    px, py = logical_point
    return [
        node for node in iter_nodes(root)
        if not node.bounds.is_empty and node.bounds.contains(px, py)
    ]


def hit_test(root: Optional[ElementNode], render_point: Point, transform: ScaleTransform) -> Optional[ElementNode]:
    """
    Finds the element under a point of the render target.

    The last match in pre-order wins: children come after their parent, and later
    siblings after earlier ones, so document order stands in for paint order. This is
    an approximation, not a real z-order computation.

    Args:
        root (Optional[ElementNode]): Current tree.
        render_point (Point): Click position in render-target pixels.
        transform (ScaleTransform): The transform used to draw the overlay.

    Returns:
        Optional[ElementNode]: The hit, or None when nothing is under the point.
    """
    logical_point = transform.to_logical(render_point)
    matches = elements_at(root, logical_point)
    logger.debug(
        "Hit test at (%.1f, %.1f) -> logical (%.1f, %.1f): %d matches",
        render_point[0], render_point[1], logical_point[0], logical_point[1], len(matches),
    )
    if not matches:
        return None
    return matches[-1]
