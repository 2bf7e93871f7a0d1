"""
Selection Module.

Single shared selection for the tree dock and the canvas. The selected node is kept as
its index path inside the current tree, never as an owning reference, and is cleared
whenever a new tree replaces the old one.
"""

from typing import Optional, Tuple

from hierarchy_inspector.element_tree import ElementNode, node_path, resolve_path


class SelectionState:
    def __init__(self) -> None:
        self._tree: Optional[ElementNode] = None
        self._path: Optional[Tuple[int, ...]] = None

    @property
    def tree(self) -> Optional[ElementNode]:
        return self._tree

    @property
    def path(self) -> Optional[Tuple[int, ...]]:
        return self._path

    @property
    def current(self) -> Optional[ElementNode]:
        if self._path is None:
            return None
        return resolve_path(self._tree, self._path)

    def replace_tree(self, tree: Optional[ElementNode]) -> None:
        """Installs a freshly parsed tree. Node identity does not survive re-parsing."""
        self._tree = tree
        self._path = None

    def select(self, node: Optional[ElementNode]) -> Optional[ElementNode]:
        """
        Selects a node of the current tree. Anything else (None, or a node from another
        tree) clears the selection.
        """
        self._path = node_path(self._tree, node) if node is not None else None
        return self.current

    def clear(self) -> None:
        self._path = None

    def is_selected(self, node: ElementNode) -> bool:
        return self._path is not None and self.current is node
