from __future__ import annotations

from typing import Iterator

from .taxonomy import Forest, TaxonomyId, TaxonomyNode
from .tree import walk


class ExpandStateTracker:
    """Tracks which branches of a taxonomy tree widget are open.

    The tracked set is derived from a particular forest. After the forest is
    rebuilt call ``refresh`` so ids from the previous version are dropped
    rather than patched.
    """

    def __init__(self, *, all_expanded: bool = True) -> None:
        self._expanded: set[TaxonomyId] = set()
        self.all_expanded = all_expanded

    @property
    def expanded_ids(self) -> frozenset[TaxonomyId]:
        return frozenset(self._expanded)

    def is_expanded(self, node_id: TaxonomyId | None) -> bool:
        return node_id in self._expanded

    def toggle(self, node_id: TaxonomyId) -> None:
        if node_id in self._expanded:
            self._expanded.remove(node_id)
        else:
            self._expanded.add(node_id)

    def expand_all(self, forest: Forest) -> None:
        # Only branches get a disclosure control, so leaves are never tracked.
        self._expanded = {node.id for node, _ in walk(forest) if node.children and node.id is not None}

    def collapse_all(self) -> None:
        self._expanded = set()

    def toggle_all(self, forest: Forest) -> None:
        self.all_expanded = not self.all_expanded
        self.refresh(forest)

    def refresh(self, forest: Forest) -> None:
        if self.all_expanded:
            self.expand_all(forest)
        else:
            self.collapse_all()

    def visible_nodes(self, forest: Forest) -> Iterator[tuple[TaxonomyNode, int]]:
        """Rows a tree widget shows: children appear only under expanded nodes."""
        stack: list[tuple[TaxonomyNode, int]] = [(node, 0) for node in reversed(forest)]
        while stack:
            node, depth = stack.pop()
            yield node, depth
            if node.children and self.is_expanded(node.id):
                stack.extend((child, depth + 1) for child in reversed(node.children))
