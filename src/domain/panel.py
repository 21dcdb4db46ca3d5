from __future__ import annotations

from typing import Iterable, Iterator

from .expand_state import ExpandStateTracker
from .selection import resolve_selection
from .taxonomy import Forest, TaxonomyId, TaxonomyNode, TaxonomyRecord, TaxonomySelection
from .tree import build_forest, find_node, search_forest


class TaxonomyPanel:
    """State behind the dictionary type tree panel.

    Holds the current forest together with the client-side state derived
    from it (expanded branches, search text, selected id). ``rebuild`` throws
    away the old forest and recomputes everything derived from it.
    """

    def __init__(self, tracker: ExpandStateTracker | None = None) -> None:
        self.forest: Forest = []
        self.tracker = tracker or ExpandStateTracker()
        self.search_term = ""
        self.selected_id: TaxonomyId | None = None

    def rebuild(self, records: Iterable[TaxonomyRecord] | None) -> None:
        self.forest = build_forest(records)
        self.tracker.refresh(self.forest)
        if find_node(self.forest, self.selected_id) is None:
            self.selected_id = None

    @property
    def filtered_forest(self) -> Forest:
        return search_forest(self.forest, self.search_term)

    def rows(self) -> Iterator[tuple[TaxonomyNode, int]]:
        return self.tracker.visible_nodes(self.filtered_forest)

    def click(self, node_id: TaxonomyId) -> TaxonomySelection | None:
        """Select a node; clicking a branch also opens or closes it."""
        selection = resolve_selection(self.forest, node_id)
        if selection is None:
            return None
        if selection.node.children:
            self.tracker.toggle(node_id)
        self.selected_id = node_id
        return selection
