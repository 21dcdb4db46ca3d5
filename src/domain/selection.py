from __future__ import annotations

from .taxonomy import Forest, TaxonomyId, TaxonomySelection, TypeKey
from .tree import find_node


def resolve_selection(forest: Forest, node_id: TaxonomyId | int | None) -> TaxonomySelection | None:
    node = find_node(forest, node_id)
    if node is None:
        return None
    return TaxonomySelection(value=node.type_key, node=node)


def label_for(forest: Forest, node_id: TaxonomyId | int | None) -> str:
    node = find_node(forest, node_id)
    return node.name if node is not None else ""


def default_type_key(forest: Forest, selected_id: TaxonomyId | int | None) -> TypeKey:
    """Type key a new dictionary entry gets when created under the selected category."""
    node = find_node(forest, selected_id)
    return node.type_key if node is not None else TypeKey("")
