"""Forest construction and read-only projections over taxonomy trees.

Every function here takes a forest (or flat record list) and returns a new
structure; input nodes are never modified. Traversals use an explicit stack so
that tree depth is bounded by memory rather than the interpreter's recursion
limit.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Callable, Iterable, Iterator

from .taxonomy import Forest, TaxonomyId, TaxonomyNode, TaxonomyRecord

logger = logging.getLogger(__name__)


def build_forest(records: Iterable[TaxonomyRecord] | None) -> Forest:
    """Turn a flat parent-referencing list into a forest.

    Records whose parent is missing, zero or unknown become roots. Sibling and
    root order follow the input order. Records stuck in a parent cycle are
    reattached by promoting one member of each cycle to root.
    """
    if not records:
        return []
    records = list(records)

    index_by_id: dict[TaxonomyId, int] = {}
    duplicates: set[int] = set()
    for index, record in enumerate(records):
        if record.id is None:
            continue
        if record.id in index_by_id:
            logger.warning("Duplicate taxonomy id=%s at position %d; keeping the first occurrence", record.id, index)
            duplicates.add(index)
            continue
        index_by_id[record.id] = index

    children_of: dict[int, list[int]] = defaultdict(list)
    root_indexes: list[int] = []
    for index, record in enumerate(records):
        if index in duplicates:
            continue
        parent_index = index_by_id.get(record.parent_id) if record.parent_id else None
        if parent_index is None:
            root_indexes.append(index)
        else:
            children_of[parent_index].append(index)

    order = _preorder(root_indexes, children_of)
    if len(order) + len(duplicates) < len(records):
        root_indexes = _break_cycles(records, index_by_id, root_indexes, children_of, set(order), duplicates)
        order = _preorder(root_indexes, children_of)

    # Reverse pre-order visits every child before its parent.
    built: dict[int, TaxonomyNode] = {}
    for index in reversed(order):
        children = [built[child] for child in children_of.get(index, ())]
        built[index] = TaxonomyNode.from_record(records[index], children)

    return [built[index] for index in root_indexes]


def _preorder(root_indexes: list[int], children_of: dict[int, list[int]]) -> list[int]:
    order: list[int] = []
    stack = list(reversed(root_indexes))
    while stack:
        index = stack.pop()
        order.append(index)
        stack.extend(reversed(children_of.get(index, ())))
    return order


def _break_cycles(
    records: list[TaxonomyRecord],
    index_by_id: dict[TaxonomyId, int],
    root_indexes: list[int],
    children_of: dict[int, list[int]],
    reached: set[int],
    duplicates: set[int],
) -> list[int]:
    roots = list(root_indexes)
    for start in range(len(records)):
        if start in reached or start in duplicates:
            continue

        # An unreached record always has a resolvable, equally unreached parent,
        # so following parents must eventually revisit a record.
        trail: list[int] = []
        seen: set[int] = set()
        current = start
        while current not in seen:
            seen.add(current)
            trail.append(current)
            current = index_by_id[records[current].parent_id]  # type: ignore[index]

        cycle = trail[trail.index(current) :]
        promoted = min(cycle)
        parent_index = index_by_id[records[promoted].parent_id]  # type: ignore[index]
        children_of[parent_index].remove(promoted)
        roots.append(promoted)
        reached.update(_preorder([promoted], children_of))
        logger.warning(
            "Parent cycle among taxonomy ids %s; promoting id=%s to root",
            [records[index].id for index in cycle],
            records[promoted].id,
        )

    return sorted(roots)


def walk(forest: Forest) -> Iterator[tuple[TaxonomyNode, int]]:
    """Yield ``(node, depth)`` pairs in pre-order, roots at depth 0."""
    stack: list[tuple[TaxonomyNode, int]] = [(node, 0) for node in reversed(forest)]
    while stack:
        node, depth = stack.pop()
        yield node, depth
        if node.children:
            stack.extend((child, depth + 1) for child in reversed(node.children))


def find_node(forest: Forest, node_id: TaxonomyId | int | None) -> TaxonomyNode | None:
    if node_id is None:
        return None
    for node, _ in walk(forest):
        if node.id == node_id:
            return node
    return None


def collect_ids(forest: Forest) -> list[TaxonomyId | None]:
    return [node.id for node, _ in walk(forest)]


def count_nodes(forest: Forest) -> int:
    return sum(1 for _ in walk(forest))


def tree_depth(forest: Forest) -> int:
    """Number of levels in the forest; 0 when empty."""
    return max((depth + 1 for _, depth in walk(forest)), default=0)


def exclude_subtree(forest: Forest, node_id: TaxonomyId | int | None) -> Forest:
    """Drop ``node_id`` and its descendants, e.g. to list valid new parents while editing it."""
    if not node_id:
        return list(forest)
    return _prune(forest, skip=lambda node: node.id == node_id, keep=lambda node, kept: True)


def search_forest(forest: Forest, term: str | None) -> Forest:
    """Keep nodes whose name contains ``term`` (case-insensitive) along with all their ancestors."""
    if not term or not term.strip():
        return list(forest)
    needle = term.casefold()
    return _prune(
        forest,
        skip=lambda node: False,
        keep=lambda node, kept: needle in node.name.casefold() or bool(kept),
    )


def _prune(
    forest: Forest,
    *,
    skip: Callable[[TaxonomyNode], bool],
    keep: Callable[[TaxonomyNode, Forest], bool],
) -> Forest:
    """Rebuild ``forest`` bottom-up.

    ``skip`` drops a node before its subtree is visited; ``keep`` decides, once
    a node's children have been rebuilt, whether the node itself survives.
    """
    result: Forest = []
    # Frames of (node being rebuilt, its unvisited children, its surviving children).
    # The bottom frame stands for the forest itself.
    stack: list[tuple[TaxonomyNode | None, Iterator[TaxonomyNode], Forest]] = [(None, iter(forest), result)]
    while stack:
        node, pending, kept = stack[-1]
        child = next(pending, None)
        if child is not None:
            if not skip(child):
                stack.append((child, iter(child.children or ()), []))
            continue

        stack.pop()
        if node is not None and keep(node, kept):
            stack[-1][2].append(node.model_copy(update={"children": kept or None}))

    return result


__all__ = [
    "build_forest",
    "collect_ids",
    "count_nodes",
    "exclude_subtree",
    "find_node",
    "search_forest",
    "tree_depth",
    "walk",
]
