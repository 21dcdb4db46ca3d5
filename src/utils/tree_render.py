from __future__ import annotations

from typing import Iterable

from domain.expand_state import ExpandStateTracker
from domain.taxonomy import TaxonomyNode, TaxonomyOption, TaxonomyStatus

from .formatting import format_status

INDENT = "  "


def format_tree_lines(rows: Iterable[tuple[TaxonomyNode, int]], tracker: ExpandStateTracker) -> list[str]:
    lines: list[str] = []
    for node, depth in rows:
        if node.children:
            marker = "v" if tracker.is_expanded(node.id) else ">"
        else:
            marker = " "
        suffix = "" if node.status == TaxonomyStatus.ENABLED else f" [{format_status(node.status)}]"
        lines.append(f"{INDENT * depth}{marker} {node.name} ({node.type_key}, id={node.id}){suffix}")
    return lines


def render_tree(rows: Iterable[tuple[TaxonomyNode, int]], tracker: ExpandStateTracker) -> None:
    lines = format_tree_lines(rows, tracker)
    if not lines:
        print("No data")
        return
    for line in lines:
        print(line)


def render_options(options: list[TaxonomyOption]) -> None:
    if not options:
        print("No data")
        return
    width = max(len(option.label) for option in options)
    for option in options:
        print(f"{option.label:<{width}}  {option.value}")
