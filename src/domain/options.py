from __future__ import annotations

from .taxonomy import Forest, TaxonomyOption
from .tree import walk

DEFAULT_INDENT = "  "


def flatten_options(forest: Forest, indent: str = DEFAULT_INDENT) -> list[TaxonomyOption]:
    """Pre-order list of ``(indented label, type key, id)`` for flat select widgets."""
    return [
        TaxonomyOption(label=f"{indent * depth}{node.name}", value=node.type_key, id=node.id)
        for node, depth in walk(forest)
    ]


def filter_options(options: list[TaxonomyOption], term: str | None) -> list[TaxonomyOption]:
    if not term or not term.strip():
        return list(options)
    needle = term.casefold()
    return [option for option in options if needle in option.label.casefold()]
