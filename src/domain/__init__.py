"""Domain models and the taxonomy tree engine.

This package holds in-memory (Pydantic) taxonomy models and the pure
functions that build and project forests from them. They are independent
from the HTTP client and snapshot persistence so the tree logic can be
tested without either.
"""

__all__ = [
    "expand_state",
    "options",
    "panel",
    "selection",
    "taxonomy",
    "tree",
]
