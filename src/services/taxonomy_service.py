from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable

from clients.dictionary_api import DictionaryApiClient
from db.repositories import TaxonomySnapshotRepository
from domain.options import DEFAULT_INDENT, flatten_options
from domain.taxonomy import Forest, TaxonomyId, TaxonomyOption, TaxonomyRecord
from domain.tree import build_forest, count_nodes, exclude_subtree, find_node

logger = logging.getLogger(__name__)


class TaxonomyEditError(ValueError):
    pass


class TaxonomyCycleError(TaxonomyEditError):
    def __init__(self, *, node_id: TaxonomyId, parent_id: TaxonomyId) -> None:
        self.node_id = node_id
        self.parent_id = parent_id
        super().__init__(f"Cannot move taxonomy id={node_id} under its own descendant id={parent_id}")


class TypeKeyChangeError(TaxonomyEditError):
    def __init__(self, *, node_id: TaxonomyId, current: str, requested: str) -> None:
        self.node_id = node_id
        self.current = current
        self.requested = requested
        super().__init__(f"type_key of taxonomy id={node_id} is immutable ({current!r} -> {requested!r})")


class SyncMode(str, Enum):
    FRESH = "fresh"
    CACHED = "cached"


def parent_candidates(forest: Forest, editing_id: TaxonomyId | int | None) -> Forest:
    """Forest of nodes the edited node may be moved under."""
    return exclude_subtree(forest, editing_id)


class TaxonomyService:
    def __init__(
        self,
        client: DictionaryApiClient,
        snapshot: TaxonomySnapshotRepository,
        *,
        indent: str = DEFAULT_INDENT,
    ) -> None:
        self.client = client
        self.snapshot = snapshot
        self.indent = indent

    def load_records(self, mode: SyncMode = SyncMode.FRESH) -> list[TaxonomyRecord]:
        if mode == SyncMode.CACHED:
            if self.snapshot.last_synced_at() is not None:
                records = self.snapshot.list()
                logger.info("Using cached taxonomy snapshot with %d records", len(records))
                return records
            logger.info("No taxonomy snapshot yet; fetching from backend")

        records = self.client.list_types()
        self.snapshot.replace_all(records)
        return records

    def load_forest(self, mode: SyncMode = SyncMode.FRESH) -> Forest:
        records = self.load_records(mode)
        forest = build_forest(records)
        logger.debug(
            "Built taxonomy forest: %d roots, %d nodes from %d records", len(forest), count_nodes(forest), len(records)
        )
        return forest

    def options(self, mode: SyncMode = SyncMode.CACHED) -> list[TaxonomyOption]:
        return flatten_options(self.load_forest(mode), indent=self.indent)

    def create(self, record: TaxonomyRecord) -> None:
        self.client.create_type(record)

    def update(self, record: TaxonomyRecord) -> None:
        """Send an edit after checking it against the latest list.

        Rejects a new parent inside the node's own subtree and any change of
        ``type_key``. The check only sees the list as fetched here; a concurrent
        edit elsewhere can still interleave.
        """
        if record.id is None:
            msg = "update requires a saved record with an id"
            raise TaxonomyEditError(msg)

        forest = self.load_forest(SyncMode.FRESH)
        current = find_node(forest, record.id)
        if current is not None and current.type_key != record.type_key:
            raise TypeKeyChangeError(node_id=record.id, current=current.type_key, requested=record.type_key)

        if record.parent_id:
            known_parent = find_node(forest, record.parent_id) is not None
            allowed_parent = find_node(parent_candidates(forest, record.id), record.parent_id) is not None
            if known_parent and not allowed_parent:
                raise TaxonomyCycleError(node_id=record.id, parent_id=record.parent_id)
            if not known_parent:
                logger.warning(
                    "Parent id=%s of taxonomy id=%s is not in the current list; it will be shown as a root",
                    record.parent_id,
                    record.id,
                )

        self.client.update_type(record)

    def delete(self, type_ids: Iterable[TaxonomyId]) -> None:
        self.client.delete_types(type_ids)
