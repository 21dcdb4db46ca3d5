from __future__ import annotations

import argparse
import logging
from pathlib import Path
from time import perf_counter
from typing import Sequence

from clients.dictionary_api import DictionaryApiClient
from config import DB_FILE, config
from db.db import init_db
from db.repositories import TaxonomySnapshotRepository
from domain.expand_state import ExpandStateTracker
from domain.options import filter_options
from domain.panel import TaxonomyPanel
from services.taxonomy_service import SyncMode, TaxonomyService, parent_candidates
from utils.tree_render import render_options, render_tree

logger = logging.getLogger(__name__)


def build_service(db_file: Path) -> TaxonomyService:
    settings = config()
    client = DictionaryApiClient(
        base_url=settings.dictionary_api_base_url,
        token=settings.dictionary_api_token,
        timeout=settings.dictionary_api_timeout,
    )
    session = init_db(db_file=db_file)
    return TaxonomyService(client, TaxonomySnapshotRepository(session), indent=settings.option_indent)


def run_sync(service: TaxonomyService) -> None:
    logger.info("Fetching dictionary types")
    started = perf_counter()
    records = service.load_records(SyncMode.FRESH)
    logger.info("Stored snapshot of %d dictionary types in %.2fs", len(records), perf_counter() - started)


def run_tree(service: TaxonomyService, *, mode: SyncMode, search: str, collapsed: bool) -> None:
    panel = TaxonomyPanel(ExpandStateTracker(all_expanded=not collapsed))
    panel.rebuild(service.load_records(mode))
    panel.search_term = search
    # Search results are shown fully opened so every match is visible.
    if search:
        panel.tracker.expand_all(panel.filtered_forest)
    render_tree(panel.rows(), panel.tracker)


def run_options(service: TaxonomyService, *, mode: SyncMode, search: str) -> None:
    render_options(filter_options(service.options(mode), search))


def run_parents(service: TaxonomyService, *, mode: SyncMode, exclude_id: int | None) -> None:
    tracker = ExpandStateTracker()
    forest = parent_candidates(service.load_forest(mode), exclude_id)
    tracker.expand_all(forest)
    render_tree(tracker.visible_nodes(forest), tracker)


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Browse and sync the dictionary type taxonomy.")
    parser.add_argument("--db", type=Path, default=DB_FILE)
    parser.add_argument("--cached", action="store_true", help="Use the local snapshot when one exists.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("sync", help="Fetch the type list and replace the local snapshot.")

    tree_parser = subparsers.add_parser("tree", help="Print the type tree.")
    tree_parser.add_argument("--search", default="")
    tree_parser.add_argument("--collapsed", action="store_true")

    options_parser = subparsers.add_parser("options", help="Print the flattened option list.")
    options_parser.add_argument("--search", default="")

    parents_parser = subparsers.add_parser("parents", help="Print valid parents for a type being edited.")
    parents_parser.add_argument("--exclude-id", type=int, default=None)

    args = parser.parse_args(argv)
    service = build_service(args.db)
    mode = SyncMode.CACHED if args.cached else SyncMode.FRESH

    if args.command == "sync":
        run_sync(service)
    elif args.command == "tree":
        run_tree(service, mode=mode, search=args.search, collapsed=args.collapsed)
    elif args.command == "options":
        run_options(service, mode=mode, search=args.search)
    elif args.command == "parents":
        run_parents(service, mode=mode, exclude_id=args.exclude_id)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    main()
