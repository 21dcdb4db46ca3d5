from __future__ import annotations

from pathlib import Path
from unittest.mock import Mock

import pytest
from sqlalchemy.orm import Session

import main
from db.repositories import TaxonomySnapshotRepository
from domain.taxonomy import TaxonomyRecord
from services.taxonomy_service import SyncMode, TaxonomyService


@pytest.fixture()
def client(console_records: list[TaxonomyRecord]) -> Mock:
    client = Mock()
    client.list_types.return_value = console_records
    return client


@pytest.fixture()
def service(client: Mock, test_session: Session) -> TaxonomyService:
    return TaxonomyService(client, TaxonomySnapshotRepository(test_session))


def test_run_tree_collapsed_shows_roots(service: TaxonomyService, capsys: pytest.CaptureFixture[str]) -> None:
    main.run_tree(service, mode=SyncMode.FRESH, search="", collapsed=True)

    assert capsys.readouterr().out.splitlines() == [
        "> Finance (finance, id=10)",
        "> KYC (kyc, id=20)",
        "  Orphan (orphan, id=30)",
    ]


def test_run_tree_search_opens_matching_path(service: TaxonomyService, capsys: pytest.CaptureFixture[str]) -> None:
    main.run_tree(service, mode=SyncMode.FRESH, search="pass", collapsed=True)

    assert capsys.readouterr().out.splitlines() == [
        "v KYC (kyc, id=20)",
        "  v Document type (kyc.document, id=21)",
        "      Passport (kyc.document.passport, id=22)",
    ]


def test_run_parents_hides_edited_subtree(service: TaxonomyService, capsys: pytest.CaptureFixture[str]) -> None:
    main.run_parents(service, mode=SyncMode.FRESH, exclude_id=11)

    out = capsys.readouterr().out
    assert "Finance" in out
    assert "Fee type (finance.fee, id=14) [disabled]" in out
    for name in ("Currency", "Fiat", "Crypto"):
        assert name not in out


def test_run_options_filters_labels(service: TaxonomyService, capsys: pytest.CaptureFixture[str]) -> None:
    main.run_options(service, mode=SyncMode.FRESH, search="document")

    assert capsys.readouterr().out.splitlines() == ["  Document type  kyc.document"]


def test_main_dispatches_with_cached_mode(
    service: TaxonomyService, client: Mock, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    built_with: list[Path] = []

    def fake_build_service(db_file: Path) -> TaxonomyService:
        built_with.append(db_file)
        return service

    monkeypatch.setattr(main, "build_service", fake_build_service)

    main.main(["--db", "snapshot.db", "--cached", "tree", "--collapsed"])

    assert built_with == [Path("snapshot.db")]
    # No snapshot stored yet, so the cached read falls back to the backend.
    client.list_types.assert_called_once()
    assert capsys.readouterr().out.splitlines()[0] == "> Finance (finance, id=10)"
