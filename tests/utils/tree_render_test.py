import pytest

from domain.expand_state import ExpandStateTracker
from domain.options import flatten_options
from domain.taxonomy import Forest, TaxonomyId
from utils.tree_render import format_tree_lines, render_options, render_tree


def test_format_tree_lines_marks_branches(console_forest: Forest) -> None:
    tracker = ExpandStateTracker()
    tracker.toggle(TaxonomyId(10))

    lines = format_tree_lines(tracker.visible_nodes(console_forest), tracker)

    assert lines == [
        "v Finance (finance, id=10)",
        "  > Currency (finance.currency, id=11)",
        "    Fee type (finance.fee, id=14) [disabled]",
        "> KYC (kyc, id=20)",
        "  Orphan (orphan, id=30)",
    ]


def test_render_tree_empty(capsys: pytest.CaptureFixture[str]) -> None:
    render_tree([], ExpandStateTracker())

    assert capsys.readouterr().out == "No data\n"


def test_render_options_aligns_values(status_forest: Forest, capsys: pytest.CaptureFixture[str]) -> None:
    render_options(flatten_options(status_forest))

    assert capsys.readouterr().out.splitlines() == [
        "Status     status",
        "  Enabled  status.enabled",
        "Region     region",
    ]
