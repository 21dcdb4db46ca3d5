from domain.expand_state import ExpandStateTracker
from domain.taxonomy import Forest, TaxonomyId
from domain.tree import build_forest, search_forest
from tests.constants import record


def test_expand_all_status_scenario(status_forest: Forest) -> None:
    tracker = ExpandStateTracker()

    tracker.expand_all(status_forest)

    assert tracker.expanded_ids == {1}


def test_expand_all_tracks_only_branches(console_forest: Forest) -> None:
    tracker = ExpandStateTracker()

    tracker.expand_all(console_forest)

    assert tracker.expanded_ids == {10, 11, 20, 21}


def test_expand_all_replaces_stale_ids(console_forest: Forest, status_forest: Forest) -> None:
    tracker = ExpandStateTracker()
    tracker.expand_all(console_forest)

    tracker.expand_all(status_forest)

    assert tracker.expanded_ids == {1}


def test_toggle_adds_and_removes() -> None:
    tracker = ExpandStateTracker()
    node_id = TaxonomyId(10)

    tracker.toggle(node_id)
    assert tracker.is_expanded(node_id)

    tracker.toggle(node_id)
    assert not tracker.is_expanded(node_id)
    assert tracker.expanded_ids == frozenset()


def test_collapse_all_clears(console_forest: Forest) -> None:
    tracker = ExpandStateTracker()
    tracker.expand_all(console_forest)

    tracker.collapse_all()

    assert tracker.expanded_ids == frozenset()


def test_toggle_all_flips_mode(console_forest: Forest) -> None:
    tracker = ExpandStateTracker(all_expanded=True)

    tracker.toggle_all(console_forest)
    assert not tracker.all_expanded
    assert tracker.expanded_ids == frozenset()

    tracker.toggle_all(console_forest)
    assert tracker.all_expanded
    assert tracker.expanded_ids == {10, 11, 20, 21}


def test_refresh_recomputes_from_new_forest(console_forest: Forest) -> None:
    tracker = ExpandStateTracker(all_expanded=True)
    tracker.refresh(console_forest)
    tracker.toggle(TaxonomyId(10))

    rebuilt = build_forest([record(10, "Finance", "finance"), record(11, "Currency", "finance.currency", 10)])
    tracker.refresh(rebuilt)

    assert tracker.expanded_ids == {10}


def test_refresh_when_collapsed_clears(console_forest: Forest) -> None:
    tracker = ExpandStateTracker(all_expanded=False)
    tracker.toggle(TaxonomyId(10))

    tracker.refresh(console_forest)

    assert tracker.expanded_ids == frozenset()


def test_visible_nodes_hides_children_of_collapsed_branches(console_forest: Forest) -> None:
    tracker = ExpandStateTracker()
    tracker.toggle(TaxonomyId(10))

    rows = [(node.id, depth) for node, depth in tracker.visible_nodes(console_forest)]

    assert rows == [(10, 0), (11, 1), (14, 1), (20, 0), (30, 0)]


def test_expand_all_on_search_result(console_forest: Forest) -> None:
    tracker = ExpandStateTracker()

    tracker.expand_all(search_forest(console_forest, "fiat"))

    assert tracker.expanded_ids == {10, 11}
