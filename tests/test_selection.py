from types import SimpleNamespace

from application.selection import WORKSPACE_SCOPE, SelectionTracker


def _items(*names):
    return [SimpleNamespace(name=n) for n in names]


def test_first_load_selects_first_row():
    tracker = SelectionTracker()
    assert tracker.reload(1, _items("a", "b")) == 0


def test_empty_list_selects_nothing():
    tracker = SelectionTracker()
    assert tracker.reload(1, []) is None


def test_remembered_selection_is_clamped():
    tracker = SelectionTracker()
    tracker.navigate(1, 4)
    assert tracker.reload(1, _items("a", "b", "c")) == 2
    assert tracker.remembered(1) == 2


def test_hint_by_name_wins_over_index():
    tracker = SelectionTracker()
    tracker.expect(1, 2, "new")
    # Display sorted by name puts the inserted item first.
    assert tracker.reload(1, _items("new", "x", "y", "z")) == 0
    assert tracker.pending_hint() is None


def test_hint_index_is_clamped_when_name_absent():
    tracker = SelectionTracker()
    tracker.navigate(1, 0)
    tracker.expect(1, 5)
    assert tracker.reload(1, _items("a", "b")) == 1


def test_hint_only_consumed_by_its_own_scope():
    tracker = SelectionTracker()
    tracker.expect(7, 3, "t")
    tracker.reload(WORKSPACE_SCOPE, _items("w1", "w2"))
    assert tracker.pending_hint(7) is not None
    assert tracker.pending_hint(WORKSPACE_SCOPE) is None
    assert tracker.reload(7, _items("a", "b", "c", "t")) == 3
    assert tracker.pending_hint() is None


def test_hint_is_used_once():
    tracker = SelectionTracker()
    tracker.navigate(1, 0)
    tracker.expect(1, 2)
    assert tracker.reload(1, _items("a", "b", "c")) == 2
    tracker.navigate(1, 0)
    assert tracker.reload(1, _items("a", "b", "c")) == 0


def test_delete_at_end_clamps_to_new_last():
    tracker = SelectionTracker()
    tracker.expect(1, 4)
    assert tracker.reload(1, _items("a", "b", "c", "d")) == 3


def test_scopes_are_remembered_independently():
    tracker = SelectionTracker()
    tracker.navigate(1, 2)
    tracker.navigate(2, 0)
    assert tracker.reload(1, _items("a", "b", "c")) == 2
    assert tracker.reload(2, _items("a", "b", "c")) == 0


def test_forget_drops_memory_and_hint():
    tracker = SelectionTracker()
    tracker.navigate(1, 2)
    tracker.expect(1, 2)
    tracker.forget(1)
    assert tracker.pending_hint(1) is None
    assert tracker.reload(1, _items("a", "b", "c")) == 0


def test_discarded_hint_falls_back_to_remembered():
    tracker = SelectionTracker()
    tracker.navigate(WORKSPACE_SCOPE, 0)
    tracker.expect(WORKSPACE_SCOPE, 0, "B")
    tracker.discard_hint(2)
    assert tracker.pending_hint(WORKSPACE_SCOPE) is not None
    tracker.discard_hint(WORKSPACE_SCOPE)
    assert tracker.reload(WORKSPACE_SCOPE, _items("A", "B")) == 0
