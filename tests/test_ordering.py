import random
from types import SimpleNamespace

import pytest

from core import ordering
from core.errors import OrderInvariantError


def _records(count):
    return [SimpleNamespace(id=i + 1, order=i) for i in range(count)]


def _layout(records):
    return [r.id for r in ordering.by_order(records)]


def test_insert_in_the_middle_shifts_followers():
    records = _records(3)
    new = SimpleNamespace(id=99, order=-1)

    index = ordering.insert_at(records, new, 1)

    assert index == 1
    assert _layout(records) == [1, 99, 2, 3]
    assert ordering.is_dense(records)


def test_insert_none_appends_and_out_of_range_clamps():
    records = _records(2)
    ordering.insert_at(records, SimpleNamespace(id=10, order=0))
    ordering.insert_at(records, SimpleNamespace(id=11, order=0), 50)
    ordering.insert_at(records, SimpleNamespace(id=12, order=0), -7)

    assert _layout(records) == [12, 1, 2, 10, 11]
    assert ordering.is_dense(records)


def test_move_down_and_up():
    records = _records(5)

    ordering.move_to(records, 1, 3)
    assert _layout(records) == [2, 3, 4, 1, 5]

    ordering.move_to(records, 5, 0)
    assert _layout(records) == [5, 2, 3, 4, 1]
    assert ordering.is_dense(records)


def test_move_to_current_index_changes_nothing():
    records = _records(4)
    before = [(r.id, r.order) for r in records]

    moved = ordering.move_to(records, 3, 2)

    assert moved is records[2]
    assert [(r.id, r.order) for r in records] == before


def test_move_clamps_to_last_position():
    records = _records(3)
    ordering.move_to(records, 1, 10)
    assert _layout(records) == [2, 3, 1]


def test_move_unknown_record_returns_none():
    records = _records(2)
    assert ordering.move_to(records, 42, 0) is None
    assert _layout(records) == [1, 2]


def test_remove_closes_the_gap():
    records = _records(4)

    removed = ordering.remove(records, 2)

    assert removed.id == 2
    assert _layout(records) == [1, 3, 4]
    assert sorted(r.order for r in records) == [0, 1, 2]
    assert ordering.remove(records, 2) is None


def test_check_density_raises_on_gap():
    records = [SimpleNamespace(id=1, order=0), SimpleNamespace(id=2, order=2)]
    with pytest.raises(OrderInvariantError) as excinfo:
        ordering.check_density(records, scope=7)
    assert excinfo.value.scope == 7
    assert excinfo.value.orders == [0, 2]


def test_check_density_raises_on_duplicates():
    records = [SimpleNamespace(id=1, order=0), SimpleNamespace(id=2, order=0)]
    with pytest.raises(AssertionError):
        ordering.check_density(records)


@pytest.mark.parametrize("seed", [1, 7, 42, 1234])
def test_random_sequences_stay_dense(seed):
    rng = random.Random(seed)
    records = []
    next_id = 1
    for _ in range(300):
        op = rng.choice(["insert", "insert", "move", "remove"])
        if op == "insert" or not records:
            desired = rng.choice([None, rng.randint(-2, len(records) + 2)])
            ordering.insert_at(records, SimpleNamespace(id=next_id, order=0), desired)
            next_id += 1
        elif op == "move":
            victim = rng.choice(records)
            ordering.move_to(records, victim.id, rng.randint(-2, len(records) + 2))
        else:
            ordering.remove(records, rng.choice(records).id)
        ordering.check_density(records)


def test_end_to_end_scenario():
    # A, B, C -> insert D at 1 -> move A to 3 -> remove B
    records = []
    for record_id in (1, 2, 3):
        ordering.insert_at(records, SimpleNamespace(id=record_id, order=0))
    ordering.insert_at(records, SimpleNamespace(id=4, order=0), 1)
    assert _layout(records) == [1, 4, 2, 3]

    ordering.move_to(records, 1, 3)
    assert _layout(records) == [4, 2, 3, 1]

    ordering.remove(records, 2)
    assert _layout(records) == [4, 3, 1]
    assert [r.order for r in ordering.by_order(records)] == [0, 1, 2]
