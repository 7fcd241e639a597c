"""Dense ordering of sibling records.

Every function takes the records of one scope (tasks of a workspace, or all
workspaces) and keeps their ``order`` values equal to ``0..n-1``. Records are
mutated in place; the list passed in is updated as well so callers can keep
using it as the live collection of the scope.
"""

from typing import Iterable, List, MutableSequence, Optional, Protocol, TypeVar

from .errors import OrderInvariantError


class Ordered(Protocol):
    id: int
    order: int


R = TypeVar("R", bound=Ordered)


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def insert_at(records: MutableSequence[R], record: R, desired_index: Optional[int] = None) -> int:
    """Insert ``record`` at ``desired_index`` (append when None) and return its order."""
    size = len(records)
    index = size if desired_index is None else clamp(int(desired_index), 0, size)
    for other in records:
        if other.order >= index:
            other.order += 1
    record.order = index
    records.append(record)
    return index


def move_to(records: Iterable[R], record_id: int, new_index: int) -> Optional[R]:
    """Move one record to ``new_index`` shifting the records in between.

    Returns the moved record, or None when ``record_id`` is not in the scope.
    Moving a record onto its own position touches nothing.
    """
    items = list(records)
    target = next((r for r in items if r.id == record_id), None)
    if target is None:
        return None
    old = target.order
    new = clamp(int(new_index), 0, len(items) - 1)
    if new == old:
        return target
    for other in items:
        if other is target:
            continue
        if old < new and old < other.order <= new:
            other.order -= 1
        elif new < old and new <= other.order < old:
            other.order += 1
    target.order = new
    return target


def remove(records: MutableSequence[R], record_id: int) -> Optional[R]:
    """Drop ``record_id`` from the scope and close the gap it leaves."""
    target = next((r for r in records if r.id == record_id), None)
    if target is None:
        return None
    records.remove(target)
    for other in records:
        if other.order > target.order:
            other.order -= 1
    return target


def is_dense(records: Iterable[Ordered]) -> bool:
    orders = sorted(r.order for r in records)
    return orders == list(range(len(orders)))


def check_density(records: Iterable[Ordered], scope: object = None) -> None:
    items = list(records)
    if not is_dense(items):
        raise OrderInvariantError(scope, [r.order for r in items])


def by_order(records: Iterable[R]) -> List[R]:
    return sorted(records, key=lambda r: r.order)


__all__ = ["insert_at", "move_to", "remove", "is_dense", "check_density", "by_order", "clamp"]
