from __future__ import annotations

import math
from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import Any, Callable, Hashable, Iterable, Sequence

Comparator = Callable[[Any, Any], int]
KeyFunc = Callable[[Any], Any]


def ascending(a: Any, b: Any) -> int:
    # Values that cannot be ordered against each other compare equal.
    try:
        if a < b:
            return -1
        if a > b:
            return 1
    except TypeError:
        return 0
    return 0


def descending(a: Any, b: Any) -> int:
    return ascending(b, a)


def identity(row: Any) -> Any:
    return row


def flat_group_key(row: Any) -> str:
    # Constant key for ungrouped tables; pair with show_group(False).
    return ""


@dataclass
class Group:
    key: Hashable
    rows: list[Any] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)


def is_unbounded(cap: float | int | None) -> bool:
    return cap is None or (isinstance(cap, float) and math.isinf(cap) and cap > 0)


def cap_rows(rows: Iterable[Any], cap: float | int | None) -> list[Any]:
    items = list(rows)
    if is_unbounded(cap):
        return items
    return items[: max(0, int(cap))]


def top_rows(dimension: Any, cap: float | int | None) -> list[Any]:
    top = getattr(dimension, "top", None)
    if not callable(top):
        raise RuntimeError(
            "Bound dimension does not provide top(n); attach a filter dimension before rendering."
        )
    return list(top(math.inf if is_unbounded(cap) else max(0, int(cap))))


def sort_rows(rows: Iterable[Any], sort_key: KeyFunc, order: Comparator) -> list[Any]:
    # sorted() is stable, rows comparing equal keep upstream order.
    return sorted(rows, key=cmp_to_key(lambda a, b: order(sort_key(a), sort_key(b))))


def partition(
    rows: Sequence[Any],
    group_key: KeyFunc | None,
    sort_key: KeyFunc = identity,
    order: Comparator = ascending,
    cap: float | int | None = None,
) -> list[Group]:
    """Sort ``rows`` and bucket them into groups ordered by ``order`` on the group key.

    Rows are capped first, then stably sorted, then bucketed. Members of a
    group keep the sorted order. Groups are ordered by their own key, which
    only lines up with the row order when the group key moves together with
    the sort key.
    """

    if not callable(group_key):
        raise RuntimeError("A group key function is required to partition rows.")
    ordered = sort_rows(cap_rows(rows, cap), sort_key, order)

    buckets: dict[Hashable, Group] = {}
    for row in ordered:
        key = group_key(row)
        bucket = buckets.get(key)
        if bucket is None:
            bucket = Group(key=key)
            buckets[key] = bucket
        bucket.rows.append(row)

    return sorted(buckets.values(), key=cmp_to_key(lambda a, b: order(a.key, b.key)))
