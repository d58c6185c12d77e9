from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Hashable, Iterable, Sequence, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Keyed(Generic[T]):
    key: Hashable
    item: T


def keyed(items: Iterable[T], key_fn: Callable[[T], Hashable]) -> list[Keyed[T]]:
    return [Keyed(key_fn(item), item) for item in items]


@dataclass
class ReconcileResult(Generic[T]):
    enter: list[T] = field(default_factory=list)
    update: list[tuple[T, T]] = field(default_factory=list)
    exit: list[T] = field(default_factory=list)
    moved: list[Hashable] = field(default_factory=list)
    order: list[Hashable] = field(default_factory=list)
    enter_keys: list[Hashable] = field(default_factory=list)
    update_keys: list[Hashable] = field(default_factory=list)
    exit_keys: list[Hashable] = field(default_factory=list)

    @property
    def is_noop(self) -> bool:
        return not self.enter and not self.exit and not self.moved

    def stats(self) -> dict[str, int]:
        return {
            "enter": len(self.enter),
            "update": len(self.update),
            "exit": len(self.exit),
            "moved": len(self.moved),
        }


def _stable_positions(positions: Sequence[int]) -> set[int]:
    """Return indexes into ``positions`` forming a longest increasing run.

    Items at those indexes can stay where they are; every other updated item
    has to move to restore the new order.
    """

    tails: list[int] = []
    tail_index: list[int] = []
    parents: list[int] = [-1] * len(positions)
    for index, value in enumerate(positions):
        slot = bisect.bisect_left(tails, value)
        if slot == len(tails):
            tails.append(value)
            tail_index.append(index)
        else:
            tails[slot] = value
            tail_index[slot] = index
        parents[index] = tail_index[slot - 1] if slot > 0 else -1
    keep: set[int] = set()
    cursor = tail_index[-1] if tail_index else -1
    while cursor >= 0:
        keep.add(cursor)
        cursor = parents[cursor]
    return keep


def reconcile(previous: Sequence[Keyed[T]], next_items: Sequence[Keyed[T]]) -> ReconcileResult[T]:
    """Match ``previous`` against ``next_items`` by key.

    Keys present on both sides are updates wherever they sit, keys only in
    ``next_items`` enter and keys only in ``previous`` exit. When a key is
    repeated, the first occurrence on each side is matched and the rest
    enter or exit.
    """

    result: ReconcileResult[T] = ReconcileResult()
    previous_index: dict[Hashable, int] = {}
    for index, entry in enumerate(previous):
        if entry.key in previous_index:
            logger.warning("duplicate key in previous items: %r", entry.key)
            continue
        previous_index[entry.key] = index

    matched: set[int] = set()
    seen_next: set[Hashable] = set()
    update_positions: list[int] = []
    for entry in next_items:
        result.order.append(entry.key)
        if entry.key in seen_next:
            logger.warning("duplicate key in next items: %r", entry.key)
            result.enter.append(entry.item)
            result.enter_keys.append(entry.key)
            continue
        seen_next.add(entry.key)
        index = previous_index.get(entry.key)
        if index is None:
            result.enter.append(entry.item)
            result.enter_keys.append(entry.key)
            continue
        matched.add(index)
        update_positions.append(index)
        result.update.append((previous[index].item, entry.item))
        result.update_keys.append(entry.key)

    for index, entry in enumerate(previous):
        if index in matched:
            continue
        result.exit.append(entry.item)
        result.exit_keys.append(entry.key)

    keep = _stable_positions(update_positions)
    result.moved = [key for position, key in enumerate(result.update_keys) if position not in keep]
    return result
