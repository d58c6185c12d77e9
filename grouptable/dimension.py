from __future__ import annotations

import math
from functools import cmp_to_key
from typing import Any, Callable, Iterable

from .formatting import field_value
from .partition import ascending

Accessor = Callable[[Any], Any]
Predicate = Callable[[Any], bool]


class RecordSet:
    """In-memory record store filtered through one or more dimensions.

    Mirrors the part of crossfilter the table needs: every dimension's
    filter applies to every ``top``/``bottom`` query.
    """

    def __init__(self, records: Iterable[Any] = ()) -> None:
        self.records: list[Any] = list(records)
        self._dimensions: list[Dimension] = []

    def add(self, records: Iterable[Any]) -> RecordSet:
        self.records.extend(records)
        return self

    def size(self) -> int:
        return len(self.records)

    def dimension(self, accessor: Accessor | str) -> Dimension:
        dimension = Dimension(self, accessor)
        self._dimensions.append(dimension)
        return dimension

    def dispose(self, dimension: Dimension) -> None:
        if dimension in self._dimensions:
            self._dimensions.remove(dimension)

    def passes(self, record: Any) -> bool:
        return all(dimension.accepts(record) for dimension in self._dimensions)

    def all_filtered(self) -> list[Any]:
        return [record for record in self.records if self.passes(record)]

    def filter_all(self) -> RecordSet:
        for dimension in self._dimensions:
            dimension.filter_all()
        return self


def _field_accessor(name: str) -> Accessor:
    return lambda record: field_value(record, name)


class Dimension:
    def __init__(self, record_set: RecordSet, accessor: Accessor | str) -> None:
        self.record_set = record_set
        self.accessor: Accessor = _field_accessor(accessor) if isinstance(accessor, str) else accessor
        self._predicate: Predicate | None = None
        self.current_filter: Any = None

    def has_filter(self) -> bool:
        return self._predicate is not None

    def accepts(self, record: Any) -> bool:
        if self._predicate is None:
            return True
        return bool(self._predicate(self.accessor(record)))

    def filter(self, value: Any = None) -> Dimension:
        if value is None:
            return self.filter_all()
        if isinstance(value, tuple) and len(value) == 2:
            return self.filter_range(value)
        if callable(value):
            return self.filter_function(value)
        return self.filter_exact(value)

    def filter_exact(self, value: Any) -> Dimension:
        self._predicate = lambda item: item == value
        self.current_filter = value
        return self

    def filter_range(self, bounds: tuple[Any, Any]) -> Dimension:
        low, high = bounds
        self._predicate = lambda item: item is not None and low <= item < high
        self.current_filter = bounds
        return self

    def filter_function(self, predicate: Predicate) -> Dimension:
        self._predicate = predicate
        self.current_filter = predicate
        return self

    def filter_all(self) -> Dimension:
        self._predicate = None
        self.current_filter = None
        return self

    def _ordered(self, reverse: bool) -> list[Any]:
        records = self.record_set.all_filtered()
        compare = cmp_to_key(lambda a, b: ascending(self.accessor(a), self.accessor(b)))
        return sorted(records, key=compare, reverse=reverse)

    def top(self, n: float | int = math.inf) -> list[Any]:
        ordered = self._ordered(reverse=True)
        if math.isinf(n):
            return ordered
        return ordered[: max(0, int(n))]

    def bottom(self, n: float | int = math.inf) -> list[Any]:
        ordered = self._ordered(reverse=False)
        if math.isinf(n):
            return ordered
        return ordered[: max(0, int(n))]
