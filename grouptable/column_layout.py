from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

DEFAULT_COLUMN_WIDTH = 100
CATEGORY_COLUMN_TYPE = "c"


def column_weight(width: Any) -> float:
    if width is None or isinstance(width, bool):
        return DEFAULT_COLUMN_WIDTH
    try:
        value = float(width)
    except (TypeError, ValueError):
        return DEFAULT_COLUMN_WIDTH
    if math.isnan(value) or math.isinf(value) or value <= 0:
        return DEFAULT_COLUMN_WIDTH
    return value


@dataclass(frozen=True)
class ColumnSpec:
    key: str
    title: str | None = None
    width: float | None = None
    data_type: str | None = None
    data_format: str | None = None
    need_translate: bool = False
    column_type: str | None = None

    @property
    def label(self) -> str:
        return self.title or self.key

    @property
    def is_category(self) -> bool:
        return self.column_type == CATEGORY_COLUMN_TYPE

    @property
    def weight(self) -> float:
        return column_weight(self.width)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"key": self.key}
        if self.title is not None:
            payload["title"] = self.title
        if self.width is not None:
            payload["width"] = self.width
        if self.data_type is not None:
            payload["dataType"] = self.data_type
        if self.data_format is not None:
            payload["dataFormat"] = self.data_format
        if self.need_translate:
            payload["needTranslate"] = True
        if self.column_type is not None:
            payload["type"] = self.column_type
        return payload


def column_from_dict(raw: Mapping[str, Any]) -> ColumnSpec:
    if not isinstance(raw, Mapping):
        raise RuntimeError(f"Column definition must be an object: {raw!r}")
    key = str(raw.get("key") or "").strip()
    if not key:
        raise RuntimeError(f"Column definition is missing 'key': {dict(raw)!r}")
    title = raw.get("title")
    data_type = raw.get("dataType", raw.get("data_type"))
    data_format = raw.get("dataFormat", raw.get("data_format"))
    column_type = raw.get("type", raw.get("column_type"))
    return ColumnSpec(
        key=key,
        title=None if title is None else str(title),
        width=raw.get("width"),
        data_type=None if data_type is None else str(data_type),
        data_format=None if data_format is None else str(data_format),
        need_translate=bool(raw.get("needTranslate", raw.get("need_translate", False))),
        column_type=None if column_type is None else str(column_type),
    )


def parse_columns(raw_columns: Iterable[ColumnSpec | Mapping[str, Any]]) -> list[ColumnSpec]:
    columns: list[ColumnSpec] = []
    for item in raw_columns:
        columns.append(item if isinstance(item, ColumnSpec) else column_from_dict(item))
    return columns


def compute_widths(columns: Sequence[ColumnSpec], total_width: float) -> list[int]:
    """Split ``total_width`` across ``columns`` in proportion to their weights.

    Each width is floored independently, so the sum can be smaller than
    ``total_width``. The remainder is not redistributed.
    """

    if not columns:
        return []
    total = max(0.0, float(total_width or 0))
    weights = [column.weight for column in columns]
    agg_width = sum(weights)
    return [int(math.floor((weight / agg_width) * total)) for weight in weights]
