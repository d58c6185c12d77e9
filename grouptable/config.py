from __future__ import annotations

import json
import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from .column_layout import ColumnSpec, parse_columns
from .dimension import RecordSet
from .formatting import field_value
from .host import StaticHost
from .partition import ascending, descending, flat_group_key, identity
from .table import DEFAULT_SIZE, DataTable

ORDERS = {"ascending": ascending, "descending": descending}

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableConfig:
    columns: tuple[ColumnSpec, ...]
    group_by: str | None = None
    sort_by: str | None = None
    order: str = "ascending"
    size: int = DEFAULT_SIZE
    show_group: bool = True
    row_id: str | None = None
    width: int = 960
    title: str | None = None
    dimension_field: str | None = None

    def with_overrides(self, **overrides: Any) -> TableConfig:
        values = {key: value for key, value in overrides.items() if value is not None}
        return config_from_mapping({**self.to_mapping(), **values})

    def to_mapping(self) -> dict[str, Any]:
        return {
            "columns": [column.to_dict() for column in self.columns],
            "group_by": self.group_by,
            "sort_by": self.sort_by,
            "order": self.order,
            "size": self.size,
            "show_group": self.show_group,
            "row_id": self.row_id,
            "width": self.width,
            "title": self.title,
            "dimension_field": self.dimension_field,
        }


def _optional_str(value: Any) -> str | None:
    text = str(value or "").strip()
    return text or None


def config_from_mapping(data: Mapping[str, Any]) -> TableConfig:
    raw_columns = data.get("columns")
    if not isinstance(raw_columns, list) or not raw_columns:
        raise RuntimeError("table config must define a non-empty 'columns' list")
    order = str(data.get("order") or "ascending").strip().lower()
    if order not in ORDERS:
        raise RuntimeError(f"table config order must be 'ascending' or 'descending': {order}")
    try:
        size = int(data.get("size", DEFAULT_SIZE))
        width = int(data.get("width", 960))
    except (TypeError, ValueError) as error:
        raise RuntimeError(f"table config size/width must be integers: {error}") from error
    if size <= 0:
        raise RuntimeError(f"table config size must be positive: {size}")
    if width < 0:
        raise RuntimeError(f"table config width must not be negative: {width}")
    return TableConfig(
        columns=tuple(parse_columns(raw_columns)),
        group_by=_optional_str(data.get("group_by")),
        sort_by=_optional_str(data.get("sort_by")),
        order=order,
        size=size,
        show_group=bool(data.get("show_group", True)),
        row_id=_optional_str(data.get("row_id")),
        width=width,
        title=_optional_str(data.get("title")),
        dimension_field=_optional_str(data.get("dimension_field")),
    )


def load_table_config(path: Path) -> TableConfig:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as error:
        raise RuntimeError(f"File not found: {path}") from error
    except tomllib.TOMLDecodeError as error:
        raise RuntimeError(f"Invalid TOML: {error}") from error
    table = data.get("table", {})
    if not isinstance(table, dict):
        raise RuntimeError("[table] must be a table")
    return config_from_mapping({**table, "columns": data.get("columns", table.get("columns"))})


def load_rows(path: Path) -> list[dict[str, Any]]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as error:
        raise RuntimeError(f"File not found: {path}") from error
    except json.JSONDecodeError as error:
        raise RuntimeError(f"Invalid JSON: {error}") from error
    if isinstance(payload, dict):
        payload = payload.get("rows")
    if not isinstance(payload, list):
        raise RuntimeError("rows file must hold a JSON array or an object with a 'rows' array")
    rows = [row for row in payload if isinstance(row, dict)]
    if len(rows) != len(payload):
        logger.warning("skipped %d non-object row(s) in %s", len(payload) - len(rows), path)
    return rows


def _field_getter(name: str | None, default: Any) -> Any:
    if name is None:
        return default
    return lambda row: field_value(row, name)


def build_table(config: TableConfig, records: list[Any]) -> tuple[DataTable, RecordSet]:
    """Wire a record set, its dimensions and a table from ``config``.

    Clicking a category cell filters a dimension on that column to the
    clicked value and redraws; clicking it again clears the filter.
    """

    record_set = RecordSet(records)
    dimension = record_set.dimension(config.dimension_field or config.sort_by or config.columns[0].key)
    host = StaticHost(dimension, _field_getter(config.group_by, flat_group_key), width=config.width).anchor()
    table = DataTable(host)
    table.columns(list(config.columns))
    table.size(config.size)
    table.order(ORDERS[config.order])
    table.show_group(config.show_group if config.group_by else False)
    table.sort_by(_field_getter(config.sort_by, identity))
    if config.row_id:
        table.row_id(_field_getter(config.row_id, None))

    category_dimensions = {
        column.key: record_set.dimension(column.key) for column in config.columns if column.is_category
    }

    def on_category_click(row: Any, column: ColumnSpec, rows: list[Any]) -> None:
        category = category_dimensions[column.key]
        if table.selection.is_idle:
            category.filter_all()
        else:
            for other in category_dimensions.values():
                other.filter_all()
            category.filter_exact(field_value(row, column.key))
        logger.debug("category filter %s=%r", column.key, category.current_filter)
        table.redraw()

    table.set_category_click(on_category_click)
    return table, record_set
