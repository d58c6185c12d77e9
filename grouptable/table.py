from __future__ import annotations

import logging
import math
from typing import Any, Callable, Hashable, Iterable, Mapping

from .column_layout import ColumnSpec, compute_widths, parse_columns
from .dom import Element, bind_keyed
from .formatting import DEFAULT_FORMATTERS, CellFormatter, cell_text, format_cell
from .host import ChartRegistry, StaticHost, TableHost
from .partition import Comparator, Group, KeyFunc, ascending, identity, partition, top_rows
from .reconcile import ReconcileResult
from .selection import SelectionState

LABEL_CSS_CLASS = "dc-table-label"
ROW_CSS_CLASS = "dc-table-row"
COLUMN_CSS_CLASS = "dc-table-column"
GROUP_CSS_CLASS = "dc-table-group"
HEAD_CSS_CLASS = "dc-table-head"
TD_CLICKED_CLASS = "dc-table-td-clicked"
CATEGORY_CSS_CLASS = "category"

DEFAULT_SIZE = 25

CategoryCallback = Callable[[Any, ColumnSpec, list[Any]], Any]

_UNSET: Any = object()

logger = logging.getLogger(__name__)


def object_identity(row: Any) -> Hashable:
    return id(row)


def _ignore_click(row: Any, column: ColumnSpec, rows: list[Any]) -> None:
    return None


class DataTable:
    """Grouped, sorted, capped table kept in sync with a filter dimension.

    Accessors follow a get/set convention: called without an argument they
    return the current value, with one they store it and return the table so
    calls can be chained.
    """

    def __init__(
        self,
        host: TableHost,
        *,
        chart_group: str | None = None,
        registry: ChartRegistry | None = None,
    ) -> None:
        self.host = host
        self.selection = SelectionState()
        self.chart_group = chart_group
        self.registry = registry
        self.last_reconcile: dict[str, Any] = {}
        self._show_group = True
        self._size: float | int = DEFAULT_SIZE
        self._columns: list[ColumnSpec] = []
        self._sort_by: KeyFunc = identity
        self._order: Comparator = ascending
        self._row_id: KeyFunc = object_identity
        self._formatters: dict[str, CellFormatter] = dict(DEFAULT_FORMATTERS)
        self._keep_clicked_mark = False
        self._on_category_click: CategoryCallback = _ignore_click
        self._rendering = False
        if registry is not None:
            registry.register(self, chart_group)

    # accessors

    def show_group(self, value: Any = _UNSET) -> Any:
        if value is _UNSET:
            return self._show_group
        self._show_group = bool(value)
        return self

    def size(self, value: Any = _UNSET) -> Any:
        """Get or set the number of rows pulled from the dimension per pass."""

        if value is _UNSET:
            return self._size
        if isinstance(value, float) and math.isinf(value):
            self._size = math.inf
        else:
            self._size = max(0, int(value))
        return self

    def columns(self, value: Any = _UNSET) -> Any:
        if value is _UNSET:
            return list(self._columns)
        self._columns = parse_columns(value)
        return self

    def sort_by(self, value: Any = _UNSET) -> Any:
        if value is _UNSET:
            return self._sort_by
        self._sort_by = value
        return self

    def order(self, value: Any = _UNSET) -> Any:
        if value is _UNSET:
            return self._order
        self._order = value
        return self

    def row_id(self, value: Any = _UNSET) -> Any:
        """Get or set the accessor giving each row a unique, stable identity.

        Defaults to object identity, which is only stable while the dimension
        hands back the same record objects between passes.
        """

        if value is _UNSET:
            return self._row_id
        self._row_id = value
        return self

    def formatters(self, value: Any = _UNSET) -> Any:
        if value is _UNSET:
            return dict(self._formatters)
        merged = dict(DEFAULT_FORMATTERS)
        merged.update(value)
        self._formatters = merged
        return self

    def keep_clicked_mark(self, value: Any = _UNSET) -> Any:
        if value is _UNSET:
            return self._keep_clicked_mark
        self._keep_clicked_mark = bool(value)
        return self

    def set_category_click(self, callback: CategoryCallback | None) -> DataTable:
        self._on_category_click = callback or _ignore_click
        return self

    # lifecycle

    def _require_bindings(self) -> tuple[Any, KeyFunc]:
        dimension = self.host.dimension()
        if dimension is None or not callable(getattr(dimension, "top", None)):
            raise RuntimeError("DataTable needs a dimension with top(n); none is bound to the host.")
        group_key = self.host.group()
        if not callable(group_key):
            raise RuntimeError("DataTable needs a group key function; none is bound to the host.")
        return dimension, group_key

    def groups(self) -> list[Group]:
        dimension, group_key = self._require_bindings()
        return partition(top_rows(dimension, self._size), group_key, self._sort_by, self._order)

    def render(self) -> DataTable:
        if self._rendering:
            raise RuntimeError("A render pass is already running; render() and redraw() cannot be nested.")
        self._require_bindings()
        self._rendering = True
        try:
            root = self.host.root()
            widths = compute_widths(self._columns, self.host.width())
            self._render_head(root, widths)
            self._render_groups(root, widths)
            if self._keep_clicked_mark:
                self._restore_clicked_mark(root)
        finally:
            self._rendering = False
        return self

    def redraw(self) -> DataTable:
        return self.render()

    def destroy(self) -> None:
        if self.registry is not None:
            self.registry.deregister(self, self.chart_group)
        self.selection.clear()
        self.host.root().clear()

    def _render_head(self, root: Element, widths: list[int]) -> None:
        for head in root.children_with("thead"):
            head.remove()
        head = root.insert(Element("thead", class_name=HEAD_CSS_CLASS), 0)
        head.set_style("width", f"{self.host.width()}px")
        head_row = head.append("tr")
        for column, width in zip(self._columns, widths):
            head_row.append("th").set_style("width", f"{width}px").set_text(column.label)

    def _render_groups(self, root: Element, widths: list[int]) -> None:
        groups = self.groups()
        binding = bind_keyed(root, "tbody", None, groups, lambda group: group.key)
        for body in binding.enter:
            body.set_style("width", f"{self.host.width()}px")
            label_row = body.append("tr", class_name=GROUP_CSS_CLASS)
            label_row.append("td", class_name=LABEL_CSS_CLASS)

        row_results: dict[Hashable, ReconcileResult[Any]] = {}
        for body in binding.elements:
            group: Group = body.datum
            label_row = body.children_with("tr", GROUP_CSS_CLASS)[0]
            label_row.set_style("display", None if self._show_group else "none")
            label = label_row.children[0]
            label.set_attr("colspan", len(self._columns)).set_text(group.key)
            row_results[group.key] = self._render_rows(body, group, widths)

        self.last_reconcile = {"groups": binding.result, "rows": row_results}
        logger.debug(
            "render pass: groups %s, rows enter=%d exit=%d",
            binding.result.stats(),
            sum(len(result.enter) for result in row_results.values()),
            sum(len(result.exit) for result in row_results.values()),
        )

    def _render_rows(self, body: Element, group: Group, widths: list[int]) -> ReconcileResult[Any]:
        binding = bind_keyed(body, "tr", ROW_CSS_CLASS, group.rows, self._row_id)
        for row_element in binding.elements:
            row_element.clear()
            row_element.classed(TD_CLICKED_CLASS, False)
            self._render_cells(row_element, widths)
        return binding.result

    def _render_cells(self, row_element: Element, widths: list[int]) -> None:
        row = row_element.datum
        for index, (column, width) in enumerate(zip(self._columns, widths)):
            cell = row_element.append("td", class_name=f"{COLUMN_CSS_CLASS} _{index}")
            cell.key = index
            cell.datum = row
            cell.set_style("width", f"{width}px")
            cell.set_text(cell_text(format_cell(column, row, self._formatters)))
            if column.is_category:
                cell.classed(CATEGORY_CSS_CLASS, True)
                cell.on("click", self._category_handler(column, index))

    def _restore_clicked_mark(self, root: Element) -> None:
        if self.selection.active is None:
            return
        row_key, column_index = self.selection.active
        for row_element in root.find_all("tr", ROW_CSS_CLASS):
            if row_element.key != row_key:
                continue
            cells = row_element.children_with("td")
            if column_index < len(cells):
                cells[column_index].classed(TD_CLICKED_CLASS, True)
                row_element.classed(TD_CLICKED_CLASS, True)
            return

    # category clicks

    def _category_handler(self, column: ColumnSpec, column_index: int) -> Callable[[Element], Any]:
        def handle(cell: Element) -> Any:
            return self._handle_category_click(cell, column, column_index)

        return handle

    def _handle_category_click(self, cell: Element, column: ColumnSpec, column_index: int) -> Any:
        row_element = cell.parent
        if row_element is None:
            raise RuntimeError("Clicked cell is no longer attached to the table.")
        for node in self.host.root().find_all(class_name=TD_CLICKED_CLASS):
            node.classed(TD_CLICKED_CLASS, False)
        if self.selection.toggle((row_element.key, column_index)):
            cell.classed(TD_CLICKED_CLASS, True)
            row_element.classed(TD_CLICKED_CLASS, True)
        all_rows = top_rows(self.host.dimension(), math.inf)
        return self._on_category_click(cell.datum, column, all_rows)

    def click(self, row_key: Hashable, column_index: int) -> Any:
        """Dispatch a click on a displayed cell, as a user would."""

        for row_element in self.host.root().find_all("tr", ROW_CSS_CLASS):
            if row_element.key != row_key:
                continue
            cells = row_element.children_with("td")
            if column_index >= len(cells) or not cells[column_index].has_handler("click"):
                raise LookupError(f"Column {column_index} is not a category column.")
            return cells[column_index].dispatch("click")
        raise LookupError(f"Row is not displayed: {row_key!r}")

    # inspection

    def displayed_rows(self) -> list[Any]:
        return [element.datum for element in self.host.root().find_all("tr", ROW_CSS_CLASS)]

    def clicked_elements(self) -> list[Element]:
        return self.host.root().find_all(class_name=TD_CLICKED_CLASS)

    def to_html(self) -> str:
        return self.host.root().to_html()


def make_table(
    dimension: Any,
    group: Callable[[Any], Any] | None,
    *,
    columns: Iterable[ColumnSpec | Mapping[str, Any]] = (),
    width: int = 960,
) -> DataTable:
    host = StaticHost(dimension, group, width=width).anchor()
    return DataTable(host).columns(list(columns))
