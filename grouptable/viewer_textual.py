from __future__ import annotations

from typing import Any

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import DataTable, Footer, Header, Static

from .dimension import RecordSet
from .dom import Element
from .table import CATEGORY_CSS_CLASS, GROUP_CSS_CLASS, ROW_CSS_CLASS, TD_CLICKED_CLASS
from .table import DataTable as GroupTable
from .viewer_render import cell_style


class GroupTableApp(App[None]):
    CSS = """
    Screen { layout: vertical; }
    #status { height: 3; border: round #3a86ff; padding: 0 1; }
    #rows { height: 1fr; }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("r", "redraw", "Redraw"),
        Binding("escape", "clear_filters", "Clear Filters"),
    ]

    def __init__(
        self,
        grouped_table: GroupTable,
        record_set: RecordSet | None = None,
        table_title: str | None = None,
    ) -> None:
        super().__init__()
        self.grouped_table = grouped_table
        self.record_set = record_set
        self.table_title = table_title or "Grouped Table"
        self.row_elements: dict[str, Element] = {}

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static("", id="status")
        yield DataTable(id="rows", cursor_type="cell")
        yield Footer()

    def on_mount(self) -> None:
        self.title = self.table_title
        view = self.query_one("#rows", DataTable)
        view.add_columns(*(column.label for column in self.grouped_table.columns()))
        self._refresh_rows()
        view.focus()

    def _refresh_rows(self) -> None:
        view = self.query_one("#rows", DataTable)
        view.clear()
        self.row_elements = {}
        column_count = len(self.grouped_table.columns())
        root = self.grouped_table.host.root()
        row_count = 0
        for group_index, body in enumerate(root.children_with("tbody")):
            label_rows = body.children_with("tr", GROUP_CSS_CLASS)
            if column_count and label_rows and label_rows[0].style.get("display") != "none":
                label = Text(label_rows[0].children[0].text or "", style="bold cyan")
                view.add_row(label, *([""] * (column_count - 1)), key=f"group:{group_index}")
            for row_element in body.children_with("tr", ROW_CSS_CLASS):
                cells = row_element.children_with("td")
                if not cells:
                    continue
                row_key = f"row:{row_count}"
                row_count += 1
                self.row_elements[row_key] = row_element
                view.add_row(
                    *(
                        Text(
                            cell.text or "",
                            style=cell_style(cell.has_class(TD_CLICKED_CLASS), cell.has_class(CATEGORY_CSS_CLASS)),
                        )
                        for cell in cells
                    ),
                    key=row_key,
                )
        self._refresh_status(row_count)

    def _refresh_status(self, row_count: int) -> None:
        active = self.grouped_table.selection.active
        selection = "none"
        if active is not None:
            column = self.grouped_table.columns()[active[1]]
            selection = f"{column.label} on row {active[0]!r}"
        self.query_one("#status", Static).update(f"rows {row_count}  |  selection: {selection}")

    def on_data_table_cell_selected(self, event: DataTable.CellSelected) -> None:
        row_element = self.row_elements.get(str(event.cell_key.row_key.value))
        if row_element is None:
            return
        try:
            self.grouped_table.click(row_element.key, event.coordinate.column)
        except LookupError:
            self.notify("Only category columns can be selected.", timeout=1.2)
            return
        self._refresh_rows()

    def action_redraw(self) -> None:
        self.grouped_table.redraw()
        self._refresh_rows()

    def action_clear_filters(self) -> None:
        if self.record_set is not None:
            self.record_set.filter_all()
        self.grouped_table.selection.clear()
        self.grouped_table.redraw()
        self._refresh_rows()


def run_textual_app(grouped_table: GroupTable, record_set: RecordSet | None = None, title: str | None = None) -> Any:
    grouped_table.render()
    return GroupTableApp(grouped_table, record_set, title).run()
