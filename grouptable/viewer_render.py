from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .column_layout import compute_widths
from .table import CATEGORY_CSS_CLASS, GROUP_CSS_CLASS, ROW_CSS_CLASS, TD_CLICKED_CLASS, DataTable


def cell_style(clicked: bool, category: bool) -> str:
    if clicked:
        return "bold black on yellow"
    if category:
        return "cyan"
    return "white"


def render_table_summary(console: Console, table: DataTable, title: str | None = None) -> None:
    groups = table.groups()
    summary = Table.grid(padding=(0, 2))
    summary.add_column(style="bold cyan")
    summary.add_column()
    summary.add_row("Columns", str(len(table.columns())))
    summary.add_row("Rows", str(sum(len(group) for group in groups)))
    summary.add_row("Groups", str(len(groups)))
    summary.add_row("Size", str(table.size()))
    active = table.selection.active
    summary.add_row("Selection", "-" if active is None else f"row {active[0]!r}, column {active[1]}")
    console.print(Panel(summary, title=title or "Grouped Table", border_style="blue"))


def render_grouped_table(console: Console, table: DataTable) -> None:
    """Print the rendered element tree of ``table`` as a rich table.

    Character widths are split the same way pixel widths are, over the
    console width minus the border and padding of each column.
    """

    columns = table.columns()
    available = max(0, console.width - (3 * len(columns) + 1))
    widths = compute_widths(columns, available)
    grid = Table(header_style="bold magenta", show_lines=False)
    for column, width in zip(columns, widths):
        grid.add_column(column.label, width=max(1, width), overflow="ellipsis", no_wrap=True)

    root = table.host.root()
    for body in root.children_with("tbody"):
        label_row = body.children_with("tr", GROUP_CSS_CLASS)
        if label_row and label_row[0].style.get("display") != "none" and columns:
            label = Text(label_row[0].children[0].text or "", style="bold cyan")
            grid.add_row(label, *([""] * (len(columns) - 1)))
        for row_element in body.children_with("tr", ROW_CSS_CLASS):
            cells = []
            for cell in row_element.children_with("td"):
                style = cell_style(cell.has_class(TD_CLICKED_CLASS), cell.has_class(CATEGORY_CSS_CLASS))
                cells.append(Text(cell.text or "", style=style))
            if cells:
                grid.add_row(*cells)
        grid.add_section()
    console.print(grid)
