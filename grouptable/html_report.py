from __future__ import annotations

import json
import math
from html import escape
from typing import Any

from .table import DataTable

PAGE_CSS = """
    body { font-family: -apple-system, "Segoe UI", sans-serif; margin: 24px; color: #1f2933; }
    h1 { font-size: 20px; margin: 0 0 4px; }
    .table-meta { color: #616e7c; font-size: 13px; margin-bottom: 12px; }
    table.dc-data-table { border-collapse: collapse; table-layout: fixed; }
    .dc-table-head th { text-align: left; border-bottom: 2px solid #cbd2d9; padding: 4px 6px; }
    .dc-table-group td { background: #f0f4f8; font-weight: 600; padding: 6px; }
    .dc-table-column { border-bottom: 1px solid #e4e7eb; padding: 4px 6px; overflow: hidden; }
    .dc-table-column.category { cursor: pointer; color: #2563eb; }
    .dc-table-td-clicked { background: #fff3c4; }
"""


def _table_config(table: DataTable) -> dict[str, Any]:
    groups = table.groups()
    return {
        "columns": [column.to_dict() for column in table.columns()],
        "size": None if math.isinf(table.size()) else table.size(),
        "showGroup": table.show_group(),
        "groupKeys": [str(group.key) for group in groups],
        "rowCount": sum(len(group) for group in groups),
    }


def render_table_page(table: DataTable, title: str | None = None) -> str:
    """Render ``table`` into a standalone HTML page.

    The table is rendered first so the page always reflects the current
    filter state.
    """

    table.render()
    config = _table_config(table)
    page_title = title or "Grouped Table"
    meta = "rows {rows} / groups {groups}".format(rows=config["rowCount"], groups=len(config["groupKeys"]))
    return """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>{title}</title>
  <style>{css}</style>
</head>
<body>
  <h1>{title}</h1>
  <div class="table-meta">{meta}</div>
  {table_html}
  <script id="table-config-json" type="application/json">{config_json}</script>
</body>
</html>
""".format(
        title=escape(page_title),
        css=PAGE_CSS,
        meta=escape(meta),
        table_html=table.to_html(),
        config_json=json.dumps(config, ensure_ascii=False).replace("</", "<\\/"),
    )
