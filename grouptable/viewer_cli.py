from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from rich.console import Console

from .config import ORDERS, TableConfig, build_table, config_from_mapping, load_rows, load_table_config
from .formatting import cell_text, format_cell
from .html_report import render_table_page
from .viewer_render import render_grouped_table, render_table_summary


def parse_view_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Show rows as a grouped, sorted table.")
    parser.add_argument("path", help="Path to a JSON rows file (array or {\"rows\": [...]})")
    parser.add_argument("--config", help="TOML table config with [table] and [[columns]]")
    parser.add_argument("--group-by", help="Row field used as the group key")
    parser.add_argument("--sort-by", help="Row field used as the sort key")
    parser.add_argument("--order", choices=sorted(ORDERS), help="Sort order for rows and groups")
    parser.add_argument("--size", type=int, help="Max rows pulled per render")
    parser.add_argument("--width", type=int, help="Table width used for column layout")
    parser.add_argument("--hide-groups", action="store_true", help="Hide group label rows")
    parser.add_argument("--title", help="Title for the summary panel or HTML page")
    parser.add_argument("--json", dest="as_json", action="store_true", help="Print grouped rows as JSON")
    parser.add_argument("--html", dest="html_path", help="Write a standalone HTML page to this path")
    parser.add_argument("--tui", action="store_true", help="Open the interactive textual viewer")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def _default_config(rows: list[dict[str, Any]]) -> TableConfig:
    keys: list[str] = []
    for row in rows:
        for key in row.keys():
            if key not in keys:
                keys.append(key)
    if not keys:
        raise RuntimeError("rows carry no fields; pass --config with [[columns]]")
    return config_from_mapping({"columns": [{"key": key} for key in keys]})


def _grouped_payload(config: TableConfig, groups: list[Any]) -> dict[str, Any]:
    return {
        "columns": [column.to_dict() for column in config.columns],
        "groups": [
            {
                "key": group.key,
                "rows": [
                    {column.key: cell_text(format_cell(column, row)) for column in config.columns}
                    for row in group.rows
                ],
            }
            for group in groups
        ],
    }


def run_view(argv: list[str]) -> int:
    args = parse_view_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    try:
        rows = load_rows(Path(args.path))
        config = load_table_config(Path(args.config)) if args.config else _default_config(rows)
        config = config.with_overrides(
            group_by=args.group_by,
            sort_by=args.sort_by,
            order=args.order,
            size=args.size,
            width=args.width,
            title=args.title,
            show_group=False if args.hide_groups else None,
        )
        table, record_set = build_table(config, rows)
        groups = table.groups()
    except Exception as error:  # noqa: BLE001
        print(f"[error] {error}", file=sys.stderr)
        return 1

    if not groups:
        print("[error] No rows to show.", file=sys.stderr)
        return 2

    try:
        if args.as_json:
            print(json.dumps(_grouped_payload(config, groups), ensure_ascii=False, indent=2, default=str))
            return 0

        if args.html_path:
            output_path = Path(args.html_path)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(render_table_page(table, config.title), encoding="utf-8")
            print(f"Wrote: {output_path}")
            return 0

        table.render()
    except Exception as error:  # noqa: BLE001
        print(f"[error] {error}", file=sys.stderr)
        return 1

    if args.tui:
        from .viewer_textual import run_textual_app

        run_textual_app(table, record_set, config.title)
        return 0

    console = Console()
    render_table_summary(console, table, config.title)
    render_grouped_table(console, table)
    return 0


def main() -> int:
    return run_view(sys.argv[1:])
