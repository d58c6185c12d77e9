#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
import webbrowser
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from grouptable.config import build_table, load_rows, load_table_config  # noqa: E402
from grouptable.html_report import render_table_page  # noqa: E402


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Export rows as a grouped HTML table page.")
    parser.add_argument("--input", required=True, help="Input rows JSON path.")
    parser.add_argument("--config", required=True, help="TOML table config path.")
    parser.add_argument("--output", required=True, help="Output HTML path.")
    parser.add_argument("--title", help="Optional page title (overrides the config title).")
    parser.add_argument("--open", action="store_true", help="Open the generated HTML in your default browser.")
    return parser.parse_args(argv)


def main(argv: list[str]) -> int:
    args = parse_args(argv)
    output_path = Path(args.output)

    try:
        rows = load_rows(Path(args.input))
        config = load_table_config(Path(args.config))
        table, _ = build_table(config, rows)
        html = render_table_page(table, args.title or config.title)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(html, encoding="utf-8")
    except Exception as error:  # noqa: BLE001
        print(f"[error] {error}", file=sys.stderr)
        return 1

    print(f"Wrote: {output_path}")
    if args.open:
        webbrowser.open(output_path.resolve().as_uri())
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
