import io
import json
import sys
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from grouptable.viewer_cli import run_view
from scripts.view_table import main as view_table_main

ROWS = [
    {"id": "r1", "region": "east", "product": "apples", "amount": 10},
    {"id": "r2", "region": "west", "product": "pears", "amount": 40},
    {"id": "r3", "region": "east", "product": "plums", "amount": 30},
]

CONFIG_TOML = """
[table]
title = "Sales"
group_by = "region"
sort_by = "amount"
row_id = "id"

[[columns]]
key = "product"
type = "c"

[[columns]]
key = "amount"
dataType = "number"
dataFormat = ".1f"
"""


class TestViewerCli(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.rows_path = self.tmp / "rows.json"
        self.rows_path.write_text(json.dumps(ROWS), encoding="utf-8")
        self.config_path = self.tmp / "table.toml"
        self.config_path.write_text(CONFIG_TOML, encoding="utf-8")

    def tearDown(self):
        self._tmp.cleanup()

    def run_cli(self, argv):
        stdout = io.StringIO()
        stderr = io.StringIO()
        with redirect_stdout(stdout), redirect_stderr(stderr):
            code = run_view(argv)
        return code, stdout.getvalue(), stderr.getvalue()

    def test_json_output_groups_rows(self):
        code, out, _ = self.run_cli([str(self.rows_path), "--config", str(self.config_path), "--json"])
        self.assertEqual(code, 0)
        payload = json.loads(out)
        self.assertEqual([group["key"] for group in payload["groups"]], ["east", "west"])
        self.assertEqual(payload["groups"][0]["rows"][0], {"product": "apples", "amount": "10.0"})

    def test_overrides_apply_on_top_of_config(self):
        code, out, _ = self.run_cli(
            [str(self.rows_path), "--config", str(self.config_path), "--order", "descending", "--size", "2", "--json"]
        )
        self.assertEqual(code, 0)
        payload = json.loads(out)
        self.assertEqual([group["key"] for group in payload["groups"]], ["west", "east"])
        self.assertEqual(sum(len(group["rows"]) for group in payload["groups"]), 2)

    def test_default_columns_come_from_row_fields(self):
        code, out, _ = self.run_cli([str(self.rows_path), "--group-by", "region", "--json"])
        self.assertEqual(code, 0)
        payload = json.loads(out)
        self.assertEqual([column["key"] for column in payload["columns"]], ["id", "region", "product", "amount"])

    def test_rich_output_lists_groups_and_cells(self):
        code, out, _ = self.run_cli([str(self.rows_path), "--config", str(self.config_path)])
        self.assertEqual(code, 0)
        self.assertIn("Sales", out)
        self.assertIn("east", out)
        self.assertIn("plums", out)

    def test_html_export_writes_page(self):
        output = self.tmp / "out" / "table.html"
        code, out, _ = self.run_cli([str(self.rows_path), "--config", str(self.config_path), "--html", str(output)])
        self.assertEqual(code, 0)
        self.assertIn("Wrote:", out)
        self.assertIn("dc-data-table", output.read_text(encoding="utf-8"))

    def test_missing_file_reports_error(self):
        code, _, err = self.run_cli([str(self.tmp / "missing.json")])
        self.assertEqual(code, 1)
        self.assertIn("[error] File not found", err)

    def test_cell_format_failure_reports_error(self):
        rows_path = self.tmp / "dates.json"
        rows_path.write_text(json.dumps([{"id": 1, "when": "2024-01-02"}]), encoding="utf-8")
        config_path = self.tmp / "dates.toml"
        config_path.write_text('[[columns]]\nkey = "when"\ndataType = "date"\n', encoding="utf-8")
        for extra in (["--json"], []):
            code, out, err = self.run_cli([str(rows_path), "--config", str(config_path), *extra])
            self.assertEqual(code, 1)
            self.assertIn("[error]", err)
            self.assertEqual(out, "")

    def test_empty_rows_return_two(self):
        empty_path = self.tmp / "empty.json"
        empty_path.write_text("[]", encoding="utf-8")
        code, _, err = self.run_cli([str(empty_path), "--config", str(self.config_path)])
        self.assertEqual(code, 2)
        self.assertIn("No rows", err)

    def test_script_entry_delegates_to_run_view(self):
        stdout = io.StringIO()
        with redirect_stdout(stdout):
            code = view_table_main([str(self.rows_path), "--config", str(self.config_path), "--json"])
        self.assertEqual(code, 0)
        self.assertIn('"groups"', stdout.getvalue())


if __name__ == "__main__":
    unittest.main()
