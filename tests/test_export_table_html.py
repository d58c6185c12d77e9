import io
import json
import sys
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from grouptable.config import build_table, config_from_mapping
from grouptable.html_report import render_table_page
from scripts.export_table_html import main as export_html_main

ROWS = [
    {"id": "r1", "region": "east", "product": "<apples>", "amount": 10},
    {"id": "r2", "region": "west", "product": "pears", "amount": 40},
]


def extract_table_config_json(html: str) -> dict:
    marker = '<script id="table-config-json" type="application/json">'
    start = html.find(marker)
    if start < 0:
        raise AssertionError("embedded table-config-json script not found")
    end = html.find("</script>", start)
    if end < 0:
        raise AssertionError("embedded table-config-json script is not closed")
    return json.loads(html[start + len(marker) : end])


def make_table():
    config = config_from_mapping(
        {
            "columns": [{"key": "product", "type": "c"}, {"key": "amount", "width": 300}],
            "group_by": "region",
            "sort_by": "amount",
            "row_id": "id",
        }
    )
    table, _ = build_table(config, [dict(row) for row in ROWS])
    return table


class TestRenderTablePage(unittest.TestCase):
    def test_page_embeds_table_and_config(self):
        html = render_table_page(make_table(), "Sales </script> Report")
        self.assertIn("<title>Sales &lt;/script&gt; Report</title>", html)
        self.assertIn("&lt;apples&gt;", html)
        self.assertNotIn("<apples>", html)
        config = extract_table_config_json(html)
        self.assertEqual(config["groupKeys"], ["east", "west"])
        self.assertEqual(config["rowCount"], 2)
        self.assertEqual(config["size"], 25)
        self.assertEqual(config["columns"][1], {"key": "amount", "width": 300})

    def test_page_reflects_current_filter(self):
        table = make_table()
        table.render()
        table.click("r2", 0)
        config = extract_table_config_json(render_table_page(table))
        self.assertEqual(config["groupKeys"], ["west"])


class TestExportTableHtmlScript(unittest.TestCase):
    def test_main_writes_html(self):
        with tempfile.TemporaryDirectory() as tmp:
            tmp_path = Path(tmp)
            rows_path = tmp_path / "rows.json"
            rows_path.write_text(json.dumps(ROWS), encoding="utf-8")
            config_path = tmp_path / "table.toml"
            config_path.write_text(
                '[table]\ngroup_by = "region"\n\n[[columns]]\nkey = "product"\n', encoding="utf-8"
            )
            output = tmp_path / "report" / "table.html"
            stdout = io.StringIO()
            with redirect_stdout(stdout):
                code = export_html_main(
                    ["--input", str(rows_path), "--config", str(config_path), "--output", str(output)]
                )
            self.assertEqual(code, 0)
            self.assertTrue(output.exists())
            self.assertIn("dc-table-group", output.read_text(encoding="utf-8"))


if __name__ == "__main__":
    unittest.main()
