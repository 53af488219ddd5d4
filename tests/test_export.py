"""Tests for asyncbench.export — JSON, CSV and Markdown export."""

from __future__ import annotations

import csv
import io
import json
import unittest

from bench_test_helpers import make_result

from asyncbench.export import CSV_COLUMNS, export_csv, export_json, export_markdown
from asyncbench.suite import Suite


def _make_suites() -> list[Suite]:
    first = Suite("strings")
    first.benchmarks.extend(
        [
            make_result("regexp", mean_time=4.0, hz=250.0, cycles=500),
            make_result("direct", mean_time=2.0, hz=500.0, cycles=1000),
        ]
    )
    second = Suite("numbers")
    second.benchmarks.extend(
        [
            make_result("add", mean_time=1.0, hz=1000.0, cycles=2000),
            make_result("broken", error="fn exploded", cycles=1),
        ]
    )
    return [first, second]


class TestExportJSON(unittest.TestCase):
    """Tests for export_json()."""

    def test_structure(self) -> None:
        data = json.loads(export_json(_make_suites()))
        self.assertEqual([s["name"] for s in data], ["strings", "numbers"])
        self.assertEqual([b["name"] for b in data[0]["benchmarks"]], ["direct", "regexp"])

    def test_error_message_only_on_failures(self) -> None:
        data = json.loads(export_json(_make_suites()))
        numbers = {b["name"]: b for b in data[1]["benchmarks"]}
        self.assertEqual(numbers["broken"]["error_message"], "fn exploded")
        self.assertNotIn("error_message", numbers["add"])


class TestExportCSV(unittest.TestCase):
    """Tests for export_csv (long-format CSV)."""

    def _rows(self, metric: str = "mean_time") -> list[dict[str, str]]:
        return list(csv.DictReader(io.StringIO(export_csv(_make_suites(), metric))))

    def test_export_csv_header(self) -> None:
        """First line contains all expected column names."""
        header = export_csv(_make_suites()).splitlines()[0]
        self.assertEqual(header.split(","), CSV_COLUMNS)

    def test_one_row_per_benchmark(self) -> None:
        rows = self._rows()
        self.assertEqual(len(rows), 4)
        self.assertEqual(
            [(r["suite"], r["benchmark"], r["rank"]) for r in rows],
            [
                ("strings", "direct", "1"),
                ("strings", "regexp", "2"),
                ("numbers", "add", "1"),
                ("numbers", "broken", "2"),
            ],
        )

    def test_values(self) -> None:
        direct = self._rows()[0]
        self.assertEqual(direct["cycles"], "1000")
        self.assertEqual(float(direct["mean_time_ms"]), 2.0)
        self.assertEqual(float(direct["hz"]), 500.0)
        self.assertEqual(direct["error_message"], "")

    def test_error_message_column(self) -> None:
        broken = self._rows()[3]
        self.assertEqual(broken["error_message"], "fn exploded")

    def test_rank_follows_metric(self) -> None:
        rows = self._rows("cycles")
        self.assertEqual(rows[0]["benchmark"], "direct")


class TestExportMarkdown(unittest.TestCase):
    """Tests for export_markdown()."""

    def test_sections(self) -> None:
        output = export_markdown(_make_suites())
        self.assertIn("## strings", output)
        self.assertIn("## numbers", output)
        self.assertIn("| Benchmark |", output)

    def test_rows_and_status(self) -> None:
        output = export_markdown(_make_suites())
        self.assertIn("| direct | 500.00 | 2.000000 |", output)
        self.assertIn("| RunError |", output)

    def test_faster_than_line(self) -> None:
        output = export_markdown(_make_suites())
        self.assertIn("*direct* is faster than *regexp* by 100.0%.", output)

    def test_empty(self) -> None:
        self.assertEqual(export_markdown([]), "")
