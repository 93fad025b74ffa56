#!/usr/bin/env python3
"""
Unit tests for report_generator.py - CSV rendering
"""

import unittest
import io
import os
import sys
import tempfile
from datetime import date

import pandas as pd

# Add parent directory to path to import project modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from aggregator import reconstruct_item
from config import REPORT_COLUMNS, REWORK_REPORT_COLUMNS
from metrics import enrich
from models import Event, EventKind, ItemMetadata
from report_generator import ReportGenerator, format_cycle_label


def approved(day, label, key):
    return Event(item_key=key, kind=EventKind.APPROVED, occurred_at=day, cycle_label=label)


def rejected(day, key):
    return Event(item_key=key, kind=EventKind.REJECTED, occurred_at=day)


def metadata(key, created):
    return ItemMetadata(item_key=key, spec_type="Formula", status="Done",
                        business_unit="Beverages", product="Cola", created_at=created)


class TestReportGenerator(unittest.TestCase):
    """Test the ReportGenerator class"""

    def setUp(self):
        self.simple = enrich(reconstruct_item(
            [rejected(date(2022, 1, 1), "SPEC-1"), rejected(date(2022, 1, 5), "SPEC-1"),
             approved(date(2022, 1, 10), 2, "SPEC-1"), approved(date(2022, 1, 24), 4, "SPEC-1")],
            metadata("SPEC-1", date(2021, 12, 1)),
        ))
        self.reworked = enrich(reconstruct_item(
            [approved(date(2022, 3, 1), 45, "SPEC-2"), approved(date(2022, 7, 1), 26, "SPEC-2"),
             approved(date(2022, 8, 1), 31, "SPEC-2")],
            metadata("SPEC-2", date(2022, 2, 1)),
        ))

    def test_format_cycle_label(self):
        self.assertEqual(format_cycle_label(7), "W7")
        self.assertEqual(format_cycle_label(None), "")

    def test_basic_row(self):
        row = ReportGenerator().build_row(self.simple)

        self.assertEqual(list(row.keys()), REPORT_COLUMNS)
        self.assertEqual(row['Issue'], "SPEC-1")
        self.assertEqual(row['Year'], 2022)
        self.assertEqual(row['Week'], 2)
        self.assertEqual(row['Later Approved Count'], 1)
        self.assertEqual(row['Later Approved Weeks'], "W4")
        self.assertEqual(row['Latency(Days)'], 40)
        self.assertEqual(row['Rejected prior to 1st approval'], 2)

    def test_rework_row(self):
        row = ReportGenerator(include_rework=True).build_row(self.reworked)

        self.assertEqual(list(row.keys()), REWORK_REPORT_COLUMNS)
        self.assertEqual(row['Later Approved Weeks'], "W26:W31")
        self.assertEqual(row['Approved First Time'], "Yes")
        self.assertEqual(row['Quarter'], 4)
        self.assertEqual(row['Rework Week'], 26)
        self.assertEqual(row['Rework Quarter'], 3)
        self.assertEqual(row['Rework Year'], 2022)
        self.assertEqual(row['Rework Later Approvals'], 1)

    def test_rework_columns_blank_without_rework(self):
        row = ReportGenerator(include_rework=True).build_row(self.simple)

        self.assertEqual(row['Approved First Time'], "No")
        self.assertEqual(row['Rework Week'], "")
        self.assertEqual(row['Rework Quarter'], "")
        self.assertEqual(row['Rework Year'], "")
        self.assertEqual(row['Rework Later Approvals'], "")

    def test_write_csv_to_stream(self):
        buffer = io.StringIO()
        ReportGenerator().write_csv([self.simple, self.reworked], buffer)

        lines = buffer.getvalue().splitlines()
        self.assertEqual(lines[0], ",".join(REPORT_COLUMNS))
        self.assertEqual(lines[1], "Formula,SPEC-1,Done,Beverages,Cola,2022,2,1,W4,40,2")
        self.assertEqual(len(lines), 3)

    def test_write_csv_to_file(self):
        with tempfile.TemporaryDirectory() as tmp_dir:
            path = os.path.join(tmp_dir, "report.csv")
            ReportGenerator(include_rework=True).write_csv([self.simple, self.reworked], path)

            df = pd.read_csv(path, dtype=str, keep_default_na=False)

        self.assertEqual(list(df.columns), REWORK_REPORT_COLUMNS)
        self.assertEqual(df.loc[1, 'Rework Quarter'], "3")
        self.assertEqual(df.loc[0, 'Rework Quarter'], "")

    def test_empty_report_has_header(self):
        buffer = io.StringIO()
        ReportGenerator().write_csv([], buffer)
        self.assertEqual(buffer.getvalue().strip(), ",".join(REPORT_COLUMNS))

    def test_statistics(self):
        stats = ReportGenerator().generate_statistics([self.simple, self.reworked])

        self.assertEqual(stats['items'], 2)
        self.assertEqual(stats['approved_first_time'], 1)
        self.assertEqual(stats['reworked'], 1)
        self.assertEqual(stats['median_latency_days'], 34.0)

    def test_summary_lines(self):
        lines = ReportGenerator(include_rework=True).generate_summary_lines([self.simple, self.reworked])
        self.assertTrue(any("Reworked: 1" in line for line in lines))
        self.assertEqual(ReportGenerator().generate_summary_lines([]), ["📭 No approved items to report"])


if __name__ == '__main__':
    unittest.main()
