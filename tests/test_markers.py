#!/usr/bin/env python3
"""
Unit tests for utils_markers.py - free-text marker parsing
"""

import unittest
import os
import sys

# Add parent directory to path to import project modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from models import EventKind
from utils_markers import find_marker, extract_cycle_label, parse_cycle_label, adf_to_text, split_first_line


class TestFindMarker(unittest.TestCase):
    """Test approval/rejection marker detection"""

    def test_approved_marker(self):
        self.assertEqual(find_marker("10/Jan/22 3:45 PM;jdoe;Approved in W02"), EventKind.APPROVED)

    def test_rejected_marker(self):
        self.assertEqual(find_marker("05/Jan/22 9:00 AM;jdoe;Rejected in W01"), EventKind.REJECTED)

    def test_marker_variants(self):
        """Case and whitespace variations are still recognised"""
        for text in ["approved in W3", "APPROVED IN W3", "Approved  in W3", "Approved\tin W3"]:
            with self.subTest(text=text):
                self.assertEqual(find_marker(text), EventKind.APPROVED)
        for text in ["rejected in W3", "Rejected   in W3"]:
            with self.subTest(text=text):
                self.assertEqual(find_marker(text), EventKind.REJECTED)

    def test_approval_wins_over_rejection(self):
        text = "Rejected in W3 earlier\nApproved in W5 after fixes"
        self.assertEqual(find_marker(text), EventKind.APPROVED)

    def test_no_marker(self):
        for text in [None, "", "Looks good to me", "Approved", "Reviewed in W3", "Unapproved in W3"]:
            with self.subTest(text=text):
                self.assertIsNone(find_marker(text))


class TestCycleLabels(unittest.TestCase):
    """Test cycle label extraction and parsing"""

    def test_label_after_marker(self):
        self.assertEqual(extract_cycle_label("10/Jan/22;jdoe;Approved in W02"), "W02")

    def test_label_after_marker_preferred(self):
        text = "Carried over from W50\nApproved in W3"
        self.assertEqual(extract_cycle_label(text), "W3")

    def test_label_on_first_line_fallback(self):
        text = "W14 review\nApproved in the meeting"
        self.assertEqual(extract_cycle_label(text), "W14")

    def test_label_not_part_of_word(self):
        self.assertIsNone(extract_cycle_label("Approved in NEW1 session"))

    def test_missing_label(self):
        self.assertIsNone(extract_cycle_label("Approved in the meeting"))
        self.assertIsNone(extract_cycle_label(None))

    def test_parse_cycle_label(self):
        self.assertEqual(parse_cycle_label("W12"), 12)
        self.assertEqual(parse_cycle_label("w07"), 7)
        self.assertEqual(parse_cycle_label(" 45 "), 45)
        self.assertEqual(parse_cycle_label("W0"), 0)

    def test_parse_cycle_label_invalid(self):
        for token in [None, "", "W", "Wx2", "W-3", "W1.5"]:
            with self.subTest(token=token):
                with self.assertRaises(ValueError):
                    parse_cycle_label(token)


class TestAdfToText(unittest.TestCase):
    """Test flattening of Jira rich-text comment bodies"""

    def test_paragraphs_become_lines(self):
        body = {
            "type": "doc",
            "version": 1,
            "content": [
                {"type": "paragraph", "content": [
                    {"type": "text", "text": "Approved in "},
                    {"type": "text", "text": "W12", "marks": [{"type": "strong"}]},
                ]},
                {"type": "paragraph", "content": [{"type": "text", "text": "Nice work"}]},
            ],
        }
        self.assertEqual(adf_to_text(body), "Approved in W12\nNice work")

    def test_hard_break_and_mention(self):
        body = {"type": "doc", "content": [
            {"type": "paragraph", "content": [
                {"type": "mention", "attrs": {"text": "@Jane"}},
                {"type": "text", "text": " Rejected in W4"},
                {"type": "hardBreak"},
                {"type": "text", "text": "missing drawings"},
            ]},
        ]}
        text = adf_to_text(body)
        self.assertEqual(text.splitlines()[0], "@Jane Rejected in W4")
        self.assertEqual(find_marker(text), EventKind.REJECTED)

    def test_plain_string_body(self):
        self.assertEqual(adf_to_text("Approved in W3"), "Approved in W3")
        self.assertEqual(adf_to_text(None), "")

    def test_split_first_line(self):
        self.assertEqual(split_first_line("10/Jan/22 3:45 PM;x\nsecond"), ["10/Jan/22", "3:45", "PM;x"])
        self.assertEqual(split_first_line(""), [])


if __name__ == '__main__':
    unittest.main()
