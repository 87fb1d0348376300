"""
Tests for the VSS report parser entry points.
"""
import unittest
from decimal import Decimal
from unittest.mock import patch

from vss_reports.models.report_records import ReportType
from vss_reports.services.report_parser import (
    decode_report_content,
    merge_records,
    parse_report_text,
    process_report_file,
)
from vss_reports.utils.parser_config import ParserConfig
from tests.fixtures.report_fixtures import (
    sample_report_lines,
    sample_report_text,
    section_110_lines,
    section_900_lines,
)


class TestParseReportText(unittest.TestCase):
    def test_all_report_types(self):
        results = parse_report_text(sample_report_text(), "VSS_20220217.txt")
        self.assertEqual(list(results.keys()), ["VSS-110", "VSS-120", "VSS-130", "VSS-140", "VSS-900"])
        self.assertEqual(
            {report_type: len(records) for report_type, records in results.items()},
            {"VSS-110": 3, "VSS-120": 2, "VSS-130": 1, "VSS-140": 1, "VSS-900": 2}
        )
        for report_type, records in results.items():
            with self.subTest(report_type=report_type):
                self.assertTrue(all(r.report_type.value == report_type for r in records))
                self.assertTrue(all(r.source.source_file_name == "VSS_20220217.txt" for r in records))

    def test_repeated_sections_accumulate_in_file_order(self):
        text = "\n".join(section_110_lines() + section_110_lines())
        records = parse_report_text(text)["VSS-110"]
        self.assertEqual(len(records), 6)
        line_numbers = [r.source.line_number for r in records]
        self.assertEqual(line_numbers, sorted(line_numbers))
        self.assertEqual(records[0].credit_amount, records[3].credit_amount)

    def test_missing_report_types_have_no_entry(self):
        results = parse_report_text("\n".join(section_900_lines()))
        self.assertEqual(list(results.keys()), [ReportType.VSS_900.value])

    def test_empty_input(self):
        self.assertEqual(parse_report_text(""), {})
        self.assertEqual(parse_report_text(None), {})
        self.assertEqual(parse_report_text("NOTHING TO SEE 1.00CR\n"), {})

    def test_parsing_is_idempotent(self):
        text = sample_report_text()
        self.assertEqual(parse_report_text(text, "a.txt"), parse_report_text(text, "a.txt"))

    def test_crlf_and_lf_give_same_records(self):
        self.assertEqual(
            parse_report_text(sample_report_text("\r\n")),
            parse_report_text(sample_report_text("\n"))
        )

    def test_records_reference_file_lines(self):
        lines = sample_report_lines()
        results = parse_report_text("\n".join(lines))
        for records in results.values():
            for record in records:
                self.assertEqual(lines[record.source.line_number - 1], record.source.raw_line_content)

    def test_total_amount_signs(self):
        records = parse_report_text(sample_report_text())["VSS-110"]
        self.assertEqual(
            [r.total_amount for r in records],
            [Decimal("72941.43"), Decimal("-1067.94"), Decimal("-1213.14")]
        )

    def test_merge_records(self):
        results = {}
        merge_records(results, "VSS-110", [1, 2])
        merge_records(results, "VSS-110", [3])
        merge_records(results, "VSS-900", [])
        self.assertEqual(results, {"VSS-110": [1, 2, 3], "VSS-900": []})


class TestDecodeReportContent(unittest.TestCase):
    def test_utf8(self):
        self.assertEqual(decode_report_content("SOCIÉTÉ".encode('utf-8')), ("SOCIÉTÉ", "utf-8"))

    def test_latin1_fallback(self):
        text, encoding = decode_report_content("SOCIÉTÉ".encode('latin-1'))
        self.assertEqual(text, "SOCIÉTÉ")
        self.assertEqual(encoding, "latin-1")

    def test_preferred_encoding_first(self):
        _, encoding = decode_report_content(b"PLAIN", "cp1252")
        self.assertEqual(encoding, "cp1252")

    def test_unknown_preferred_encoding_is_skipped(self):
        _, encoding = decode_report_content(b"PLAIN", "no-such-codec")
        self.assertEqual(encoding, "utf-8")


class TestProcessReportFile(unittest.TestCase):
    def setUp(self):
        self.config = ParserConfig()

    def test_summary(self):
        content = sample_report_text().encode('utf-8')
        summary = process_report_file(content, "VSS_20220217.txt", config=self.config)
        self.assertTrue(summary.success)
        self.assertEqual(summary.file_name, "VSS_20220217.txt")
        self.assertEqual(summary.file_size, len(content))
        self.assertEqual(summary.parsed_sections, ["VSS-110", "VSS-120", "VSS-130", "VSS-140", "VSS-900"])
        self.assertEqual(summary.total_records, 9)
        self.assertEqual(summary.message, "Parsed 9 records from 5 report types")
        self.assertIsNone(summary.error)

    def test_latin1_file(self):
        text = sample_report_text().replace("TEST BANK", "BANQUE SOCIÉTÉ")
        summary = process_report_file(text.encode('latin-1'), "latin.txt", config=self.config)
        self.assertTrue(summary.success)
        self.assertEqual(summary.total_records, 9)

    def test_no_sections(self):
        summary = process_report_file(b"JUST A BANNER\n", "empty.txt", config=self.config)
        self.assertTrue(summary.success)
        self.assertEqual(summary.parsed_sections, [])
        self.assertEqual(summary.message, "No VSS report sections found")

    def test_empty_bytes(self):
        summary = process_report_file(b"", "empty.txt", config=self.config)
        self.assertTrue(summary.success)
        self.assertEqual(summary.file_size, 0)

    @patch('vss_reports.services.report_parser.parse_report_text')
    def test_failure_is_reported(self, mock_parse):
        mock_parse.side_effect = RuntimeError("boom")
        summary = process_report_file(b"REPORT ID:  VSS-110", "bad.txt", config=self.config)
        self.assertFalse(summary.success)
        self.assertEqual(summary.message, "Failed to process report file")
        self.assertEqual(summary.error, "boom")

    @patch.dict('os.environ', {'VSS_TWO_DIGIT_YEAR_PIVOT': 'not-a-number'})
    def test_invalid_environment_is_reported(self):
        summary = process_report_file(b"PLAIN", "env.txt")
        self.assertFalse(summary.success)
        self.assertEqual(summary.file_size, 5)
        self.assertIn("not-a-number", summary.error)

    @patch.dict('os.environ', {'VSS_FILE_ENCODING': 'latin-1'})
    def test_config_from_environment(self):
        with self.assertLogs('vss_reports.services.report_parser', level='INFO') as logs:
            process_report_file(b"PLAIN", "env.txt")
        self.assertTrue(any("using latin-1" in message for message in logs.output))


if __name__ == '__main__':
    unittest.main()
