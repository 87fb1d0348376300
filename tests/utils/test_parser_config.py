"""
Unit tests for parser configuration.
"""
import os
import unittest
from unittest.mock import patch

from vss_reports.utils.parser_config import DEFAULT_PARSER_CONFIG, ParserConfig


class TestParserConfig(unittest.TestCase):
    def test_defaults(self):
        config = ParserConfig()
        self.assertEqual(config.file_encoding, 'utf-8')
        self.assertTrue(config.clamp_header_timestamps)
        self.assertEqual(config.two_digit_year_pivot, 49)
        self.assertFalse(config.positional_currency_fallback)
        self.assertEqual(config, DEFAULT_PARSER_CONFIG)

    @patch.dict(os.environ, {
        'VSS_FILE_ENCODING': 'cp1252',
        'VSS_CLAMP_HEADER_TIMESTAMPS': 'false',
        'VSS_TWO_DIGIT_YEAR_PIVOT': '30',
        'VSS_POSITIONAL_CURRENCY_FALLBACK': 'yes',
    })
    def test_from_environment(self):
        config = ParserConfig.from_environment()
        self.assertEqual(config.file_encoding, 'cp1252')
        self.assertFalse(config.clamp_header_timestamps)
        self.assertEqual(config.two_digit_year_pivot, 30)
        self.assertTrue(config.positional_currency_fallback)

    @patch.dict(os.environ, {'VSS_CLAMP_HEADER_TIMESTAMPS': '  '}, clear=True)
    def test_from_environment_falls_back_to_defaults(self):
        self.assertEqual(ParserConfig.from_environment(), ParserConfig())

    def test_century_for(self):
        config = ParserConfig()
        cases = [(0, 2000), (22, 2022), (49, 2049), (50, 1950), (99, 1999)]
        for two_digit_year, expected in cases:
            with self.subTest(two_digit_year=two_digit_year):
                self.assertEqual(config.century_for(two_digit_year), expected)

    def test_custom_pivot(self):
        self.assertEqual(ParserConfig(two_digit_year_pivot=70).century_for(65), 2065)

    def test_config_is_frozen(self):
        with self.assertRaises(Exception):
            DEFAULT_PARSER_CONFIG.file_encoding = 'latin-1'


if __name__ == '__main__':
    unittest.main()
