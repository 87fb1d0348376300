"""
VSS report services.

Public API:
    - parse_report_text: text report -> records grouped by report type
    - process_report_file: uploaded bytes -> ReportFileSummary
    - parse_settlement_file / parse_settlement_line / parse_epin_header: TC46 V2110 files
"""

from vss_reports.services.report_parser import (
    decode_report_content,
    parse_report_text,
    process_report_file,
)
from vss_reports.services.settlement_record_parser import (
    SettlementParseResult,
    SettlementRecordError,
    parse_epin_header,
    parse_settlement_file,
    parse_settlement_line,
)

__all__ = [
    'decode_report_content',
    'parse_report_text',
    'process_report_file',
    'SettlementParseResult',
    'SettlementRecordError',
    'parse_epin_header',
    'parse_settlement_file',
    'parse_settlement_line',
]
