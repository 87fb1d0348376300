"""
Parsing of Visa Settlement Service (VSS) reports.

Text reports (VSS-110/120/130/140/900-S sections) are read with fixed-width field
positions into typed records; machine-readable TC46 V2110 settlement files are read
record by record.
"""

from vss_reports.models import (
    DEFAULT_FIELD_POSITIONS,
    EpinFileHeader,
    FieldPosition,
    FieldPositionConfig,
    ParseResult,
    ReadDirection,
    ReportFileSummary,
    ReportRecord,
    ReportType,
    SettlementRecord,
)
from vss_reports.services import (
    SettlementParseResult,
    SettlementRecordError,
    parse_epin_header,
    parse_report_text,
    parse_settlement_file,
    parse_settlement_line,
    process_report_file,
)
from vss_reports.utils.date_decoder import DateDecodeError
from vss_reports.utils.field_extractor import FieldExtractionError
from vss_reports.utils.parser_config import ParserConfig

__version__ = "0.1.0"
