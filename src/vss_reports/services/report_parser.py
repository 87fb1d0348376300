"""
VSS text report parser.

Drives the section splitter and the per-type assemblers over one report file and
collects the records into a mapping of report type code to records in file order.
"""
import logging
import logging.config
import os
from typing import Dict, List, Optional, Tuple

from vss_reports.models.field_position import DEFAULT_FIELD_POSITIONS, FieldPositionConfig
from vss_reports.models.report_records import ParseResult, ReportRecord
from vss_reports.models.report_summary import ReportFileSummary
from vss_reports.services.report_assemblers import assemble_section
from vss_reports.services.section_splitter import split_sections
from vss_reports.utils.parser_config import DEFAULT_PARSER_CONFIG, ParserConfig

# Configure logging
log_conf = os.environ.get('LOGGING_CONFIG')
if log_conf:
    logging.config.fileConfig(log_conf)
else:
    logging.basicConfig(
        level=os.environ.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

logger = logging.getLogger(__name__)

FALLBACK_ENCODINGS = ['utf-8', 'latin-1', 'cp1252']


def merge_records(results: ParseResult, report_type: str, records: List[ReportRecord]) -> None:
    """Append records for a report type, creating the entry on first sight."""
    if report_type in results:
        results[report_type].extend(records)
    else:
        results[report_type] = list(records)


def parse_report_text(
    content: Optional[str],
    file_name: Optional[str] = None,
    field_config: Optional[FieldPositionConfig] = None,
    config: Optional[ParserConfig] = None,
) -> ParseResult:
    """
    Parse a complete VSS text report file.

    Sections of the same report type that occur more than once are accumulated in
    file order. Report types that do not occur have no entry.

    Args:
        content: Full file text, LF or CRLF line endings
        file_name: Name recorded on every record for audit
        field_config: Field position table, defaults to the standard layout
        config: Parser switches, defaults to ParserConfig()

    Returns:
        Dict mapping report type code (e.g. "VSS-110") to its records
    """
    field_config = field_config or DEFAULT_FIELD_POSITIONS
    config = config or DEFAULT_PARSER_CONFIG
    results: ParseResult = {}

    if not content:
        logger.info(f"No content to parse for file {file_name}")
        return results

    for section in split_sections(content):
        records = assemble_section(section, file_name, field_config, config)
        logger.info(f"Parsed {len(records)} {section.report_type.value} records "
                    f"from section starting at line {section.start_line_number}")
        merge_records(results, section.report_type.value, records)

    logger.info(f"Parsed {sum(len(r) for r in results.values())} records "
                f"across {len(results)} report types from {file_name}")
    return results


def decode_report_content(content: bytes, preferred_encoding: Optional[str] = None) -> Tuple[str, str]:
    """
    Decode uploaded bytes, trying the preferred encoding and then common fallbacks.

    Returns:
        Tuple of (decoded text, encoding used)
    """
    encodings: List[str] = []
    for encoding in [preferred_encoding] + FALLBACK_ENCODINGS:
        if encoding and encoding not in encodings:
            encodings.append(encoding)

    for encoding in encodings:
        try:
            return content.decode(encoding), encoding
        except (UnicodeDecodeError, LookupError):
            continue

    # latin-1 maps every byte, so this is only reached with a broken preferred list
    logger.warning("Falling back to utf-8 with replacement characters")
    return content.decode('utf-8', errors='replace'), 'utf-8'


def process_report_file(
    content: bytes,
    file_name: Optional[str] = None,
    field_config: Optional[FieldPositionConfig] = None,
    config: Optional[ParserConfig] = None,
) -> ReportFileSummary:
    """
    Decode and parse an uploaded VSS report file and summarize the result.

    Never raises for malformed content: unexpected failures are reported through the
    summary's success flag and error text.
    """
    file_size = len(content) if content else 0

    try:
        config = config or ParserConfig.from_environment()
        text, encoding = decode_report_content(content or b'', config.file_encoding)
        logger.info(f"Decoded {file_name} ({file_size} bytes) using {encoding}")

        results = parse_report_text(text, file_name, field_config, config)
        record_counts: Dict[str, int] = {report_type: len(records) for report_type, records in results.items()}

        if not results:
            message = "No VSS report sections found"
        else:
            message = f"Parsed {sum(record_counts.values())} records from {len(results)} report types"

        return ReportFileSummary(
            success=True,
            file_name=file_name,
            file_size=file_size,
            parsed_sections=list(results.keys()),
            record_counts=record_counts,
            message=message,
        )
    except Exception as e:
        logger.error(f"Error processing report file {file_name}: {str(e)}", exc_info=True)
        return ReportFileSummary(
            success=False,
            file_name=file_name,
            file_size=file_size,
            message="Failed to process report file",
            error=str(e),
        )
