"""
Splits VSS text report files into report sections.

A section starts at a line carrying ``REPORT ID: VSS-<type>`` and runs until the
``*** END OF VSS-... REPORT ***`` marker, the next start line, or the end of file.
"""
import logging
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Iterator, List, Optional, Tuple

from vss_reports.models.report_records import ReportType
from vss_reports.utils.date_decoder import extract_processing_date, extract_report_date

logger = logging.getLogger(__name__)

# Checked in order; the first match wins
REPORT_START_PATTERNS = [
    (ReportType.VSS_110, re.compile(r'REPORT ID:\s*VSS-110')),
    (ReportType.VSS_120, re.compile(r'REPORT ID:\s*VSS-120')),
    (ReportType.VSS_130, re.compile(r'REPORT ID:\s*VSS-130')),
    (ReportType.VSS_140, re.compile(r'REPORT ID:\s*VSS-140')),
    (ReportType.VSS_900, re.compile(r'REPORT ID:\s*VSS-900-S')),
]

END_OF_REPORT_PATTERN = re.compile(r'\*\*\*\s*END OF VSS-\d+(-S)?\s*REPORT\s*\*\*\*')

_LINE_BREAK = re.compile(r'\r?\n')

NumberedLine = Tuple[int, str]


@dataclass
class ReportSection:
    """Buffered lines of one report section with the dates from its start line."""
    report_type: ReportType
    start_line_number: int
    processing_date: Optional[date] = None
    report_date: Optional[date] = None
    lines: List[NumberedLine] = field(default_factory=list)


def split_lines(content: str) -> List[str]:
    """Split text on LF or CRLF. A single trailing line break does not add a line."""
    if not content:
        return []
    lines = _LINE_BREAK.split(content)
    if lines and lines[-1] == '':
        lines.pop()
    return lines


def identify_report_type(line: str) -> Optional[ReportType]:
    for report_type, pattern in REPORT_START_PATTERNS:
        if pattern.search(line):
            return report_type
    return None


def is_end_of_report(line: str) -> bool:
    return bool(END_OF_REPORT_PATTERN.search(line))


def split_sections(content: str) -> Iterator[ReportSection]:
    """
    Scan the file once and yield each non-empty section in file order.

    Lines outside an open section are discarded. Buffered lines keep their 1-based
    line number within the whole file.

    Args:
        content: Full report text

    Yields:
        ReportSection for every section that buffered at least one line
    """
    current: Optional[ReportSection] = None

    for line_number, line in enumerate(split_lines(content), start=1):
        report_type = identify_report_type(line)
        if report_type is not None:
            if current is not None and current.lines:
                yield current
            current = ReportSection(
                report_type=report_type,
                start_line_number=line_number,
                processing_date=extract_processing_date(line),
                report_date=extract_report_date(line),
            )
            logger.debug(f"Found report type {report_type.value} at line {line_number}")
            continue

        if is_end_of_report(line):
            if current is not None and current.lines:
                yield current
            elif current is None:
                logger.debug(f"End marker outside an open section at line {line_number}")
            current = None
            continue

        if current is not None:
            current.lines.append((line_number, line))

    if current is not None and current.lines:
        yield current
