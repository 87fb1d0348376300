"""
Date decoding for VSS files.

Two independent vocabularies are handled here:

- header dates printed on report start lines, e.g. ``PROC DATE: 17FEB22``;
- ordinal (day-of-year) encodings used on settlement records: ``CCYYDDD`` (7 digits),
  ``CCYDDD`` (6 digits) and ``YYDDD`` (5 digits).

The EPIN header timestamp (``YYMMDDHHSS``) is decoded leniently: impossible month,
day, hour or second values are clamped instead of rejected unless clamping is turned
off in ParserConfig.
"""
import calendar
import logging
import re
from datetime import date, datetime, timedelta
from typing import Optional

from vss_reports.utils.parser_config import DEFAULT_PARSER_CONFIG, ParserConfig

logger = logging.getLogger(__name__)

MIN_YEAR = 1900
MAX_YEAR = 2100

# Month vocabulary is fixed and independent of the process locale
MONTH_ABBREVIATIONS = {
    'JAN': 1, 'FEB': 2, 'MAR': 3, 'APR': 4, 'MAY': 5, 'JUN': 6,
    'JUL': 7, 'AUG': 8, 'SEP': 9, 'OCT': 10, 'NOV': 11, 'DEC': 12,
}

_HEADER_DATE = re.compile(r'^(\d{2})([A-Z]{3})(\d{2})$')
_PROC_DATE = re.compile(r'PROC DATE:\s*(\d{2}[A-Z]{3}\d{2})')
_REPORT_DATE = re.compile(r'REPORT DATE:\s*(\d{2}[A-Z]{3}\d{2})')
_CCYYDDD = re.compile(r'^\d{7}$')
_CCYDDD = re.compile(r'^\d{6}$')
_YYDDD = re.compile(r'^\d{5}$')
_TIMESTAMP = re.compile(r'^\d{10}$')

FALLBACK_DATE_FORMATS = [
    '%Y-%m-%d',
    '%Y%m%d',
    '%m/%d/%Y',
    '%d/%m/%Y',
]


class DateDecodeError(ValueError):
    """Raised when an encoded date cannot be decoded"""
    pass


def parse_header_date(value: Optional[str]) -> Optional[date]:
    """
    Parse a DDMMMYY header date such as '17FEB22'. The year is always 20YY.

    Returns None (and logs) when the text is not a valid date.
    """
    if not value:
        return None
    match = _HEADER_DATE.match(value.strip().upper())
    if not match:
        logger.warning(f"Failed to parse header date: {value}")
        return None
    day, month_name, year = match.groups()
    month = MONTH_ABBREVIATIONS.get(month_name)
    if month is None:
        logger.warning(f"Failed to parse header date: {value}")
        return None
    try:
        return date(2000 + int(year), month, int(day))
    except ValueError:
        logger.warning(f"Failed to parse header date: {value}")
        return None


def extract_processing_date(line: str) -> Optional[date]:
    match = _PROC_DATE.search(line)
    return parse_header_date(match.group(1)) if match else None


def extract_report_date(line: str) -> Optional[date]:
    match = _REPORT_DATE.search(line)
    return parse_header_date(match.group(1)) if match else None


def date_from_ordinal(year: int, day_of_year: int, original: str) -> date:
    """Build a date from a year and a 1-based day of year, validating both."""
    if year < MIN_YEAR or year > MAX_YEAR:
        raise DateDecodeError(f"Year must be between {MIN_YEAR} and {MAX_YEAR}: {original!r}")
    max_day = 366 if calendar.isleap(year) else 365
    if day_of_year < 1 or day_of_year > max_day:
        raise DateDecodeError(f"Day {day_of_year} is invalid for year {year} (max: {max_day}): {original!r}")
    return date(year, 1, 1) + timedelta(days=day_of_year - 1)


def parse_ccyyddd(value: Optional[str]) -> date:
    """Parse a 7-digit CCYYDDD date, e.g. '2022158' -> 2022-06-07."""
    if value is None:
        raise DateDecodeError("Date value is required")
    trimmed = value.strip()
    if not _CCYYDDD.match(trimmed):
        raise DateDecodeError(f"Expected CCYYDDD (7 digits): {value!r}")
    return date_from_ordinal(int(trimmed[:4]), int(trimmed[4:]), value)


def parse_ccyddd(value: Optional[str]) -> date:
    """
    Parse a 6-digit CCYDDD date.

    The year is century * 100 + the single year digit; a result below 2000 is read as
    2000 + year digit.
    """
    if value is None:
        raise DateDecodeError("Date value is required")
    trimmed = value.strip()
    if not _CCYDDD.match(trimmed):
        raise DateDecodeError(f"Expected CCYDDD (6 digits): {value!r}")
    century = int(trimmed[:2])
    year_digit = int(trimmed[2])
    year = century * 100 + year_digit
    if year < 2000:
        year = 2000 + year_digit
    return date_from_ordinal(year, int(trimmed[3:]), value)


def parse_yyddd(value: Optional[str], config: ParserConfig = DEFAULT_PARSER_CONFIG) -> date:
    if value is None:
        raise DateDecodeError("Date value is required")
    trimmed = value.strip()
    if not _YYDDD.match(trimmed):
        raise DateDecodeError(f"Expected YYDDD (5 digits): {value!r}")
    year = config.century_for(int(trimmed[:2]))
    return date_from_ordinal(year, int(trimmed[2:]), value)


def parse_ordinal_date(value: Optional[str], config: ParserConfig = DEFAULT_PARSER_CONFIG) -> date:
    """Parse any of the 7-, 6- or 5-digit ordinal encodings, chosen by length."""
    if value is None or not value.strip():
        raise DateDecodeError("Date value is required")
    trimmed = value.strip()
    if len(trimmed) == 7:
        return parse_ccyyddd(trimmed)
    if len(trimmed) == 6:
        return parse_ccyddd(trimmed)
    if len(trimmed) == 5:
        return parse_yyddd(trimmed, config)
    raise DateDecodeError(f"Unsupported ordinal date length: {value!r}")


def parse_flexible_date(value: Optional[str], config: ParserConfig = DEFAULT_PARSER_CONFIG) -> date:
    """
    Parse a date in any format seen in VSS files.

    Ordinal encodings are tried first, then the calendar formats in
    FALLBACK_DATE_FORMATS.

    Raises:
        DateDecodeError: If no format matches
    """
    if value is None or not value.strip():
        raise DateDecodeError("Date value is required")
    trimmed = value.strip()

    if _CCYYDDD.match(trimmed) or _CCYDDD.match(trimmed) or _YYDDD.match(trimmed):
        return parse_ordinal_date(trimmed, config)

    for date_format in FALLBACK_DATE_FORMATS:
        try:
            return datetime.strptime(trimmed, date_format).date()
        except ValueError:
            continue

    raise DateDecodeError(
        f"Could not parse date {value!r}. Expected CCYYDDD, CCYDDD, YYDDD, "
        f"YYYY-MM-DD, YYYYMMDD, MM/DD/YYYY or DD/MM/YYYY"
    )


def _clamp(name: str, value: int, lowest: int, highest: int, raw: str) -> int:
    if lowest <= value <= highest:
        return value
    clamped = max(lowest, min(highest, value))
    logger.warning(f"Clamped timestamp {name} from {value} to {clamped} in {raw!r}")
    return clamped


def parse_header_timestamp(value: Optional[str], config: ParserConfig = DEFAULT_PARSER_CONFIG) -> Optional[datetime]:
    """
    Decode a YYMMDDHHSS header timestamp.

    Minutes are not carried by the format and are always zero. When clamping, days
    are limited to 1-28 so the result is valid in every month; in strict mode the
    components must form a real calendar date.

    Args:
        value: 10-digit timestamp text
        config: Parser configuration (pivot year, clamping switch)

    Returns:
        Decoded timestamp, or None for non-numeric input when clamping is enabled

    Raises:
        DateDecodeError: In strict mode, for malformed or out-of-range input
    """
    raw = (value or '').strip()
    if not _TIMESTAMP.match(raw):
        if config.clamp_header_timestamps:
            logger.warning(f"Invalid header timestamp: {value!r}")
            return None
        raise DateDecodeError(f"Invalid timestamp format. Expected YYMMDDHHSS (10 digits): {value!r}")

    year = config.century_for(int(raw[0:2]))
    month, day, hour, second = int(raw[2:4]), int(raw[4:6]), int(raw[6:8]), int(raw[8:10])

    if not config.clamp_header_timestamps:
        try:
            return datetime(year, month, day, hour, 0, second)
        except ValueError as e:
            raise DateDecodeError(f"Invalid header timestamp {raw!r}: {e}") from e

    month = _clamp('month', month, 1, 12, raw)
    day = _clamp('day', day, 1, 28, raw)
    hour = _clamp('hour', hour, 0, 23, raw)
    second = _clamp('second', second, 0, 59, raw)
    return datetime(year, month, day, hour, 0, second)


def format_ccyyddd(value: date) -> str:
    if value is None:
        raise ValueError("Date cannot be None")
    return f"{value.year:04d}{value.timetuple().tm_yday:03d}"


def format_ccyddd(value: date) -> str:
    """Format as CCYDDD: century, last digit of the year, day of year."""
    if value is None:
        raise ValueError("Date cannot be None")
    return f"{value.year // 100:02d}{value.year % 10}{value.timetuple().tm_yday:03d}"
