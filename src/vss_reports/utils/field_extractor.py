"""
Fixed-width field extraction for VSS report lines.

All functions are pure. A window that falls partly outside the line is clipped to the
line; a window entirely outside it reads as empty text.
"""
import logging
import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Tuple

from vss_reports.models.field_position import FieldPosition, ReadDirection

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")
ZERO_AMOUNT = Decimal("0.00")

_CURRENCY_PATTERN = re.compile(r'^[A-Z]{3}$')
_DIGITS_PATTERN = re.compile(r'^\d+$')
_NEIGHBOUR_PATTERN = re.compile(r'^[\d,.]+(CR|DB)?$')


class FieldExtractionError(Exception):
    """Raised when a field window cannot be computed for a line"""
    pass


def field_window(line_length: int, field: FieldPosition) -> Tuple[int, int]:
    """
    Compute the 0-based, end-exclusive window a field occupies on a line.

    Args:
        line_length: Length of the line being read
        field: Configured field position

    Returns:
        (start, end) clipped to [0, line_length]
    """
    if line_length < 0:
        raise FieldExtractionError(f"Invalid line length: {line_length}")
    if field.direction == ReadDirection.RIGHT_TO_LEFT:
        start = field.position - field.max_length
        end = field.position
    else:
        start = field.position - 1
        end = start + field.max_length
    start = max(0, start)
    end = min(line_length, end)
    if start >= end:
        return line_length, line_length
    return start, end


def extract_string(line: Optional[str], field: FieldPosition) -> str:
    """Read the raw text inside a field window. Never raises for short lines."""
    if not line:
        return ""
    start, end = field_window(len(line), field)
    return line[start:end]


def extract_table_id(line: Optional[str], field: FieldPosition) -> str:
    return extract_string(line, field).strip()


def extract_currency(line: Optional[str], field: FieldPosition) -> Optional[str]:
    """Read a currency code; only three uppercase letters count."""
    value = extract_string(line, field).strip()
    if _CURRENCY_PATTERN.match(value):
        return value
    return None


def anchored_token(raw: str, direction: ReadDirection) -> Optional[str]:
    """
    Pick the value token of a window.

    Neighbouring default windows overlap, so a right-to-left window can also hold the
    tail of the field to its left (and a left-to-right window the head of the field to
    its right). A numeric token that touches the edge opposite the anchor without
    filling the window is that neighbour and is dropped. A detached CR/DB marker stays
    with its amount.

    Returns:
        The single remaining token, "" for a blank window, or None when more than one
        token is left (malformed text)
    """
    spans = [(m.start(), m.end(), m.group()) for m in re.finditer(r'\S+', raw)]
    if not spans:
        return ""

    if direction == ReadDirection.RIGHT_TO_LEFT:
        start, end, token = spans[0]
        if start == 0 and end < len(raw) and _NEIGHBOUR_PATTERN.match(token):
            spans = spans[1:]
    else:
        start, end, token = spans[-1]
        if end == len(raw) and start > 0 and _NEIGHBOUR_PATTERN.match(token):
            spans = spans[:-1]

    tokens = [token for _, _, token in spans]
    if len(tokens) > 1 and tokens[-1] in ('CR', 'DB'):
        tokens = tokens[:-2] + [tokens[-2] + tokens[-1]]
    if not tokens:
        return ""
    if len(tokens) > 1:
        logger.debug(f"Unexpected text in field window: {raw!r}")
        return None
    return tokens[0]


def parse_count(raw: str) -> Optional[int]:
    """Decode count text such as '1,074'. Returns None for anything non-numeric."""
    value = raw.strip().replace(',', '')
    if value == '' or value == '0':
        return 0
    if not _DIGITS_PATTERN.match(value):
        logger.debug(f"Unparseable count value: {raw!r}")
        return None
    return int(value)


def extract_count(line: Optional[str], field: FieldPosition) -> Optional[int]:
    token = anchored_token(extract_string(line, field), field.direction)
    return parse_count(token) if token is not None else None


def parse_amount(raw: str) -> Optional[Decimal]:
    """
    Decode amount text with an optional CR/DB suffix.

    '1,234.56CR' -> 1234.56, '1,234.56DB' -> -1234.56, '123DB' -> -123.00.
    Blank, '0' and '0.00' read as zero.

    Args:
        raw: Window text as read from the line

    Returns:
        Amount quantized to two places, or None when the text is not numeric
    """
    value = raw.strip()
    negative = False
    if value.endswith('DB'):
        negative = True
        value = value[:-2]
    elif value.endswith('CR'):
        value = value[:-2]
    value = value.replace(',', '').strip()

    if value in ('', '0', '0.00'):
        return ZERO_AMOUNT

    try:
        amount = Decimal(value)
    except InvalidOperation:
        logger.debug(f"Unparseable amount value: {raw!r}")
        return None
    if not amount.is_finite():
        logger.debug(f"Rejected amount value: {raw!r}")
        return None

    amount = amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    return -amount if negative else amount


def extract_amount(line: Optional[str], field: FieldPosition) -> Optional[Decimal]:
    token = anchored_token(extract_string(line, field), field.direction)
    return parse_amount(token) if token is not None else None
