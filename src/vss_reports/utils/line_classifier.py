"""
Line classification for VSS text reports.

Predicates that decide whether a report line is a banner/format line, carries
financial figures, or declares context (section name, transaction type, currency,
...) for the data lines that follow it.
"""
import logging
import re
from typing import Callable, Optional

logger = logging.getLogger(__name__)

SETTLEMENT_CURRENCY_LABEL = "SETTLEMENT CURRENCY:"
CLEARING_CURRENCY_LABEL = "CLEARING CURRENCY:"

BANNER_MARKERS = (
    "VISANET SETTLEMENT SERVICE",
    "PAGE:",
    "REPORTING FOR:",
    "ROLLUP TO:",
    "FUNDS XFER ENTITY:",
    SETTLEMENT_CURRENCY_LABEL,
    CLEARING_CURRENCY_LABEL,
    "---",
    "===",
)

COLUMN_HEADER_WORDS = ("COUNT", "AMOUNT", "CREDITS", "DEBITS")

_LETTERS_ONLY = re.compile(r'^\s*[A-Z\s]+$')
_SECTION_NAME = re.compile(r'^[A-Z\s]+$')
_FINANCIAL_PATTERNS = (
    re.compile(r'\d+\.\d{2}'),
    re.compile(r'\d+CR'),
    re.compile(r'\d+DB'),
    re.compile(r'\d{1,3}(,\d{3})*\.\d{2}'),
)

ContextExtractor = Callable[[str], Optional[str]]


def is_banner_line(line: str) -> bool:
    """Blank lines, page banners, label lines and separator rules."""
    if not line.strip():
        return True
    return any(marker in line for marker in BANNER_MARKERS)


def has_financial_data(line: str) -> bool:
    """True when the line holds at least one amount; the only trigger for a record."""
    return any(pattern.search(line) for pattern in _FINANCIAL_PATTERNS)


def is_letters_only_line(line: str) -> bool:
    return bool(_LETTERS_ONLY.match(line)) and not has_financial_data(line)


def is_column_header_line(line: str) -> bool:
    """A letters-only row naming at least two columns, e.g. COUNT ... CREDIT AMOUNT."""
    if not is_letters_only_line(line):
        return False
    return sum(1 for word in line.split() if word in COLUMN_HEADER_WORDS) >= 2


def is_format_or_header_line(line: str) -> bool:
    """
    Banner lines plus every letters-only line.

    For callers that only need to know whether a line can carry figures. The
    assemblers do not use it: letters-only lines also declare sticky context, so they
    check banners, column headers and financial data separately.
    """
    return is_banner_line(line) or is_letters_only_line(line)


def extract_section_name(line: str) -> Optional[str]:
    trimmed = line.strip()
    if not _SECTION_NAME.match(trimmed) or not 3 < len(trimmed) < 50:
        return None
    if any(word in trimmed for word in ("INTERCHANGE", "REIMBURSEMENT", "VISA CHARGES", "TOTAL")):
        return trimmed
    return None


def extract_transaction_type(line: str) -> Optional[str]:
    trimmed = line.strip()
    if trimmed in ("PURCHASE", "MANUAL CASH") or "CASH" in trimmed:
        return trimmed
    return None


def extract_transaction_detail(line: str) -> Optional[str]:
    trimmed = line.strip()
    if "ORIGINAL" in trimmed:
        return trimmed
    return None


def extract_fee_category(line: str) -> Optional[str]:
    trimmed = line.strip()
    if "VISA" in trimmed and ("CEMEA" in trimmed or "INTERNATIONAL" in trimmed):
        return trimmed
    return None


def extract_charge_type(line: str) -> Optional[str]:
    trimmed = line.strip()
    if "CHARGE" in trimmed:
        return trimmed
    return None


def extract_region(line: str) -> Optional[str]:
    trimmed = line.strip()
    if any(marker in trimmed for marker in ("C.E.M.E.A", "E.U.", "CEMEA")):
        return trimmed
    return None


def extract_transaction_category(line: str) -> Optional[str]:
    # NON-FINANCIAL TRANSACTIONS contains FINANCIAL TRANSACTIONS
    trimmed = line.strip()
    if "FINANCIAL TRANSACTIONS" in trimmed:
        return trimmed
    return None


def extract_transaction_direction(line: str) -> Optional[str]:
    trimmed = line.strip()
    if "SENT TO VISA" in trimmed or "RECEIVED FROM VISA" in trimmed:
        return trimmed
    return None


def _currency_declaration(line: str, label: str) -> Optional[str]:
    trimmed = line.strip()
    if not trimmed.startswith(label):
        return None
    return trimmed[len(label):].strip()


def extract_settlement_currency_declaration(line: str) -> Optional[str]:
    """
    Read a 'SETTLEMENT CURRENCY:' declaration.

    Returns:
        None when the line is not a declaration, "" for an empty declaration,
        otherwise the first three characters of the declared value
    """
    value = _currency_declaration(line, SETTLEMENT_CURRENCY_LABEL)
    return value[:3] if value is not None else None


def extract_clearing_currency_declaration(line: str) -> Optional[str]:
    """Same contract as extract_settlement_currency_declaration for 'CLEARING CURRENCY:'."""
    value = _currency_declaration(line, CLEARING_CURRENCY_LABEL)
    return value[:3] if value is not None else None
