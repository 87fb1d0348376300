"""
Parser for machine-readable VSS-110/111 settlement files.

Each record is one fixed-width TC46 TCR0 line of 168 characters (V2110 detail or
V2111 summary). Files may start with an EPIN header line. Positions below are 1-based
and inclusive, as printed in the record layout.
"""
import logging
import re
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from functools import partial
from typing import Callable, List, Optional, Tuple

from pydantic import ValidationError

from vss_reports.models.settlement_record import EpinFileHeader, SettlementRecord
from vss_reports.services.section_splitter import split_lines
from vss_reports.utils.date_decoder import (
    DateDecodeError,
    parse_ccyyddd,
    parse_flexible_date,
    parse_header_timestamp,
    parse_ordinal_date,
)
from vss_reports.utils.parser_config import DEFAULT_PARSER_CONFIG, ParserConfig

logger = logging.getLogger(__name__)

RECORD_TYPE = "VSS-110"
EXPECTED_RECORD_LENGTH = 168
MIN_RECORD_LENGTH = 155

TRANSACTION_CODE = (1, 2)
TRANSACTION_CODE_QUALIFIER = (3, 3)
COMPONENT_SEQUENCE = (4, 4)
DESTINATION_ID = (5, 10)
SOURCE_ID = (11, 16)
REPORTING_SRE_ID = (17, 26)
ROLLUP_SRE_ID = (27, 36)
FUNDS_TRANSFER_SRE_ID = (37, 46)
SETTLEMENT_SERVICE = (47, 49)
CURRENCY_CODE = (50, 52)
NO_DATA_INDICATOR = (53, 53)
REPORT_GROUP = (59, 59)
REPORT_SUBGROUP = (60, 60)
REPORT_ID_NUMBER = (61, 63)
REPORT_ID_SUFFIX = (64, 65)
SETTLEMENT_DATE = (66, 72)
REPORT_DATE = (73, 79)
FROM_DATE = (80, 86)
TO_DATE = (87, 93)
AMOUNT_TYPE = (94, 94)
BUSINESS_MODE = (95, 95)
TRANSACTION_COUNT = (96, 110)
CREDIT_AMOUNT = (111, 125)
DEBIT_AMOUNT = (126, 140)
NET_AMOUNT = (141, 155)
AMOUNT_SIGN = (156, 157)
FUNDS_TRANSFER_DATE = (158, 164)
REIMBURSEMENT_ATTRIBUTE = (168, 168)

VALID_REPORT_IDS = ("110", "111")
VALID_AMOUNT_TYPES = ("I", "F", "C", "T", "")
VALID_AMOUNT_SIGNS = ("CR", "DB", "")

_DESTINATION_ID = re.compile(r'^\d{6}$')
_AMOUNT = re.compile(r'^\d{15}$')
_COUNT = re.compile(r'^\d+$')
_EPIN_HEADER = re.compile(r'^([0-9]{13})\s+([0-9]{10})\s+([0-9]{4})\s+([0-9]*)([A-Z0-9]+)\s+([0-9]+).*')
_TIMESTAMP_DIGITS = re.compile(r'([0-9]{10})')
_SEQUENCE_DIGITS = re.compile(r'([0-9]{4})')
_CLIENT_ID = re.compile(r'([A-Z][A-Z0-9]{3,7})')
_TRAILING_DIGITS = re.compile(r'([0-9]{1,3})\s*$')


class SettlementRecordError(ValueError):
    """Raised when a settlement record or header line cannot be parsed"""

    def __init__(self, message: str, line_number: Optional[int] = None,
                 record_type: str = RECORD_TYPE, field_name: Optional[str] = None):
        self.line_number = line_number
        self.record_type = record_type
        self.field_name = field_name
        location = f"line {line_number}" if line_number is not None else "header"
        detail = f" [{field_name}]" if field_name else ""
        super().__init__(f"{record_type} {location}{detail}: {message}")


@dataclass
class SettlementParseResult:
    """Outcome of parsing a settlement file: valid records plus per-line errors."""
    header: Optional[EpinFileHeader] = None
    records: List[SettlementRecord] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


def _field(line: str, span: Tuple[int, int]) -> str:
    start, end = span
    return line[start - 1:end]


def _parse_amount(raw: str, field_name: str, line_number: int) -> Decimal:
    """15 digits with two implied decimals; blank reads as zero."""
    if not raw.strip():
        return Decimal("0.00")
    if not _AMOUNT.match(raw):
        raise SettlementRecordError(f"Expected 15-digit numeric, got {raw!r}", line_number, field_name=field_name)
    return Decimal(int(raw)).scaleb(-2)


def _parse_count(raw: str, line_number: int) -> int:
    value = raw.strip()
    if not value:
        return 0
    if not _COUNT.match(value):
        raise SettlementRecordError(f"Invalid count {raw!r}", line_number, field_name="transaction_count")
    return int(value)


def _parse_date(raw: str, field_name: str, line_number: int,
                decoder: Callable[[str], date], required: bool = False) -> Optional[date]:
    value = raw.strip()
    if not value:
        if required:
            raise SettlementRecordError("Missing required date", line_number, field_name=field_name)
        return None
    try:
        return decoder(value)
    except DateDecodeError as e:
        raise SettlementRecordError(str(e), line_number, field_name=field_name) from e


def _parse_optional_date(raw: str, field_name: str, line_number: int,
                         decoder: Callable[[str], date]) -> Optional[date]:
    try:
        return _parse_date(raw, field_name, line_number, decoder)
    except SettlementRecordError as e:
        logger.warning(f"Ignoring invalid date: {str(e)}")
        return None


def _validate_net_amount(credit: Decimal, debit: Decimal, net: Decimal, sign: str, line_number: int) -> None:
    """The net field carries |credit - debit|; the sign field carries its direction."""
    calculated = credit - debit
    if abs(calculated) != net:
        raise SettlementRecordError(
            f"Amount inconsistency: credit {credit} - debit {debit} = {calculated}, net field {net}",
            line_number, field_name="net_amount"
        )
    if calculated == 0:
        return
    expected_sign = "CR" if calculated > 0 else "DB"
    if sign != expected_sign:
        raise SettlementRecordError(
            f"Amount sign {sign!r} does not match net {calculated} (expected {expected_sign})",
            line_number, field_name="amount_sign"
        )


def parse_settlement_line(line: Optional[str], line_number: int,
                          config: ParserConfig = DEFAULT_PARSER_CONFIG) -> SettlementRecord:
    """
    Parse and validate one TC46 V2110/V2111 record line.

    Args:
        line: Record text, trailing line break already removed
        line_number: 1-based line number used in error reports
        config: Parser configuration (two-digit year pivot)

    Returns:
        SettlementRecord with scaled amounts and a signed net amount

    Raises:
        SettlementRecordError: If the line is too short or any validated field is invalid
    """
    if line is None:
        raise SettlementRecordError("Missing record line", line_number, field_name="record_line")
    if len(line) < MIN_RECORD_LENGTH:
        raise SettlementRecordError(
            f"Record length {len(line)} is below the minimum {MIN_RECORD_LENGTH}",
            line_number, field_name="record_line"
        )
    if len(line) != EXPECTED_RECORD_LENGTH:
        logger.debug(f"Record at line {line_number} has length {len(line)}, expected {EXPECTED_RECORD_LENGTH}")

    transaction_code = _field(line, TRANSACTION_CODE)
    if transaction_code != "46":
        raise SettlementRecordError(f"Expected '46', got {transaction_code!r}", line_number, field_name="transaction_code")

    qualifier = _field(line, TRANSACTION_CODE_QUALIFIER)
    sequence = _field(line, COMPONENT_SEQUENCE)
    if qualifier != "0" or sequence != "0":
        logger.warning(f"Unexpected qualifier/sequence {qualifier!r}/{sequence!r} at line {line_number}")

    destination_id = _field(line, DESTINATION_ID)
    if not _DESTINATION_ID.match(destination_id):
        raise SettlementRecordError(f"Expected 6 digits, got {destination_id!r}", line_number, field_name="destination_id")

    report_group = _field(line, REPORT_GROUP)
    if report_group != "V":
        raise SettlementRecordError(f"Expected 'V', got {report_group!r}", line_number, field_name="report_group")

    report_subgroup = _field(line, REPORT_SUBGROUP)
    if report_subgroup != "2":
        raise SettlementRecordError(f"Expected '2', got {report_subgroup!r}", line_number, field_name="report_subgroup")

    report_id_number = _field(line, REPORT_ID_NUMBER)
    if report_id_number not in VALID_REPORT_IDS:
        raise SettlementRecordError(f"Expected 110 or 111, got {report_id_number!r}", line_number, field_name="report_id_number")

    amount_type = _field(line, AMOUNT_TYPE).strip()
    if amount_type not in VALID_AMOUNT_TYPES:
        raise SettlementRecordError(f"Expected I, F, C, T or space, got {amount_type!r}", line_number, field_name="amount_type")

    amount_sign = _field(line, AMOUNT_SIGN).strip()
    if amount_sign not in VALID_AMOUNT_SIGNS:
        raise SettlementRecordError(f"Expected CR, DB or spaces, got {amount_sign!r}", line_number, field_name="amount_sign")

    credit_amount = _parse_amount(_field(line, CREDIT_AMOUNT), "credit_amount", line_number)
    debit_amount = _parse_amount(_field(line, DEBIT_AMOUNT), "debit_amount", line_number)
    net_amount = _parse_amount(_field(line, NET_AMOUNT), "net_amount", line_number)
    _validate_net_amount(credit_amount, debit_amount, net_amount, amount_sign, line_number)

    flexible = partial(parse_flexible_date, config=config)
    ordinal = partial(parse_ordinal_date, config=config)

    try:
        record = SettlementRecord(
            transaction_code=transaction_code,
            transaction_code_qualifier=qualifier,
            component_sequence=sequence,
            destination_id=destination_id,
            source_id=_field(line, SOURCE_ID).strip(),
            reporting_sre_id=_field(line, REPORTING_SRE_ID).strip(),
            rollup_sre_id=_field(line, ROLLUP_SRE_ID).strip(),
            funds_transfer_sre_id=_field(line, FUNDS_TRANSFER_SRE_ID).strip(),
            settlement_service=_field(line, SETTLEMENT_SERVICE).strip(),
            currency_code=_field(line, CURRENCY_CODE).strip(),
            no_data_indicator=_field(line, NO_DATA_INDICATOR).strip(),
            report_group=report_group,
            report_subgroup=report_subgroup,
            report_id_number=report_id_number,
            report_id_suffix=_field(line, REPORT_ID_SUFFIX).strip(),
            settlement_date=_parse_date(_field(line, SETTLEMENT_DATE), "settlement_date", line_number,
                                        parse_ccyyddd, required=True),
            report_date=_parse_date(_field(line, REPORT_DATE), "report_date", line_number, parse_ccyyddd),
            from_date=_parse_optional_date(_field(line, FROM_DATE), "from_date", line_number, flexible),
            to_date=_parse_optional_date(_field(line, TO_DATE), "to_date", line_number, flexible),
            amount_type=amount_type,
            business_mode=_field(line, BUSINESS_MODE).strip(),
            transaction_count=_parse_count(_field(line, TRANSACTION_COUNT), line_number),
            credit_amount=credit_amount,
            debit_amount=debit_amount,
            net_amount=-net_amount if amount_sign == "DB" else net_amount,
            amount_sign=amount_sign,
            funds_transfer_date=_parse_optional_date(_field(line, FUNDS_TRANSFER_DATE), "funds_transfer_date",
                                                     line_number, ordinal),
            reimbursement_attribute=_field(line, REIMBURSEMENT_ATTRIBUTE).strip(),
            line_number=line_number,
            raw_line=line,
        )
    except ValidationError as e:
        raise SettlementRecordError(str(e), line_number) from e

    logger.debug(f"Parsed settlement record {record.record_tag} at line {line_number}: net {record.net_amount}")
    return record


def _parse_header_fixed_position(line: str) -> Tuple[str, str, str, str, str]:
    """Best-effort split of a header whose spacing does not match the usual layout."""
    routing_number = line[:13].strip()
    timestamp_match = _TIMESTAMP_DIGITS.search(line, 13)
    if not timestamp_match:
        raise SettlementRecordError("No 10-digit timestamp found", field_name="timestamp", record_type="EPIN")
    raw_timestamp = timestamp_match.group(1)

    sequence_match = _SEQUENCE_DIGITS.search(line, timestamp_match.end())
    client_match = _CLIENT_ID.search(line)
    file_sequence_match = _TRAILING_DIGITS.search(line)
    return (
        routing_number,
        raw_timestamp,
        sequence_match.group(1) if sequence_match else "",
        client_match.group(1) if client_match else "",
        file_sequence_match.group(1) if file_sequence_match else "",
    )


def parse_epin_header(line: Optional[str], config: ParserConfig = DEFAULT_PARSER_CONFIG) -> EpinFileHeader:
    """
    Parse the EPIN file header line.

    Example: ``9043347522158      2215800400     0000      000000000000000000BMOI4197      001``

    Raises:
        SettlementRecordError: If the routing number or timestamp cannot be read
    """
    if not line or not line.strip():
        raise SettlementRecordError("Header line is empty", record_type="EPIN", field_name="header")

    match = _EPIN_HEADER.match(line)
    if match:
        routing_number = match.group(1)
        raw_timestamp = match.group(2)
        sequence_number = match.group(3).strip()
        client_id = match.group(5).strip()
        file_sequence = match.group(6).strip()
    else:
        logger.debug("EPIN header did not match the standard layout, using fixed positions")
        routing_number, raw_timestamp, sequence_number, client_id, file_sequence = _parse_header_fixed_position(line)

    if not routing_number.isdigit():
        raise SettlementRecordError(f"Routing number must contain only digits: {routing_number!r}",
                                    record_type="EPIN", field_name="routing_number")

    try:
        timestamp = parse_header_timestamp(raw_timestamp, config)
    except DateDecodeError as e:
        raise SettlementRecordError(str(e), record_type="EPIN", field_name="timestamp") from e
    if timestamp is None:
        raise SettlementRecordError(f"Invalid timestamp {raw_timestamp!r}", record_type="EPIN", field_name="timestamp")

    return EpinFileHeader(
        routing_number=routing_number,
        raw_timestamp=raw_timestamp,
        timestamp=timestamp,
        sequence_number=sequence_number,
        client_id=client_id,
        file_sequence=file_sequence,
        raw_line=line,
    )


def is_epin_header_line(line: str) -> bool:
    return not line.startswith("46") and bool(_EPIN_HEADER.match(line))


def parse_settlement_file(content: Optional[str], config: ParserConfig = DEFAULT_PARSER_CONFIG) -> SettlementParseResult:
    """
    Parse a settlement file: an optional EPIN header followed by one record per line.

    Invalid lines do not stop the parse; they are logged and reported in `errors`.
    Blank lines are skipped.
    """
    result = SettlementParseResult()
    lines = split_lines(content or "")
    if not lines:
        logger.warning("No lines provided for settlement file parsing")
        return result

    logger.info(f"Parsing settlement file with {len(lines)} lines")
    first_content_line = True

    for line_number, line in enumerate(lines, start=1):
        if not line.strip():
            continue

        if first_content_line:
            first_content_line = False
            if is_epin_header_line(line):
                try:
                    result.header = parse_epin_header(line, config)
                except SettlementRecordError as e:
                    logger.error(f"Invalid file header: {str(e)}")
                    result.errors.append(f"Line {line_number}: {str(e)}")
                continue

        try:
            result.records.append(parse_settlement_line(line, line_number, config))
        except SettlementRecordError as e:
            logger.error(f"Skipping invalid settlement record: {str(e)}")
            result.errors.append(f"Line {line_number}: {str(e)}")

    if result.errors:
        logger.warning(f"Settlement file parsing completed with {len(result.errors)} errors")
    logger.info(f"Parsed {len(result.records)} settlement records from {len(lines)} lines")
    return result
