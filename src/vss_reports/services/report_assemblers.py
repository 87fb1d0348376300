"""
Record assembly for VSS report sections.

Each assembler walks the buffered lines of one section, keeps the sticky context
declared by label lines (section name, transaction type, region, ...) and turns every
financial-data line into one typed record.
"""
import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from vss_reports.models.field_position import DEFAULT_FIELD_POSITIONS, FieldPosition, FieldPositionConfig
from vss_reports.models.report_records import (
    Report110Record,
    Report120Record,
    Report130Record,
    Report140Record,
    Report900Record,
    ReportRecord,
    ReportType,
    SourceLine,
)
from vss_reports.services.section_splitter import ReportSection
from vss_reports.utils.field_extractor import (
    FieldExtractionError,
    extract_amount,
    extract_count,
    extract_currency,
    extract_table_id,
)
from vss_reports.utils.line_classifier import (
    ContextExtractor,
    extract_charge_type,
    extract_clearing_currency_declaration,
    extract_fee_category,
    extract_region,
    extract_section_name,
    extract_settlement_currency_declaration,
    extract_transaction_category,
    extract_transaction_detail,
    extract_transaction_direction,
    extract_transaction_type,
    has_financial_data,
    is_banner_line,
    is_column_header_line,
)
from vss_reports.utils.parser_config import DEFAULT_PARSER_CONFIG, ParserConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SectionContext:
    """Sticky values that apply to every data line until the next declaration."""
    section_name: Optional[str] = None
    transaction_type: Optional[str] = None
    transaction_detail: Optional[str] = None
    fee_category: Optional[str] = None
    charge_type: Optional[str] = None
    region: Optional[str] = None
    transaction_category: Optional[str] = None
    transaction_direction: Optional[str] = None
    settlement_currency: Optional[str] = None
    clearing_currency: Optional[str] = None


ContextRule = Tuple[str, ContextExtractor]

# Rules are tried in order and the first match wins
CONTEXT_RULES: Dict[ReportType, Sequence[ContextRule]] = {
    ReportType.VSS_110: (
        ('section_name', extract_section_name),
    ),
    ReportType.VSS_120: (
        ('transaction_type', extract_transaction_type),
        ('transaction_detail', extract_transaction_detail),
    ),
    ReportType.VSS_130: (
        ('transaction_type', extract_transaction_type),
        ('transaction_detail', extract_transaction_detail),
        ('fee_category', extract_fee_category),
    ),
    ReportType.VSS_140: (
        ('charge_type', extract_charge_type),
        ('transaction_type', extract_transaction_type),
        ('transaction_detail', extract_transaction_detail),
        ('region', extract_region),
    ),
    ReportType.VSS_900: (
        ('transaction_category', extract_transaction_category),
        ('transaction_direction', extract_transaction_direction),
    ),
}


def apply_context_rules(context: SectionContext, line: str, rules: Sequence[ContextRule]) -> Optional[SectionContext]:
    """Return the updated context if the line declares one of the rule fields, else None."""
    for field_name, extractor in rules:
        value = extractor(line)
        if value is not None:
            return replace(context, **{field_name: value})
    return None


def scan_section_currencies(section: ReportSection) -> SectionContext:
    """
    Pre-scan a section for settlement/clearing currency declarations.

    The last complete (three character) declaration of each kind wins.
    """
    settlement_currency = None
    clearing_currency = None
    for _, line in section.lines:
        declared = extract_settlement_currency_declaration(line)
        if declared is not None and len(declared) == 3:
            settlement_currency = declared
        declared = extract_clearing_currency_declaration(line)
        if declared is not None and len(declared) == 3:
            clearing_currency = declared
    logger.debug(f"Currency context for {section.report_type.value}: "
                 f"settlement={settlement_currency}, clearing={clearing_currency}")
    return SectionContext(settlement_currency=settlement_currency, clearing_currency=clearing_currency)


def _required_count(line: str, position: FieldPosition, field_name: str) -> int:
    value = extract_count(line, position)
    if value is None:
        raise FieldExtractionError(f"Invalid {field_name} value")
    return value


def _required_amount(line: str, position: FieldPosition, field_name: str) -> Decimal:
    value = extract_amount(line, position)
    if value is None:
        raise FieldExtractionError(f"Invalid {field_name} value")
    return value


def _currency(declared: Optional[str], line: str, position: FieldPosition, config: ParserConfig) -> Optional[str]:
    if declared is None and config.positional_currency_fallback:
        return extract_currency(line, position)
    return declared


def _source(section: ReportSection, file_name: Optional[str], line_number: int, line: str) -> SourceLine:
    return SourceLine(
        processing_date=section.processing_date,
        report_date=section.report_date,
        source_file_name=file_name,
        line_number=line_number,
        raw_line_content=line,
    )


RecordBuilder = Callable[[str, SectionContext, SourceLine], ReportRecord]


def _assemble(
    section: ReportSection,
    file_name: Optional[str],
    context: SectionContext,
    build_record: RecordBuilder,
    track_clearing_currency: bool = False,
) -> List[ReportRecord]:
    rules = CONTEXT_RULES[section.report_type]
    records: List[ReportRecord] = []

    for line_number, line in section.lines:
        if track_clearing_currency:
            declared = extract_clearing_currency_declaration(line)
            if declared is not None:
                # An empty declaration keeps the previous currency
                if declared:
                    context = replace(context, clearing_currency=declared)
                continue

        if is_banner_line(line) or is_column_header_line(line):
            continue

        if not has_financial_data(line):
            updated = apply_context_rules(context, line, rules)
            if updated is not None:
                context = updated
            continue

        try:
            record = build_record(line, context, _source(section, file_name, line_number, line))
        except (FieldExtractionError, ValidationError) as e:
            logger.error(f"Error parsing {section.report_type.value} line {line_number}: {str(e)}")
            continue

        records.append(record)
        logger.debug(f"Parsed {section.report_type.value} record at line {line_number}")

    return records


def assemble_report_110(
    section: ReportSection,
    file_name: Optional[str] = None,
    field_config: FieldPositionConfig = DEFAULT_FIELD_POSITIONS,
    config: ParserConfig = DEFAULT_PARSER_CONFIG,
) -> List[ReportRecord]:
    """VSS-110 Settlement Summary: records carry the current section name."""
    fields = field_config.report_110

    def build(line: str, context: SectionContext, source: SourceLine) -> Report110Record:
        return Report110Record(
            settlement_currency=_currency(context.settlement_currency, line, fields.settlement_currency, config),
            count=_required_count(line, fields.count, 'count'),
            credit_amount=_required_amount(line, fields.credit_amount, 'credit amount'),
            debit_amount=_required_amount(line, fields.debit_amount, 'debit amount'),
            total_amount=_required_amount(line, fields.total_amount, 'total amount'),
            section_name=context.section_name,
            source=source,
        )

    return _assemble(section, file_name, scan_section_currencies(section), build)


def assemble_report_120(
    section: ReportSection,
    file_name: Optional[str] = None,
    field_config: FieldPositionConfig = DEFAULT_FIELD_POSITIONS,
    config: ParserConfig = DEFAULT_PARSER_CONFIG,
) -> List[ReportRecord]:
    """VSS-120 Interchange Value."""
    fields = field_config.report_120

    def build(line: str, context: SectionContext, source: SourceLine) -> Report120Record:
        return Report120Record(
            settlement_currency=_currency(context.settlement_currency, line, fields.settlement_currency, config),
            clearing_currency=_currency(context.clearing_currency, line, fields.clearing_currency, config),
            table_id=extract_table_id(line, fields.table_id) or None,
            count=_required_count(line, fields.count, 'count'),
            clearing_amount=_required_amount(line, fields.clearing_amount, 'clearing amount'),
            interchange_credits=_required_amount(line, fields.interchange_credits, 'interchange credits'),
            interchange_debits=_required_amount(line, fields.interchange_debits, 'interchange debits'),
            transaction_type=context.transaction_type,
            transaction_detail=context.transaction_detail,
            source=source,
        )

    return _assemble(section, file_name, scan_section_currencies(section), build)


def assemble_report_130(
    section: ReportSection,
    file_name: Optional[str] = None,
    field_config: FieldPositionConfig = DEFAULT_FIELD_POSITIONS,
    config: ParserConfig = DEFAULT_PARSER_CONFIG,
) -> List[ReportRecord]:
    """VSS-130 Reimbursement Fees."""
    fields = field_config.report_130

    def build(line: str, context: SectionContext, source: SourceLine) -> Report130Record:
        return Report130Record(
            settlement_currency=_currency(context.settlement_currency, line, fields.settlement_currency, config),
            count=_required_count(line, fields.count, 'count'),
            interchange_amount=_required_amount(line, fields.interchange_amount, 'interchange amount'),
            reimbursement_fee_credits=_required_amount(line, fields.reimbursement_fee_credits, 'fee credits'),
            reimbursement_fee_debits=_required_amount(line, fields.reimbursement_fee_debits, 'fee debits'),
            transaction_type=context.transaction_type,
            transaction_detail=context.transaction_detail,
            fee_category=context.fee_category,
            source=source,
        )

    return _assemble(section, file_name, scan_section_currencies(section), build)


def assemble_report_140(
    section: ReportSection,
    file_name: Optional[str] = None,
    field_config: FieldPositionConfig = DEFAULT_FIELD_POSITIONS,
    config: ParserConfig = DEFAULT_PARSER_CONFIG,
) -> List[ReportRecord]:
    """VSS-140 Visa Charges."""
    fields = field_config.report_140

    def build(line: str, context: SectionContext, source: SourceLine) -> Report140Record:
        return Report140Record(
            settlement_currency=_currency(context.settlement_currency, line, fields.settlement_currency, config),
            count=_required_count(line, fields.count, 'count'),
            interchange_amount=_required_amount(line, fields.interchange_amount, 'interchange amount'),
            visa_charges_credits=_required_amount(line, fields.visa_charges_credits, 'charges credits'),
            visa_charges_debits=_required_amount(line, fields.visa_charges_debits, 'charges debits'),
            charge_type=context.charge_type,
            transaction_type=context.transaction_type,
            transaction_detail=context.transaction_detail,
            region=context.region,
            source=source,
        )

    return _assemble(section, file_name, scan_section_currencies(section), build)


def assemble_report_900(
    section: ReportSection,
    file_name: Optional[str] = None,
    field_config: FieldPositionConfig = DEFAULT_FIELD_POSITIONS,
    config: ParserConfig = DEFAULT_PARSER_CONFIG,
) -> List[ReportRecord]:
    """
    VSS-900-S Summary Reconciliation.

    One section can hold several clearing currencies; every data line takes the
    currency of the nearest preceding CLEARING CURRENCY declaration.
    """
    fields = field_config.report_900

    def build(line: str, context: SectionContext, source: SourceLine) -> Report900Record:
        return Report900Record(
            clearing_currency=_currency(context.clearing_currency, line, fields.clearing_currency, config),
            count=_required_count(line, fields.count, 'count'),
            clearing_amount=_required_amount(line, fields.clearing_amount, 'clearing amount'),
            total_count=_required_count(line, fields.total_count, 'total count'),
            total_clearing_amount=_required_amount(line, fields.total_clearing_amount, 'total clearing amount'),
            transaction_category=context.transaction_category,
            transaction_direction=context.transaction_direction,
            source=source,
        )

    return _assemble(section, file_name, SectionContext(), build, track_clearing_currency=True)


Assembler = Callable[[ReportSection, Optional[str], FieldPositionConfig, ParserConfig], List[ReportRecord]]

ASSEMBLERS: Dict[ReportType, Assembler] = {
    ReportType.VSS_110: assemble_report_110,
    ReportType.VSS_120: assemble_report_120,
    ReportType.VSS_130: assemble_report_130,
    ReportType.VSS_140: assemble_report_140,
    ReportType.VSS_900: assemble_report_900,
}


def assemble_section(
    section: ReportSection,
    file_name: Optional[str] = None,
    field_config: FieldPositionConfig = DEFAULT_FIELD_POSITIONS,
    config: ParserConfig = DEFAULT_PARSER_CONFIG,
) -> List[ReportRecord]:
    assembler = ASSEMBLERS.get(section.report_type)
    if assembler is None:
        logger.warning(f"Unknown report type: {section.report_type}")
        return []
    return assembler(section, file_name, field_config, config)
