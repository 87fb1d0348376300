"""
Typed records extracted from VSS text report sections.

Each supported report type has its own record shape. They share no base class; the
`report_type` literal on every shape makes `ReportRecord` a discriminated union.
"""
import enum
from datetime import date
from decimal import Decimal
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ReportType(str, enum.Enum):
    """Enum for the VSS report sections the parser understands"""
    VSS_110 = "VSS-110"
    VSS_120 = "VSS-120"
    VSS_130 = "VSS-130"
    VSS_140 = "VSS-140"
    VSS_900 = "VSS-900"


_RECORD_CONFIG = ConfigDict(
    populate_by_name=True,
    frozen=True,
    json_encoders={
        Decimal: str
    },
    extra='forbid'
)


class SourceLine(BaseModel):
    """Audit information tying a record back to the line it was read from."""
    processing_date: Optional[date] = Field(default=None, alias="processingDate")
    report_date: Optional[date] = Field(default=None, alias="reportDate")
    source_file_name: Optional[str] = Field(default=None, alias="sourceFileName")
    line_number: int = Field(alias="lineNumber", ge=1)
    raw_line_content: str = Field(alias="rawLineContent")

    model_config = _RECORD_CONFIG


class Report110Record(BaseModel):
    """VSS-110 Settlement Summary line."""
    report_type: Literal[ReportType.VSS_110] = Field(default=ReportType.VSS_110, alias="reportType")
    settlement_currency: Optional[str] = Field(default=None, alias="settlementCurrency", max_length=3)
    count: int = Field(ge=0)
    credit_amount: Decimal = Field(alias="creditAmount")
    debit_amount: Decimal = Field(alias="debitAmount")
    total_amount: Decimal = Field(alias="totalAmount")
    section_name: Optional[str] = Field(default=None, alias="sectionName")
    source: SourceLine

    model_config = _RECORD_CONFIG


class Report120Record(BaseModel):
    """VSS-120 Interchange Value line."""
    report_type: Literal[ReportType.VSS_120] = Field(default=ReportType.VSS_120, alias="reportType")
    settlement_currency: Optional[str] = Field(default=None, alias="settlementCurrency", max_length=3)
    clearing_currency: Optional[str] = Field(default=None, alias="clearingCurrency", max_length=3)
    table_id: Optional[str] = Field(default=None, alias="tableId")
    count: int = Field(ge=0)
    clearing_amount: Decimal = Field(alias="clearingAmount")
    interchange_credits: Decimal = Field(alias="interchangeCredits")
    interchange_debits: Decimal = Field(alias="interchangeDebits")
    transaction_type: Optional[str] = Field(default=None, alias="transactionType")
    transaction_detail: Optional[str] = Field(default=None, alias="transactionDetail")
    source: SourceLine

    model_config = _RECORD_CONFIG


class Report130Record(BaseModel):
    """VSS-130 Reimbursement Fees line."""
    report_type: Literal[ReportType.VSS_130] = Field(default=ReportType.VSS_130, alias="reportType")
    settlement_currency: Optional[str] = Field(default=None, alias="settlementCurrency", max_length=3)
    count: int = Field(ge=0)
    interchange_amount: Decimal = Field(alias="interchangeAmount")
    reimbursement_fee_credits: Decimal = Field(alias="reimbursementFeeCredits")
    reimbursement_fee_debits: Decimal = Field(alias="reimbursementFeeDebits")
    transaction_type: Optional[str] = Field(default=None, alias="transactionType")
    transaction_detail: Optional[str] = Field(default=None, alias="transactionDetail")
    fee_category: Optional[str] = Field(default=None, alias="feeCategory")
    source: SourceLine

    model_config = _RECORD_CONFIG


class Report140Record(BaseModel):
    """VSS-140 Visa Charges line."""
    report_type: Literal[ReportType.VSS_140] = Field(default=ReportType.VSS_140, alias="reportType")
    settlement_currency: Optional[str] = Field(default=None, alias="settlementCurrency", max_length=3)
    count: int = Field(ge=0)
    interchange_amount: Decimal = Field(alias="interchangeAmount")
    visa_charges_credits: Decimal = Field(alias="visaChargesCredits")
    visa_charges_debits: Decimal = Field(alias="visaChargesDebits")
    charge_type: Optional[str] = Field(default=None, alias="chargeType")
    transaction_type: Optional[str] = Field(default=None, alias="transactionType")
    transaction_detail: Optional[str] = Field(default=None, alias="transactionDetail")
    region: Optional[str] = None
    source: SourceLine

    model_config = _RECORD_CONFIG


class Report900Record(BaseModel):
    """VSS-900-S Summary Reconciliation line."""
    report_type: Literal[ReportType.VSS_900] = Field(default=ReportType.VSS_900, alias="reportType")
    clearing_currency: Optional[str] = Field(default=None, alias="clearingCurrency", max_length=3)
    count: int = Field(ge=0)
    clearing_amount: Decimal = Field(alias="clearingAmount")
    total_count: int = Field(alias="totalCount", ge=0)
    total_clearing_amount: Decimal = Field(alias="totalClearingAmount")
    transaction_category: Optional[str] = Field(default=None, alias="transactionCategory")
    transaction_direction: Optional[str] = Field(default=None, alias="transactionDirection")
    source: SourceLine

    model_config = _RECORD_CONFIG


ReportRecord = Annotated[
    Union[Report110Record, Report120Record, Report130Record, Report140Record, Report900Record],
    Field(discriminator="report_type")
]

# Report type code -> records in file order
ParseResult = Dict[str, List[ReportRecord]]
