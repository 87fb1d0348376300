"""
Models for machine-readable TC46 V2110/V2111 settlement records and the EPIN file header.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

SUMMARY_REPORT_ID = "111"
TOTAL_BUSINESS_MODE = "9"


class EpinFileHeader(BaseModel):
    """Header line that precedes the records of an EPIN settlement file."""
    routing_number: str = Field(alias="routingNumber")
    raw_timestamp: str = Field(alias="rawTimestamp")
    timestamp: Optional[datetime] = None
    sequence_number: str = Field(alias="sequenceNumber")
    client_id: str = Field(alias="clientId")
    file_sequence: str = Field(alias="fileSequence")
    raw_line: str = Field(alias="rawLine")

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True
    )


class SettlementRecord(BaseModel):
    """
    One TC46 TCR0 V2110/V2111 record.

    Amounts are already scaled from their implied two decimals. `net_amount` is signed:
    negative when the record's sign is DB.
    """
    transaction_code: str = Field(alias="transactionCode")
    transaction_code_qualifier: str = Field(alias="transactionCodeQualifier")
    component_sequence: str = Field(alias="componentSequence")
    destination_id: str = Field(alias="destinationId")
    source_id: str = Field(alias="sourceId")
    reporting_sre_id: str = Field(alias="reportingSreId")
    rollup_sre_id: str = Field(alias="rollupSreId")
    funds_transfer_sre_id: str = Field(alias="fundsTransferSreId")
    settlement_service: str = Field(alias="settlementService")
    currency_code: str = Field(alias="currencyCode")
    no_data_indicator: str = Field(default="", alias="noDataIndicator")
    report_group: str = Field(alias="reportGroup")
    report_subgroup: str = Field(alias="reportSubgroup")
    report_id_number: str = Field(alias="reportIdNumber")
    report_id_suffix: str = Field(default="", alias="reportIdSuffix")
    settlement_date: Optional[date] = Field(default=None, alias="settlementDate")
    report_date: Optional[date] = Field(default=None, alias="reportDate")
    from_date: Optional[date] = Field(default=None, alias="fromDate")
    to_date: Optional[date] = Field(default=None, alias="toDate")
    amount_type: str = Field(default="", alias="amountType")
    business_mode: str = Field(default="", alias="businessMode")
    transaction_count: int = Field(default=0, alias="transactionCount", ge=0)
    credit_amount: Decimal = Field(alias="creditAmount")
    debit_amount: Decimal = Field(alias="debitAmount")
    net_amount: Decimal = Field(alias="netAmount")
    amount_sign: str = Field(default="", alias="amountSign")
    funds_transfer_date: Optional[date] = Field(default=None, alias="fundsTransferDate")
    reimbursement_attribute: str = Field(default="", alias="reimbursementAttribute")
    line_number: int = Field(alias="lineNumber", ge=1)
    raw_line: str = Field(alias="rawLine")

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        json_encoders={
            Decimal: str
        }
    )

    @field_validator('amount_sign')
    @classmethod
    def validate_amount_sign(cls, v: str) -> str:
        if v not in ("CR", "DB", ""):
            raise ValueError(f"Invalid amount sign: {v!r}. Must be CR, DB or blank.")
        return v

    @property
    def is_summary_record(self) -> bool:
        return self.report_id_number == SUMMARY_REPORT_ID

    @property
    def is_total_record(self) -> bool:
        return self.business_mode == TOTAL_BUSINESS_MODE

    @property
    def record_tag(self) -> str:
        """Amount type and business mode, e.g. 'I1' or 'T9'."""
        return f"{self.amount_type}{self.business_mode}"
