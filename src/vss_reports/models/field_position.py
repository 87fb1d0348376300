"""
Field position models for fixed-width VSS report parsing.
"""
import enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ReadDirection(str, enum.Enum):
    """Direction in which a fixed-width field is read from its configured position"""
    LEFT_TO_RIGHT = "LEFT_TO_RIGHT"
    RIGHT_TO_LEFT = "RIGHT_TO_LEFT"


class FieldPosition(BaseModel):
    """
    Represents where a field lives on a report line.

    For LEFT_TO_RIGHT the position is the 1-based start column; for RIGHT_TO_LEFT it is
    the 1-based end column (inclusive) of a right-justified value.
    """
    position: int = Field(ge=1)
    direction: ReadDirection = ReadDirection.RIGHT_TO_LEFT
    max_length: int = Field(alias="maxLength", ge=1)

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        extra='forbid'
    )


def _ltr(position: int, max_length: int) -> FieldPosition:
    return FieldPosition(position=position, direction=ReadDirection.LEFT_TO_RIGHT, max_length=max_length)


def _rtl(position: int, max_length: int) -> FieldPosition:
    return FieldPosition(position=position, direction=ReadDirection.RIGHT_TO_LEFT, max_length=max_length)


_FIELD_GROUP_CONFIG = ConfigDict(
    populate_by_name=True,
    frozen=True,
    extra='forbid'
)


class Report110Fields(BaseModel):
    """VSS-110 Settlement Summary field positions."""
    settlement_currency: FieldPosition = Field(default_factory=lambda: _ltr(24, 3), alias="settlementCurrency")
    count: FieldPosition = Field(default_factory=lambda: _rtl(52, 15))
    credit_amount: FieldPosition = Field(default_factory=lambda: _rtl(78, 20), alias="creditAmount")
    debit_amount: FieldPosition = Field(default_factory=lambda: _rtl(104, 20), alias="debitAmount")
    total_amount: FieldPosition = Field(default_factory=lambda: _rtl(132, 20), alias="totalAmount")

    model_config = _FIELD_GROUP_CONFIG


class Report120Fields(BaseModel):
    """VSS-120 Interchange Value field positions."""
    settlement_currency: FieldPosition = Field(default_factory=lambda: _ltr(24, 3), alias="settlementCurrency")
    clearing_currency: FieldPosition = Field(default_factory=lambda: _ltr(24, 3), alias="clearingCurrency")
    table_id: FieldPosition = Field(default_factory=lambda: _rtl(52, 10), alias="tableId")
    count: FieldPosition = Field(default_factory=lambda: _rtl(67, 15))
    clearing_amount: FieldPosition = Field(default_factory=lambda: _rtl(90, 20), alias="clearingAmount")
    interchange_credits: FieldPosition = Field(default_factory=lambda: _rtl(104, 20), alias="interchangeCredits")
    interchange_debits: FieldPosition = Field(default_factory=lambda: _rtl(130, 20), alias="interchangeDebits")

    model_config = _FIELD_GROUP_CONFIG


class Report130Fields(BaseModel):
    """VSS-130 Reimbursement Fees field positions."""
    settlement_currency: FieldPosition = Field(default_factory=lambda: _ltr(24, 3), alias="settlementCurrency")
    count: FieldPosition = Field(default_factory=lambda: _rtl(62, 15))
    interchange_amount: FieldPosition = Field(default_factory=lambda: _rtl(87, 20), alias="interchangeAmount")
    reimbursement_fee_credits: FieldPosition = Field(default_factory=lambda: _rtl(110, 20), alias="reimbursementFeeCredits")
    reimbursement_fee_debits: FieldPosition = Field(default_factory=lambda: _rtl(132, 20), alias="reimbursementFeeDebits")

    model_config = _FIELD_GROUP_CONFIG


class Report140Fields(BaseModel):
    """VSS-140 Visa Charges field positions."""
    settlement_currency: FieldPosition = Field(default_factory=lambda: _ltr(24, 3), alias="settlementCurrency")
    count: FieldPosition = Field(default_factory=lambda: _rtl(67, 15))
    interchange_amount: FieldPosition = Field(default_factory=lambda: _rtl(90, 20), alias="interchangeAmount")
    visa_charges_credits: FieldPosition = Field(default_factory=lambda: _rtl(111, 20), alias="visaChargesCredits")
    visa_charges_debits: FieldPosition = Field(default_factory=lambda: _rtl(132, 20), alias="visaChargesDebits")

    model_config = _FIELD_GROUP_CONFIG


class Report900Fields(BaseModel):
    """VSS-900-S Summary Reconciliation field positions."""
    clearing_currency: FieldPosition = Field(default_factory=lambda: _ltr(22, 3), alias="clearingCurrency")
    count: FieldPosition = Field(default_factory=lambda: _rtl(67, 15))
    clearing_amount: FieldPosition = Field(default_factory=lambda: _rtl(89, 20), alias="clearingAmount")
    total_count: FieldPosition = Field(default_factory=lambda: _rtl(106, 15), alias="totalCount")
    total_clearing_amount: FieldPosition = Field(default_factory=lambda: _rtl(131, 20), alias="totalClearingAmount")

    model_config = _FIELD_GROUP_CONFIG


class FieldPositionConfig(BaseModel):
    """Field position table for every supported report type using Pydantic."""
    report_110: Report110Fields = Field(default_factory=Report110Fields, alias="report110")
    report_120: Report120Fields = Field(default_factory=Report120Fields, alias="report120")
    report_130: Report130Fields = Field(default_factory=Report130Fields, alias="report130")
    report_140: Report140Fields = Field(default_factory=Report140Fields, alias="report140")
    report_900: Report900Fields = Field(default_factory=Report900Fields, alias="report900")

    model_config = _FIELD_GROUP_CONFIG

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "FieldPositionConfig":
        """
        Build a configuration from a plain dictionary, e.g. one loaded from YAML or JSON.

        Report groups and fields that are not present keep their default positions.
        """
        if not data:
            return cls()
        return cls.model_validate(data)

    def to_dict(self) -> Dict[str, Any]:
        """Serializes the table to a plain dictionary using camelCase aliases."""
        return self.model_dump(mode='json', by_alias=True)


DEFAULT_FIELD_POSITIONS = FieldPositionConfig()
