"""
Tests for the TC46 settlement record parser and EPIN header.
"""
from datetime import date, datetime
from decimal import Decimal

import pytest

from vss_reports.services.settlement_record_parser import (
    SettlementRecordError,
    is_epin_header_line,
    parse_epin_header,
    parse_settlement_file,
    parse_settlement_line,
)
from vss_reports.utils.parser_config import ParserConfig
from tests.fixtures.report_fixtures import (
    EPIN_HEADER_LINE,
    build_settlement_line,
    sample_settlement_lines,
)


def replace_span(line: str, start: int, text: str) -> str:
    """Overwrite the 1-based column span starting at start."""
    return line[:start - 1] + text + line[start - 1 + len(text):]


@pytest.fixture
def settlement_lines():
    return sample_settlement_lines()


class TestParseSettlementLine:
    def test_interchange_record(self, settlement_lines):
        record = parse_settlement_line(settlement_lines["I1"], 2)
        assert record.transaction_code == "46"
        assert record.destination_id == "433475"
        assert record.reporting_sre_id == "9000578487"
        assert record.funds_transfer_sre_id == "1000028772"
        assert record.settlement_service == "001"
        assert record.currency_code == "978"
        assert record.report_group == "V"
        assert record.report_subgroup == "2"
        assert record.report_id_number == "110"
        assert record.settlement_date == date(2022, 6, 7)
        assert record.report_date == date(2022, 6, 7)
        assert record.from_date is None
        assert record.to_date is None
        assert record.record_tag == "I1"
        assert record.transaction_count == 1074
        assert record.credit_amount == Decimal("72941.43")
        assert record.debit_amount == Decimal("0.00")
        assert record.net_amount == Decimal("72941.43")
        assert record.amount_sign == "CR"
        assert record.funds_transfer_date is None
        assert record.reimbursement_attribute == "0"
        assert record.line_number == 2
        assert record.raw_line == settlement_lines["I1"]

    def test_debit_net_is_negative(self, settlement_lines):
        record = parse_settlement_line(settlement_lines["F1"], 1)
        assert record.transaction_count == 0
        assert record.credit_amount == Decimal("3.61")
        assert record.debit_amount == Decimal("1071.55")
        assert record.net_amount == Decimal("-1067.94")
        assert record.amount_sign == "DB"

    def test_total_amount_record(self, settlement_lines):
        record = parse_settlement_line(settlement_lines["T1"], 1)
        assert record.amount_type == "T"
        assert record.net_amount == Decimal("71731.90")

    def test_zero_record_with_blank_sign(self, settlement_lines):
        record = parse_settlement_line(settlement_lines["I3"], 1)
        assert record.net_amount == Decimal("0")
        assert record.amount_sign == ""

    def test_business_mode_total(self, settlement_lines):
        assert parse_settlement_line(settlement_lines["I9"], 1).is_total_record
        assert not parse_settlement_line(settlement_lines["I2"], 1).is_total_record

    def test_summary_report(self):
        record = parse_settlement_line(build_settlement_line(report_id="111"), 1)
        assert record.is_summary_record

    def test_funds_transfer_date(self):
        record = parse_settlement_line(build_settlement_line(funds_transfer_date="2022160"), 1)
        assert record.funds_transfer_date == date(2022, 6, 9)

    def test_from_and_to_dates(self):
        line = replace_span(build_settlement_line(), 80, "2022150")
        line = replace_span(line, 87, "2022157")
        record = parse_settlement_line(line, 1)
        assert record.from_date == date(2022, 5, 30)
        assert record.to_date == date(2022, 6, 6)

    def test_invalid_optional_date_is_ignored(self, caplog):
        line = replace_span(build_settlement_line(), 80, "ABCDEFG")
        with caplog.at_level("WARNING"):
            record = parse_settlement_line(line, 1)
        assert record.from_date is None
        assert "from_date" in caplog.text

    def test_unexpected_qualifier_only_warns(self, caplog):
        line = replace_span(build_settlement_line(), 3, "1")
        with caplog.at_level("WARNING"):
            record = parse_settlement_line(line, 1)
        assert record.transaction_code_qualifier == "1"
        assert "qualifier" in caplog.text

    def test_shorter_record_above_minimum(self):
        record = parse_settlement_line(build_settlement_line()[:160], 1)
        assert record.net_amount == Decimal("72941.43")
        assert record.reimbursement_attribute == ""

    @pytest.mark.parametrize("line, field_name", [
        (replace_span(build_settlement_line(), 1, "47"), "transaction_code"),
        (build_settlement_line(destination_id="43347A"), "destination_id"),
        (replace_span(build_settlement_line(), 59, "X"), "report_group"),
        (replace_span(build_settlement_line(), 60, "3"), "report_subgroup"),
        (build_settlement_line(report_id="112"), "report_id_number"),
        (build_settlement_line(amount_type="Z"), "amount_type"),
        (build_settlement_line(sign="XX"), "amount_sign"),
        (build_settlement_line(credit="00000000729414A"), "credit_amount"),
        (build_settlement_line(count="0000000000010A4"), "transaction_count"),
        (build_settlement_line(settlement_date="       "), "settlement_date"),
        (build_settlement_line(settlement_date="2022400"), "settlement_date"),
        (build_settlement_line()[:150], "record_line"),
    ])
    def test_invalid_fields(self, line, field_name):
        with pytest.raises(SettlementRecordError) as exc_info:
            parse_settlement_line(line, 7)
        assert exc_info.value.field_name == field_name
        assert exc_info.value.line_number == 7
        assert str(exc_info.value).startswith(f"VSS-110 line 7 [{field_name}]")

    def test_net_amount_mismatch(self):
        line = build_settlement_line(net="000000007294100")
        with pytest.raises(SettlementRecordError) as exc_info:
            parse_settlement_line(line, 1)
        assert exc_info.value.field_name == "net_amount"

    def test_sign_mismatch(self):
        line = build_settlement_line(sign="DB")
        with pytest.raises(SettlementRecordError) as exc_info:
            parse_settlement_line(line, 1)
        assert exc_info.value.field_name == "amount_sign"

    def test_missing_line(self):
        with pytest.raises(SettlementRecordError):
            parse_settlement_line(None, 1)


class TestEpinHeader:
    def test_standard_header(self):
        header = parse_epin_header(EPIN_HEADER_LINE)
        assert header.routing_number == "9043347522158"
        assert header.raw_timestamp == "2215800400"
        assert header.timestamp == datetime(2022, 12, 28, 4, 0, 0)
        assert header.sequence_number == "0000"
        assert header.client_id == "BMOI4197"
        assert header.file_sequence == "001"
        assert header.raw_line == EPIN_HEADER_LINE

    def test_fixed_position_fallback(self):
        header = parse_epin_header("9043347522158/2202170930/0001/BMOI4197/002")
        assert header.routing_number == "9043347522158"
        assert header.timestamp == datetime(2022, 2, 17, 9, 0, 30)
        assert header.sequence_number == "0001"
        assert header.client_id == "BMOI4197"
        assert header.file_sequence == "002"

    def test_non_numeric_routing_number(self):
        with pytest.raises(SettlementRecordError) as exc_info:
            parse_epin_header("ABCDEFGHIJKLM/2202170930/0001/BMOI4197/002")
        assert exc_info.value.field_name == "routing_number"
        assert exc_info.value.record_type == "EPIN"

    def test_strict_timestamp(self):
        with pytest.raises(SettlementRecordError) as exc_info:
            parse_epin_header(EPIN_HEADER_LINE, ParserConfig(clamp_header_timestamps=False))
        assert exc_info.value.field_name == "timestamp"

    def test_empty_header(self):
        with pytest.raises(SettlementRecordError):
            parse_epin_header("   ")

    def test_header_detection(self, settlement_lines):
        assert is_epin_header_line(EPIN_HEADER_LINE)
        assert not is_epin_header_line(settlement_lines["I1"])


class TestParseSettlementFile:
    def test_file_with_header_and_errors(self, settlement_lines):
        bad_line = replace_span(settlement_lines["I2"], 1, "47")
        content = "\n".join([
            EPIN_HEADER_LINE,
            settlement_lines["I1"],
            "",
            bad_line,
            settlement_lines["F1"],
        ]) + "\n"

        result = parse_settlement_file(content)

        assert result.header is not None
        assert result.header.client_id == "BMOI4197"
        assert [r.record_tag for r in result.records] == ["I1", "F1"]
        assert [r.line_number for r in result.records] == [2, 5]
        assert len(result.errors) == 1
        assert result.errors[0].startswith("Line 4: VSS-110 line 4 [transaction_code]")

    def test_file_without_header(self, settlement_lines):
        content = "\r\n".join(settlement_lines[key] for key in ["I1", "I2", "I3", "I9", "F1", "T1"])
        result = parse_settlement_file(content)
        assert result.header is None
        assert result.errors == []
        assert [r.record_tag for r in result.records] == ["I1", "I2", "I3", "I9", "F1", "T1"]
        assert sum(r.net_amount for r in result.records if r.amount_type == "I" and not r.is_total_record) == Decimal("72953.93")

    def test_empty_file(self):
        result = parse_settlement_file("")
        assert result.header is None
        assert result.records == []
        assert result.errors == []
