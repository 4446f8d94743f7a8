"""Tests for entry input validation."""

import pytest
from datetime import date, datetime
from decimal import Decimal

from velam.models.entry import EntryKind, ExpenseType, LoanStatus
from velam.validation import EntryValidator, ValidationError


@pytest.fixture
def validator() -> EntryValidator:
    return EntryValidator()


class TestParseAmount:
    """Tests for amount parsing."""

    @pytest.mark.parametrize("raw, expected", [
        ("500", Decimal("500")),
        (" 1,250.50 ", Decimal("1250.50")),
        ("1,25,000", Decimal("125000")),
        (500, Decimal("500")),
        (12.75, Decimal("12.75")),
        (Decimal("0"), Decimal("0")),
    ])
    def test_accepts_numbers_and_numeric_text(self, validator, raw, expected):
        assert validator.parse_amount(raw) == expected

    @pytest.mark.parametrize("raw", ["abc", "", None, True, float("nan"), "Infinity", [1]])
    def test_rejects_non_numbers(self, validator, raw):
        with pytest.raises(ValidationError):
            validator.parse_amount(raw)

    @pytest.mark.parametrize("raw", ["1,2,3", "12,34", "1,0000", ",500", "500,"])
    def test_rejects_misplaced_commas(self, validator, raw):
        """Test that commas are only accepted as digit group separators."""
        with pytest.raises(ValidationError) as exc_info:
            validator.parse_amount(raw)
        assert exc_info.value.issues[0].issue_type == "invalid_format"

    def test_rejects_negative(self, validator):
        with pytest.raises(ValidationError) as exc_info:
            validator.parse_amount("-5", "principal")
        issue = exc_info.value.issues[0]
        assert issue.field == "principal"
        assert issue.issue_type == "out_of_range"


class TestParseDate:
    """Tests for date parsing."""

    def test_accepts_iso_string(self, validator):
        assert validator.parse_date("2024-01-15") == date(2024, 1, 15)

    def test_accepts_date_and_datetime(self, validator):
        assert validator.parse_date(date(2024, 1, 15)) == date(2024, 1, 15)
        assert validator.parse_date(datetime(2024, 1, 15, 10, 30)) == date(2024, 1, 15)

    @pytest.mark.parametrize("raw", ["15/01/2024", "2024-1-5", "20240115", 20240115, ""])
    def test_rejects_other_formats(self, validator, raw):
        with pytest.raises(ValidationError):
            validator.parse_date(raw)

    def test_rejects_impossible_day(self, validator):
        with pytest.raises(ValidationError) as exc_info:
            validator.parse_date("2024-02-30")
        assert exc_info.value.issues[0].issue_type == "invalid_value"


class TestParseEnums:
    """Tests for kind, expense type and loan status parsing."""

    def test_parse_kind(self, validator):
        assert validator.parse_kind("Loan") == EntryKind.LOAN
        assert validator.parse_kind(EntryKind.EXPENSE) == EntryKind.EXPENSE

    def test_parse_kind_rejects_unknown(self, validator):
        with pytest.raises(ValidationError, match="Unknown entry kind"):
            validator.parse_kind("donation")

    def test_parse_expense_type(self, validator):
        assert validator.parse_expense_type("sheep purchase") == ExpenseType.SHEEP_PURCHASE
        assert validator.parse_expense_type("MISCELLANEOUS") == ExpenseType.MISCELLANEOUS

    def test_parse_expense_type_rejects_free_text(self, validator):
        with pytest.raises(ValidationError):
            validator.parse_expense_type("Fireworks")

    def test_parse_loan_status(self, validator):
        assert validator.parse_loan_status("returned") == LoanStatus.RETURNED


class TestWholeEntryValidation:
    """Tests for validating a full submission."""

    def test_validate_contribution(self, validator):
        values = validator.validate_contribution("2024-01-15", " Ravi ", "500")
        assert values == {
            "entry_date": date(2024, 1, 15),
            "person_name": "Ravi",
            "amount": Decimal("500"),
        }

    def test_all_issues_reported_together(self, validator):
        with pytest.raises(ValidationError) as exc_info:
            validator.validate_loan("not-a-date", "", "-1", "x")
        fields = [issue.field for issue in exc_info.value.issues]
        assert fields == ["date", "personName", "principal", "interest"]

    def test_validate_expense(self, validator):
        values = validator.validate_expense("2024-04-10", "Miscellaneous", "Rope", 120)
        assert values["expense_type"] == ExpenseType.MISCELLANEOUS


class TestUpdateValidation:
    """Tests for partial update validation."""

    def test_accepts_stored_and_python_names(self, validator):
        values = validator.validate_updates(
            EntryKind.CONTRIBUTION,
            {"date": "2024-02-01", "person_name": "Anu"},
        )
        assert values == {"entry_date": date(2024, 2, 1), "person_name": "Anu"}

    def test_rejects_immutable_fields(self, validator):
        with pytest.raises(ValidationError) as exc_info:
            validator.validate_updates(EntryKind.CONTRIBUTION, {"id": 5, "month": "2024-02"})
        assert {i.issue_type for i in exc_info.value.issues} == {"immutable"}

    def test_rejects_fields_of_other_kinds(self, validator):
        with pytest.raises(ValidationError) as exc_info:
            validator.validate_updates(EntryKind.CONTRIBUTION, {"principal": 100})
        assert exc_info.value.issues[0].issue_type == "unknown_field"

    def test_collects_unknown_and_invalid_together(self, validator):
        with pytest.raises(ValidationError) as exc_info:
            validator.validate_updates(EntryKind.LOAN, {"colour": "red", "interest": "-3"})
        assert len(exc_info.value.issues) == 2

    def test_returned_date_may_be_cleared(self, validator):
        values = validator.validate_updates(
            EntryKind.LOAN,
            {"status": "ACTIVE", "returnedDate": None},
        )
        assert values == {"status": LoanStatus.ACTIVE, "returned_date": None}

    def test_error_to_dicts(self, validator):
        with pytest.raises(ValidationError) as exc_info:
            validator.validate_updates(EntryKind.EXPENSE, {"amount": "lots"})
        assert exc_info.value.to_dicts()[0]["field"] == "amount"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
