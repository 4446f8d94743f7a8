"""
Input Validation for Ledger Entries

DESIGN DECISION: Raw input (form strings, JSON numbers, dates) is parsed
and checked here, before the ledger store touches its collections.
Every problem in one submission is collected and reported together, so
the person at the form sees everything that needs fixing at once.

IMPORTANT: Validation NEVER silently fixes input. A negative amount is
rejected, not flipped; an impossible date is rejected, not rolled over.
"""

import math
import re
from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from velam.models.entry import (
    ENTRY_MODELS,
    EntryKind,
    ExpenseType,
    LoanStatus,
    ValidationIssue,
)

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Digit grouping with commas: 1,250,000 (international) or 12,50,000 (Indian)
_GROUPED_NUMBER = re.compile(
    r"^-?(\d{1,3}(,\d{3})+|\d{1,2}(,\d{2})*,\d{3})(\.\d+)?$"
)

MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500

# Fields callers may never set through an update
IMMUTABLE_FIELDS = {"id", "month"}


class ValidationError(Exception):
    """Input rejected before any ledger state changed."""

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        super().__init__(
            "; ".join(f"{issue.field}: {issue.message}" for issue in issues)
        )

    @classmethod
    def single(cls, field: str, issue_type: str, message: str) -> "ValidationError":
        return cls([ValidationIssue(field=field, issue_type=issue_type, message=message)])

    def to_dicts(self) -> list[dict]:
        return [issue.model_dump() for issue in self.issues]


class EntryValidator:
    """
    Parses and validates raw input for each kind of ledger entry.

    Stateless: one instance can serve any number of stores.
    """

    # -------------------------------------------------------------------------
    # Field parsers
    # -------------------------------------------------------------------------

    def parse_kind(self, kind: Union[EntryKind, str]) -> EntryKind:
        """Resolve 'contribution' / 'loan' / 'expense' to an EntryKind."""
        if isinstance(kind, EntryKind):
            return kind
        try:
            return EntryKind(str(kind).strip().lower())
        except ValueError:
            allowed = ", ".join(k.value for k in EntryKind)
            raise ValidationError.single(
                "kind", "invalid_value", f"Unknown entry kind {kind!r} (expected one of: {allowed})"
            )

    def parse_date(self, value: Any, field: str = "date") -> date:
        """Accept a date or a 'YYYY-MM-DD' string naming a real calendar day."""
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError.single(field, "missing", "Date is required")
        if not isinstance(value, str) or not _ISO_DATE.match(value.strip()):
            raise ValidationError.single(
                field, "invalid_format", f"Date must be YYYY-MM-DD, got {value!r}"
            )
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            raise ValidationError.single(
                field, "invalid_value", f"{value.strip()} is not a calendar date"
            )

    def parse_optional_date(self, value: Any, field: str) -> Optional[date]:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        return self.parse_date(value, field)

    def parse_amount(self, value: Any, field: str = "amount") -> Decimal:
        """Accept a non-negative finite number, given as a number or numeric text."""
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError.single(field, "missing", "Amount is required")
        if isinstance(value, bool):
            raise ValidationError.single(field, "invalid_format", "Amount must be a number")

        if isinstance(value, Decimal):
            amount = value
        elif isinstance(value, int):
            amount = Decimal(value)
        elif isinstance(value, float):
            if not math.isfinite(value):
                raise ValidationError.single(field, "invalid_value", "Amount must be finite")
            amount = Decimal(str(value))
        elif isinstance(value, str):
            text = value.strip()
            if "," in text:
                if not _GROUPED_NUMBER.match(text):
                    raise ValidationError.single(
                        field, "invalid_format", f"{value!r} is not a number"
                    )
                text = text.replace(",", "")
            try:
                amount = Decimal(text)
            except InvalidOperation:
                raise ValidationError.single(
                    field, "invalid_format", f"{value!r} is not a number"
                )
        else:
            raise ValidationError.single(field, "invalid_format", "Amount must be a number")

        if not amount.is_finite():
            raise ValidationError.single(field, "invalid_value", "Amount must be finite")
        if amount < 0:
            raise ValidationError.single(
                field, "out_of_range", f"Amount cannot be negative (got {amount})"
            )
        return amount

    def parse_text(self, value: Any, field: str, max_length: int) -> str:
        if value is None or not str(value).strip():
            raise ValidationError.single(field, "missing", f"{field} is required")
        text = str(value).strip()
        if len(text) > max_length:
            raise ValidationError.single(
                field, "out_of_range", f"{field} is longer than {max_length} characters"
            )
        return text

    def parse_person_name(self, value: Any, field: str = "personName") -> str:
        return self.parse_text(value, field, MAX_NAME_LENGTH)

    def parse_description(self, value: Any, field: str = "description") -> str:
        return self.parse_text(value, field, MAX_DESCRIPTION_LENGTH)

    def parse_expense_type(self, value: Any, field: str = "type") -> ExpenseType:
        if isinstance(value, ExpenseType):
            return value
        text = str(value or "").strip()
        for expense_type in ExpenseType:
            if text.lower() in (expense_type.value.lower(), expense_type.name.lower()):
                return expense_type
        allowed = ", ".join(t.value for t in ExpenseType)
        raise ValidationError.single(
            field, "invalid_value", f"Unknown expense type {text!r} (expected one of: {allowed})"
        )

    def parse_loan_status(self, value: Any, field: str = "status") -> LoanStatus:
        if isinstance(value, LoanStatus):
            return value
        try:
            return LoanStatus(str(value or "").strip().upper())
        except ValueError:
            raise ValidationError.single(
                field, "invalid_value", f"Unknown loan status {value!r}"
            )

    # -------------------------------------------------------------------------
    # Whole-entry validation
    # -------------------------------------------------------------------------

    def _run(self, checks: list[tuple[str, Callable[[], Any]]]) -> dict[str, Any]:
        """Run every check, collecting all issues before failing."""
        values: dict[str, Any] = {}
        issues: list[ValidationIssue] = []
        for name, check in checks:
            try:
                values[name] = check()
            except ValidationError as e:
                issues.extend(e.issues)
        if issues:
            raise ValidationError(issues)
        return values

    def validate_contribution(
        self,
        entry_date: Any,
        person_name: Any,
        amount: Any,
    ) -> dict[str, Any]:
        """Return the parsed fields of a new contribution."""
        return self._run([
            ("entry_date", lambda: self.parse_date(entry_date)),
            ("person_name", lambda: self.parse_person_name(person_name)),
            ("amount", lambda: self.parse_amount(amount)),
        ])

    def validate_loan(
        self,
        entry_date: Any,
        person_name: Any,
        principal: Any,
        interest: Any,
    ) -> dict[str, Any]:
        """Return the parsed fields of a new loan."""
        return self._run([
            ("entry_date", lambda: self.parse_date(entry_date)),
            ("person_name", lambda: self.parse_person_name(person_name)),
            ("principal", lambda: self.parse_amount(principal, "principal")),
            ("interest", lambda: self.parse_amount(interest, "interest")),
        ])

    def validate_expense(
        self,
        entry_date: Any,
        expense_type: Any,
        description: Any,
        amount: Any,
    ) -> dict[str, Any]:
        """Return the parsed fields of a new expense."""
        return self._run([
            ("entry_date", lambda: self.parse_date(entry_date)),
            ("expense_type", lambda: self.parse_expense_type(expense_type)),
            ("description", lambda: self.parse_description(description)),
            ("amount", lambda: self.parse_amount(amount)),
        ])

    def _field_parsers(self) -> dict[str, Callable[[Any, str], Any]]:
        return {
            "entry_date": self.parse_date,
            "person_name": self.parse_person_name,
            "amount": self.parse_amount,
            "principal": self.parse_amount,
            "interest": self.parse_amount,
            "description": self.parse_description,
            "expense_type": self.parse_expense_type,
            "status": self.parse_loan_status,
            "returned_date": self.parse_optional_date,
        }

    def validate_updates(
        self,
        kind: EntryKind,
        field_updates: Mapping[str, Any],
    ) -> dict[str, Any]:
        """
        Parse a partial update for an entry of the given kind.

        Keys may use the Python attribute names or the stored field
        names (e.g. 'person_name' or 'personName').

        Returns:
            Parsed values keyed by attribute name
        """
        model = ENTRY_MODELS[kind]
        accepted: dict[str, str] = {}
        for name, info in model.model_fields.items():
            accepted[name] = name
            if info.alias:
                accepted[info.alias] = name

        parsers = self._field_parsers()
        checks: list[tuple[str, Callable[[], Any]]] = []
        issues: list[ValidationIssue] = []

        for key, value in field_updates.items():
            if key in IMMUTABLE_FIELDS:
                issues.append(ValidationIssue(
                    field=key,
                    issue_type="immutable",
                    message=f"{key} cannot be changed",
                ))
                continue
            name = accepted.get(key)
            if name is None:
                issues.append(ValidationIssue(
                    field=key,
                    issue_type="unknown_field",
                    message=f"{kind.value} has no field {key!r}",
                ))
                continue
            parser = parsers[name]
            checks.append((name, lambda p=parser, v=value, k=key: p(v, k)))

        try:
            values = self._run(checks)
        except ValidationError as e:
            issues.extend(e.issues)
            values = {}

        if issues:
            raise ValidationError(issues)
        return values

    def from_model_error(self, error: PydanticValidationError) -> ValidationError:
        """Translate a pydantic model failure (e.g. a broken loan invariant)."""
        issues = []
        for detail in error.errors():
            location = ".".join(str(part) for part in detail.get("loc", ())) or "entry"
            issues.append(ValidationIssue(
                field=location,
                issue_type=detail.get("type", "invalid_value"),
                message=detail.get("msg", "Invalid value"),
            ))
        return ValidationError(issues)
