"""
Core Ledger Models for the Velam Fund

These models define the strict schemas for every entry the fund records.
They are designed to:
1. Enforce type safety and per-entry invariants at runtime
2. Provide clear validation error messages
3. Serialize to the flat camelCase objects the browser version stored,
   so an exported localStorage collection loads unchanged

DESIGN DECISION: Attributes are snake_case in Python and aliased to the
stored field names. Derived fields (month) are computed, never stored
independently, so they cannot go stale after an edit.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    model_validator,
)


def month_key(value: date) -> str:
    """Format a date as the "YYYY-MM" key used for monthly grouping."""
    return f"{value.year:04d}-{value.month:02d}"


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class EntryKind(str, Enum):
    """The three collections the ledger owns."""
    CONTRIBUTION = "contribution"
    LOAN = "loan"
    EXPENSE = "expense"


class LoanStatus(str, Enum):
    """
    Loan lifecycle.

    A loan only ever moves ACTIVE -> RETURNED.
    """
    ACTIVE = "ACTIVE"
    RETURNED = "RETURNED"


class ExpenseType(str, Enum):
    """
    Supported expense types.

    DESIGN DECISION: The fund only spends on the festival sheep and
    sundries. Free text is rejected so monthly reports stay comparable.
    """
    SHEEP_PURCHASE = "Sheep Purchase"
    MISCELLANEOUS = "Miscellaneous"


# =============================================================================
# LEDGER ENTRIES
# =============================================================================

class LedgerEntry(BaseModel):
    """
    Fields shared by every recorded entry.

    The id is assigned by the ledger store and is unique within
    its own collection.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
    )

    id: int = Field(
        ...,
        ge=1,
        description="Identifier, unique within the entry's collection"
    )
    entry_date: date = Field(
        ...,
        alias="date",
        description="Calendar date the entry happened on"
    )

    def to_storage_dict(self) -> dict:
        """
        Convert to the flat dict written through the persistence port.

        Decimals are written as strings so no precision is lost.
        """
        return self.model_dump(mode="json", by_alias=True)


class Contribution(LedgerEntry):
    """A member's payment into the fund."""

    person_name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        alias="personName",
        description="Member who paid"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Amount paid in INR"
    )

    @computed_field
    @property
    def month(self) -> str:
        return month_key(self.entry_date)


class Loan(LedgerEntry):
    """
    Principal lent to a member, with a fixed interest amount.

    Interest is agreed when the loan is given. It is a static amount,
    not a rate, and nothing accrues over time.
    """

    person_name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        alias="personName",
        description="Member who borrowed"
    )
    principal: Decimal = Field(
        ...,
        ge=0,
        description="Amount lent in INR"
    )
    interest: Decimal = Field(
        ...,
        ge=0,
        description="Interest agreed at lending time, in INR"
    )
    status: LoanStatus = Field(
        default=LoanStatus.ACTIVE,
    )
    returned_date: Optional[date] = Field(
        default=None,
        alias="returnedDate",
        description="Date the principal came back (only for returned loans)"
    )

    @model_validator(mode='after')
    def validate_return(self) -> 'Loan':
        """Keep status and returned date consistent."""
        if self.status == LoanStatus.RETURNED and self.returned_date is None:
            raise ValueError("Returned loan must have a returned date")

        if self.status == LoanStatus.ACTIVE and self.returned_date is not None:
            raise ValueError("Active loan cannot have a returned date")

        if self.returned_date and self.returned_date < self.entry_date:
            raise ValueError("Returned date cannot be before loan date")

        return self

    @property
    def is_returned(self) -> bool:
        return self.status == LoanStatus.RETURNED

    @property
    def month(self) -> str:
        return month_key(self.entry_date)

    @property
    def return_month(self) -> Optional[str]:
        """Month the principal came back in, if it has."""
        if self.returned_date is None:
            return None
        return month_key(self.returned_date)


class Expense(LedgerEntry):
    """Money the fund spent."""

    expense_type: ExpenseType = Field(
        ...,
        alias="type",
    )
    description: str = Field(
        ...,
        min_length=1,
        max_length=500,
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Amount spent in INR"
    )

    @computed_field
    @property
    def month(self) -> str:
        return month_key(self.entry_date)


ENTRY_MODELS: dict[EntryKind, type[LedgerEntry]] = {
    EntryKind.CONTRIBUTION: Contribution,
    EntryKind.LOAN: Loan,
    EntryKind.EXPENSE: Expense,
}


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem found in user input."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'out_of_range')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
