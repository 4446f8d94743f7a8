"""
Derived Models

Results computed by the aggregation engine. None of these are stored:
they are rebuilt from the ledger on every query.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

ZERO = Decimal("0")


class MonthlySummary(BaseModel):
    """
    Fund movement within one calendar month.

    A loan given in one month and returned in a later one shows up in
    two different summaries: loans_given and interest in the first,
    loans_returned in the second.
    """
    model_config = ConfigDict(populate_by_name=True)

    month: str = Field(
        ...,
        pattern=r"^\d{4}-\d{2}$",
        description="Month key (YYYY-MM)"
    )
    contributions: Decimal = ZERO
    loans_given: Decimal = Field(default=ZERO, alias="loansGiven")
    loans_returned: Decimal = Field(default=ZERO, alias="loansReturned")
    interest: Decimal = ZERO
    expenses: Decimal = ZERO

    @property
    def inflow(self) -> Decimal:
        """Money that came into the fund this month (the chart's bar height)."""
        return self.contributions + self.loans_returned + self.interest


class BorrowerRank(BaseModel):
    """One row of the top borrowers leaderboard."""

    name: str
    count: int = Field(
        ...,
        ge=1,
        description="Number of loans taken, regardless of amount or status"
    )


class DashboardTotals(BaseModel):
    """All headline figures of the dashboard in one snapshot."""

    total_contributions: Decimal
    total_interest: Decimal
    total_loans_given: Decimal
    total_loans_returned: Decimal
    total_expenses: Decimal
    available_balance: Decimal


class ChartBar(BaseModel):
    """One bar of the monthly chart."""

    month: str
    total: Decimal
