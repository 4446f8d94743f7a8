"""
Aggregation Engine

DESIGN DECISION: Every figure is recomputed from the ledger store's
current collections on every call. Nothing is cached, so a figure can
never disagree with the entries it was computed from. At a festival
fund's scale (a few hundred entries a year) this costs nothing.

The aggregator never fails on a valid ledger: an empty store yields
zero totals and empty lists.

NOTE: available_balance counts a loan's interest as received the moment
the loan is recorded, even while the principal is still out. This is how
the fund has always reported its balance; it is kept as-is.
"""

from decimal import Decimal
from typing import Optional, Union

from velam.ledger.store import LedgerStore
from velam.models.entry import EntryKind, Loan
from velam.models.summary import (
    ZERO,
    BorrowerRank,
    ChartBar,
    DashboardTotals,
    MonthlySummary,
)

DEFAULT_TOP_BORROWERS = 5


class LedgerAggregator:
    """
    Computes totals, balance, monthly rollups and the borrower
    leaderboard from a ledger store.

    Holds no state of its own besides the store it reads.
    """

    def __init__(
        self,
        store: LedgerStore,
        top_borrowers_limit: int = DEFAULT_TOP_BORROWERS,
    ):
        self._store = store
        self._top_borrowers_limit = top_borrowers_limit

    # -------------------------------------------------------------------------
    # Totals
    # -------------------------------------------------------------------------

    def total_contributions(self) -> Decimal:
        return sum((c.amount for c in self._store.contributions), ZERO)

    def total_interest(self) -> Decimal:
        """Sum of the interest recorded on every loan, returned or not."""
        return sum((loan.interest for loan in self._store.loans), ZERO)

    def total_loans_given(self) -> Decimal:
        """Sum of every loan's principal, regardless of status."""
        return sum((loan.principal for loan in self._store.loans), ZERO)

    def total_loans_returned(self) -> Decimal:
        return sum(
            (loan.principal for loan in self._store.loans if loan.is_returned),
            ZERO,
        )

    def total_expenses(self) -> Decimal:
        return sum((e.amount for e in self._store.expenses), ZERO)

    def available_balance(self) -> Decimal:
        """
        Net fund position.

        contributions + interest + loans returned - loans given - expenses
        """
        return (
            self.total_contributions()
            + self.total_interest()
            + self.total_loans_returned()
            - self.total_loans_given()
            - self.total_expenses()
        )

    def dashboard(self) -> DashboardTotals:
        """All headline figures in one snapshot."""
        contributions = self.total_contributions()
        interest = self.total_interest()
        loans_given = self.total_loans_given()
        loans_returned = self.total_loans_returned()
        expenses = self.total_expenses()

        return DashboardTotals(
            total_contributions=contributions,
            total_interest=interest,
            total_loans_given=loans_given,
            total_loans_returned=loans_returned,
            total_expenses=expenses,
            available_balance=contributions + interest + loans_returned - loans_given - expenses,
        )

    # -------------------------------------------------------------------------
    # Rankings and rollups
    # -------------------------------------------------------------------------

    def top_borrowers(self, limit: Optional[int] = None) -> list[BorrowerRank]:
        """
        Members ranked by how many loans they have taken.

        Each loan counts once, whatever its amount or status. Ties keep
        the order in which the borrowers first appear in the loan list.
        """
        if limit is None:
            limit = self._top_borrowers_limit
        if limit < 0:
            raise ValueError(f"limit must not be negative, got {limit}")

        counts: dict[str, int] = {}
        for loan in self._store.loans:
            counts[loan.person_name] = counts.get(loan.person_name, 0) + 1

        # sorted() is stable, so equal counts stay in first-appearance order
        ranked = sorted(counts.items(), key=lambda item: -item[1])

        return [
            BorrowerRank(name=name, count=count)
            for name, count in ranked[:limit]
        ]

    def monthly_summary(self) -> list[MonthlySummary]:
        """
        One summary per month touched by any entry, oldest month first.

        A loan adds its principal and interest to the month it was given
        in; once returned, its principal also counts as returned in the
        month of the return date, which may be a later summary.
        """
        summary: dict[str, MonthlySummary] = {}

        def month(key: str) -> MonthlySummary:
            if key not in summary:
                summary[key] = MonthlySummary(month=key)
            return summary[key]

        for contribution in self._store.contributions:
            month(contribution.month).contributions += contribution.amount

        for loan in self._store.loans:
            given = month(loan.month)
            given.loans_given += loan.principal
            given.interest += loan.interest

            if loan.is_returned and loan.return_month:
                month(loan.return_month).loans_returned += loan.principal

        for expense in self._store.expenses:
            month(expense.month).expenses += expense.amount

        # "YYYY-MM" strings sort chronologically
        return [summary[key] for key in sorted(summary)]

    def chart_series(self) -> list[ChartBar]:
        """
        Bars for the monthly chart: money in per month
        (contributions + loans returned + interest).
        """
        return [
            ChartBar(month=s.month, total=s.inflow)
            for s in self.monthly_summary()
        ]

    # -------------------------------------------------------------------------
    # List views
    # -------------------------------------------------------------------------

    def entries_newest_first(self, kind: Union[EntryKind, str]) -> list:
        """Entries of a kind ordered by date, newest first (stable for equal dates)."""
        return sorted(
            self._store.entries(kind),
            key=lambda entry: entry.entry_date,
            reverse=True,
        )

    def active_loans(self) -> list[Loan]:
        return [loan for loan in self._store.loans if not loan.is_returned]
