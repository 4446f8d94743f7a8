"""
Data Models Package

This package contains all Pydantic models used by the Velam fund ledger.
All data flowing through the system must conform to these schemas.
"""

from velam.models.entry import (
    ENTRY_MODELS,
    Contribution,
    EntryKind,
    Expense,
    ExpenseType,
    LedgerEntry,
    Loan,
    LoanStatus,
    ValidationIssue,
    month_key,
)
from velam.models.summary import (
    BorrowerRank,
    ChartBar,
    DashboardTotals,
    MonthlySummary,
)
from velam.models.activity import (
    ActivityEvent,
    ActivityEventBuilder,
    ActivityEventType,
    ActivitySeverity,
)

__all__ = [
    # Ledger entries
    "ENTRY_MODELS",
    "Contribution",
    "EntryKind",
    "Expense",
    "ExpenseType",
    "LedgerEntry",
    "Loan",
    "LoanStatus",
    "ValidationIssue",
    "month_key",
    # Derived models
    "BorrowerRank",
    "ChartBar",
    "DashboardTotals",
    "MonthlySummary",
    # Activity models
    "ActivityEvent",
    "ActivityEventBuilder",
    "ActivityEventType",
    "ActivitySeverity",
]
