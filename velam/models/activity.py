"""
Activity Models for the Velam Fund Ledger

Every change to the ledger emits one structured log event.
This provides:
1. Traceability when a figure on the dashboard looks wrong
2. Debugging information when a storage write fails

DESIGN DECISION: Activity events go to the log only. The ledger's stored
fields are the one record of the fund; events are not persisted.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class ActivityEventType(str, Enum):
    """Types of ledger activity we log."""
    # Mutations
    ENTRY_ADDED = "entry_added"
    ENTRY_UPDATED = "entry_updated"
    ENTRY_DELETED = "entry_deleted"
    LOAN_RETURNED = "loan_returned"

    # Rejected input
    VALIDATION_FAILED = "validation_failed"

    # Persistence
    LEDGER_LOADED = "ledger_loaded"
    ID_REASSIGNED = "id_reassigned"
    STORAGE_WRITE_FAILED = "storage_write_failed"


class ActivitySeverity(str, Enum):
    """Severity level for activity events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ActivityEvent(BaseModel):
    """A single ledger activity event."""

    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )
    event_type: ActivityEventType
    severity: ActivitySeverity = ActivitySeverity.INFO

    # What entry is this about?
    entry_kind: Optional[str] = None
    entry_id: Optional[int] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entry_kind": self.entry_kind,
            "entry_id": self.entry_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class ActivityEventBuilder:
    """
    Helper class to build activity events with common patterns.

    Usage:
        event = ActivityEventBuilder.entry_added("loan", 7, {"principal": "1000"})
        event = ActivityEventBuilder.loan_returned(7, "2024-03-01")
    """

    @staticmethod
    def entry_added(
        kind: str,
        entry_id: int,
        details: dict[str, Any],
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.ENTRY_ADDED,
            entry_kind=kind,
            entry_id=entry_id,
            description=f"Added {kind} #{entry_id}",
            details=details,
        )

    @staticmethod
    def entry_updated(
        kind: str,
        entry_id: int,
        changed_fields: list[str],
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.ENTRY_UPDATED,
            entry_kind=kind,
            entry_id=entry_id,
            description=f"Updated {kind} #{entry_id}",
            details={"changed_fields": changed_fields},
        )

    @staticmethod
    def entry_deleted(kind: str, entry_id: int) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.ENTRY_DELETED,
            entry_kind=kind,
            entry_id=entry_id,
            description=f"Deleted {kind} #{entry_id}",
        )

    @staticmethod
    def loan_returned(loan_id: int, returned_date: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.LOAN_RETURNED,
            entry_kind="loan",
            entry_id=loan_id,
            description=f"Loan #{loan_id} returned on {returned_date}",
            details={"returned_date": returned_date},
        )

    @staticmethod
    def validation_failed(
        kind: str,
        issues: list[dict],
        entry_id: Optional[int] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.VALIDATION_FAILED,
            severity=ActivitySeverity.WARNING,
            entry_kind=kind,
            entry_id=entry_id,
            description=f"Rejected {kind} input with {len(issues)} issues",
            details={"issues": issues},
        )

    @staticmethod
    def ledger_loaded(counts: dict[str, int]) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.LEDGER_LOADED,
            description="Ledger loaded from storage",
            details=counts,
        )

    @staticmethod
    def id_reassigned(kind: str, old_id: int, new_id: int, key: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.ID_REASSIGNED,
            severity=ActivitySeverity.WARNING,
            entry_kind=kind,
            entry_id=new_id,
            description=f"Stored {kind} id {old_id} was repeated, gave it id {new_id}",
            details={"key": key, "old_id": old_id, "new_id": new_id},
        )

    @staticmethod
    def storage_write_failed(key: str, error_message: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.STORAGE_WRITE_FAILED,
            severity=ActivitySeverity.ERROR,
            description=f"Failed to write collection {key}",
            error_message=error_message,
            details={"key": key},
        )
