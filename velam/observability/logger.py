"""
Ledger Activity Logger

DESIGN DECISION: Every change to the ledger is logged as one structured
event. This provides:
1. Traceability when a dashboard figure looks wrong
2. Debugging capability when storage writes fail

The activity logger:
- Is synchronous, like the rest of the ledger core
- Only writes to the local structured log (nothing is persisted)
- Emits JSON-safe values only (amounts as strings, dates as ISO text)
"""

import logging
import sys
from typing import Any, Optional

import structlog

from velam.models.activity import ActivityEvent, ActivityEventBuilder, ActivitySeverity
from velam.models.entry import LedgerEntry, ValidationIssue


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog's JSON lines to stderr at the given level."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
    )


class LedgerActivityLogger:
    """Central activity logging for the ledger store."""

    def __init__(self, logger: Optional[Any] = None):
        """
        Initialize activity logger.

        Args:
            logger: Bound logger to write to. Defaults to the
                    'velam.ledger' structlog logger.
        """
        self._logger = logger or structlog.get_logger("velam.ledger")

    def log(self, event: ActivityEvent) -> None:
        """Log an activity event at the level matching its severity."""
        log_dict = event.to_log_dict()

        if event.severity == ActivitySeverity.ERROR:
            self._logger.error("ledger_activity", **log_dict)
        elif event.severity == ActivitySeverity.WARNING:
            self._logger.warning("ledger_activity", **log_dict)
        elif event.severity == ActivitySeverity.DEBUG:
            self._logger.debug("ledger_activity", **log_dict)
        else:
            self._logger.info("ledger_activity", **log_dict)

    def log_entry_added(self, kind: str, entry: LedgerEntry) -> None:
        self.log(ActivityEventBuilder.entry_added(
            kind=kind,
            entry_id=entry.id,
            details=entry.to_storage_dict(),
        ))

    def log_entry_updated(self, kind: str, entry_id: int, changed_fields: list[str]) -> None:
        self.log(ActivityEventBuilder.entry_updated(
            kind=kind,
            entry_id=entry_id,
            changed_fields=changed_fields,
        ))

    def log_entry_deleted(self, kind: str, entry_id: int) -> None:
        self.log(ActivityEventBuilder.entry_deleted(kind=kind, entry_id=entry_id))

    def log_loan_returned(self, loan_id: int, returned_date: str) -> None:
        self.log(ActivityEventBuilder.loan_returned(
            loan_id=loan_id,
            returned_date=returned_date,
        ))

    def log_validation_failed(
        self,
        kind: str,
        issues: list[ValidationIssue],
        entry_id: Optional[int] = None,
    ) -> None:
        self.log(ActivityEventBuilder.validation_failed(
            kind=kind,
            issues=[issue.model_dump() for issue in issues],
            entry_id=entry_id,
        ))

    def log_ledger_loaded(self, counts: dict[str, int]) -> None:
        self.log(ActivityEventBuilder.ledger_loaded(counts))

    def log_id_reassigned(self, kind: str, old_id: int, new_id: int, key: str) -> None:
        self.log(ActivityEventBuilder.id_reassigned(
            kind=kind,
            old_id=old_id,
            new_id=new_id,
            key=key,
        ))

    def log_storage_write_failed(self, key: str, error_message: str) -> None:
        self.log(ActivityEventBuilder.storage_write_failed(
            key=key,
            error_message=error_message,
        ))
