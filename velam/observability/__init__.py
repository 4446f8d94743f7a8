"""Structured logging package."""

from velam.observability.logger import LedgerActivityLogger, configure_logging

__all__ = ["LedgerActivityLogger", "configure_logging"]
