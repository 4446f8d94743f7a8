"""Ledger store and aggregation engine."""

from velam.ledger.store import DEFAULT_KEYS, LedgerStore
from velam.ledger.aggregates import LedgerAggregator

__all__ = ["DEFAULT_KEYS", "LedgerAggregator", "LedgerStore"]
