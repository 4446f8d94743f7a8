"""
Main Orchestrator for the Velam Fund Ledger

This module wires the configured storage backend, the ledger store and
the aggregation engine together for a presentation layer.

DESIGN DECISION: There is no global ledger. The presentation layer asks
for one store/aggregator pair and holds on to it; tests build their own
with in-memory storage. After every mutation the presentation layer pulls
fresh figures from the aggregator - the core has no observers.
"""

from datetime import date
from typing import Callable, Optional

from velam.config import Settings, get_settings
from velam.ledger import LedgerAggregator, LedgerStore
from velam.models.entry import EntryKind
from velam.observability import LedgerActivityLogger, configure_logging
from velam.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsStorage,
    InMemoryStorage,
    JsonFileStorage,
    PersistencePort,
)


def create_storage(settings: Optional[Settings] = None) -> PersistencePort:
    """
    Build the persistence port named by VELAM_STORAGE_BACKEND.

    Raises:
        ConnectionError: If the Sheets backend is selected but unreachable
    """
    settings = settings or get_settings()
    storage_settings = settings.storage

    if storage_settings.backend == "memory":
        return InMemoryStorage()
    if storage_settings.backend == "sheets":
        client = GoogleSheetsClient(settings.google_sheets)
        client.connect()
        return GoogleSheetsStorage(client)
    return JsonFileStorage(storage_settings.data_dir)


def create_app_components(
    storage: Optional[PersistencePort] = None,
    settings: Optional[Settings] = None,
    clock: Callable[[], date] = date.today,
) -> tuple[LedgerStore, LedgerAggregator]:
    """
    Factory function to create the ledger components.

    Args:
        storage: Persistence port to use. Built from settings if omitted.
        settings: Settings to read (cached settings if omitted)
        clock: Source of today's date for loan returns

    Returns:
        (ledger_store, aggregator) with the stored collections loaded
    """
    settings = settings or get_settings()
    configure_logging(settings.app.log_level)

    storage_settings = settings.storage
    keys = {
        EntryKind.CONTRIBUTION: storage_settings.contributions_key,
        EntryKind.LOAN: storage_settings.loans_key,
        EntryKind.EXPENSE: storage_settings.expenses_key,
    }

    store = LedgerStore(
        storage=storage or create_storage(settings),
        keys=keys,
        clock=clock,
        activity_logger=LedgerActivityLogger(),
    )
    aggregator = LedgerAggregator(
        store,
        top_borrowers_limit=settings.fund.top_borrowers_limit,
    )

    return store, aggregator
