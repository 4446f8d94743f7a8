"""Shared fixtures for the ledger tests."""

from datetime import date

import pytest

from velam.ledger import LedgerAggregator, LedgerStore
from velam.observability import LedgerActivityLogger
from velam.services.storage import InMemoryStorage, StorageError

TODAY = date(2024, 3, 1)


class RecordingLogger:
    """Stands in for a structlog bound logger and keeps every call."""

    def __init__(self):
        self.records: list[tuple[str, str, dict]] = []

    def _record(self, level, event, **kw):
        self.records.append((level, event, kw))

    def debug(self, event, **kw):
        self._record("debug", event, **kw)

    def info(self, event, **kw):
        self._record("info", event, **kw)

    def warning(self, event, **kw):
        self._record("warning", event, **kw)

    def error(self, event, **kw):
        self._record("error", event, **kw)

    def event_types(self) -> list[str]:
        return [kw["event_type"] for _, _, kw in self.records]


class FailingStorage(InMemoryStorage):
    """In-memory storage whose writes can be switched off."""

    def __init__(self):
        super().__init__()
        self.fail_writes = False

    def save(self, key, value):
        if self.fail_writes:
            raise StorageError(f"disk full while writing {key}")
        super().save(key, value)


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def recorder() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def store(storage, recorder) -> LedgerStore:
    return LedgerStore(
        storage,
        clock=lambda: TODAY,
        activity_logger=LedgerActivityLogger(recorder),
    )


@pytest.fixture
def aggregator(store) -> LedgerAggregator:
    return LedgerAggregator(store)
