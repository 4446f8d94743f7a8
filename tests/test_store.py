"""Tests for the ledger store: mutations, persistence and loading."""

import pytest
from datetime import date
from decimal import Decimal

from velam.ledger import DEFAULT_KEYS, LedgerStore
from velam.models.entry import EntryKind, ExpenseType, LoanStatus
from velam.observability import LedgerActivityLogger
from velam.services.storage import CorruptDataError, InMemoryStorage, StorageError
from velam.validation import ValidationError

from tests.conftest import TODAY, FailingStorage


class TestAddOperations:
    """Tests for adding entries."""

    def test_add_contribution(self, store):
        c = store.add_contribution("2024-01-15", "Ravi", "500")
        assert c.id >= 1
        assert c.amount == Decimal("500")
        assert c.month == "2024-01"
        assert store.contributions == [c]

    def test_add_loan_is_active(self, store):
        loan = store.add_loan("2024-01-01", "Anu", "1000", "50")
        assert loan.status == LoanStatus.ACTIVE
        assert loan.returned_date is None

    def test_add_expense(self, store):
        e = store.add_expense("2024-02-10", "Sheep Purchase", "Festival sheep", 8000)
        assert e.expense_type == ExpenseType.SHEEP_PURCHASE
        assert store.expenses[0].description == "Festival sheep"

    def test_ids_are_unique_and_increasing(self, store):
        ids = [
            store.add_contribution("2024-01-15", "Ravi", 500).id,
            store.add_contribution("2024-01-15", "Anu", 500).id,
            store.add_loan("2024-01-15", "Ravi", 100, 5).id,
        ]
        assert ids == sorted(ids)
        assert len(set(ids)) == 3

    def test_invalid_input_changes_nothing(self, store, storage):
        with pytest.raises(ValidationError):
            store.add_contribution("2024-13-01", "Ravi", "500")
        with pytest.raises(ValidationError):
            store.add_loan("2024-01-01", "Anu", "1000", "-50")
        with pytest.raises(ValidationError):
            store.add_expense("2024-01-01", "Fireworks", "Crackers", "100")
        assert store.contributions == []
        assert store.loans == []
        assert store.expenses == []
        assert storage.save_count == 0

    def test_returned_entries_are_copies(self, store):
        c = store.add_contribution("2024-01-15", "Ravi", "500")
        c.amount = Decimal("9999")
        store.contributions[0].amount = Decimal("9999")
        assert store.contributions[0].amount == Decimal("500")


class TestPersistence:
    """Tests for writes through the persistence port."""

    def test_every_mutation_writes_all_three_collections(self, store, storage):
        store.add_contribution("2024-01-15", "Ravi", "500")
        assert storage.save_count == 3
        assert sorted(storage.keys()) == sorted(DEFAULT_KEYS.values())
        assert storage.load("velam_loans") == []

    def test_stored_shape(self, store, storage):
        c = store.add_contribution("2024-01-15", "Ravi", "500")
        assert storage.load("velam_contributions") == [{
            "id": c.id,
            "date": "2024-01-15",
            "personName": "Ravi",
            "amount": "500",
            "month": "2024-01",
        }]

    def test_storage_failure_keeps_in_memory_change(self, recorder):
        storage = FailingStorage()
        store = LedgerStore(storage, activity_logger=LedgerActivityLogger(recorder))
        storage.fail_writes = True

        with pytest.raises(StorageError):
            store.add_contribution("2024-01-15", "Ravi", "500")

        assert len(store.contributions) == 1
        assert "storage_write_failed" in recorder.event_types()

    def test_reload_round_trip(self, store, storage):
        store.add_contribution("2024-01-15", "Ravi", "500")
        loan = store.add_loan("2024-01-01", "Anu", "1000", "50")
        store.mark_loan_returned(loan.id)
        store.add_expense("2024-02-10", "Miscellaneous", "Rope", "120.50")

        reopened = LedgerStore(storage, clock=lambda: TODAY)
        assert reopened.contributions == store.contributions
        assert reopened.loans == store.loans
        assert reopened.expenses == store.expenses

    def test_custom_keys(self):
        storage = InMemoryStorage()
        store = LedgerStore(storage, keys={EntryKind.LOAN: "fund2_loans"})
        store.add_loan("2024-01-01", "Anu", 100, 5)
        assert len(storage.load("fund2_loans")) == 1
        assert storage.load("velam_loans") is None


class TestLoading:
    """Tests for loading existing data."""

    def test_empty_storage_loads_empty_ledger(self, store):
        assert store.contributions == []
        assert store.loans == []
        assert store.expenses == []

    def test_loads_browser_export(self):
        """Timestamp ids and float amounts from the browser version still load."""
        storage = InMemoryStorage({
            "velam_contributions": [
                {"id": 1705300000000, "date": "2024-01-15", "personName": "Ravi", "amount": 500, "month": "2024-01"},
            ],
            "velam_loans": [
                {"id": 1705300000001, "date": "2024-01-01", "personName": "Anu", "principal": 1000,
                 "interest": 50.5, "status": "RETURNED", "returnedDate": "2024-03-01"},
            ],
        })
        store = LedgerStore(storage)
        assert store.loans[0].interest == Decimal("50.5")
        assert store.loans[0].is_returned

        new = store.add_contribution("2024-03-01", "Ravi", 500)
        assert new.id > 1705300000001

    def test_invalid_stored_entry_raises(self):
        storage = InMemoryStorage({
            "velam_contributions": [
                {"id": 1, "date": "2024-01-15", "personName": "Ravi", "amount": "lots"},
            ],
        })
        with pytest.raises(CorruptDataError, match="Entry 0 of velam_contributions"):
            LedgerStore(storage)

    def test_repeated_stored_ids_get_fresh_ids(self, recorder):
        """Two browser entries saved in the same millisecond both load."""
        storage = InMemoryStorage({
            "velam_contributions": [
                {"id": 1705300000000, "date": "2024-01-15", "personName": "Ravi", "amount": 500},
                {"id": 1705300000000, "date": "2024-01-15", "personName": "Anu", "amount": 500},
            ],
            "velam_loans": [
                {"id": 1705300000005, "date": "2024-01-01", "personName": "Anu",
                 "principal": 1000, "interest": 50, "status": "ACTIVE"},
            ],
        })
        store = LedgerStore(storage, activity_logger=LedgerActivityLogger(recorder))

        ravi, anu = store.contributions
        assert ravi.id == 1705300000000
        assert anu.id == 1705300000006
        assert anu.person_name == "Anu"

        assert "id_reassigned" in recorder.event_types()
        level, _, kw = recorder.records[0]
        assert level == "warning"
        assert kw["details"]["old_id"] == 1705300000000

        assert store.delete_entry("contribution", anu.id) is True
        assert [c["personName"] for c in storage.load("velam_contributions")] == ["Ravi"]

    def test_new_ids_follow_reassigned_ids(self):
        entry = {"id": 7, "date": "2024-01-15", "personName": "Ravi", "amount": 500}
        storage = InMemoryStorage({"velam_contributions": [entry, dict(entry)]})
        store = LedgerStore(storage)

        assert [c.id for c in store.contributions] == [7, 8]
        assert store.add_contribution("2024-01-16", "Anu", 500).id == 9

    def test_load_is_logged(self, store, recorder):
        assert recorder.event_types()[0] == "ledger_loaded"


class TestMarkLoanReturned:
    """Tests for returning loans."""

    def test_marks_returned_today(self, store):
        loan = store.add_loan("2024-01-01", "Anu", "1000", "50")
        returned = store.mark_loan_returned(loan.id)
        assert returned.status == LoanStatus.RETURNED
        assert returned.returned_date == TODAY
        assert store.loans[0].returned_date == TODAY

    def test_second_return_is_noop(self, store, storage):
        loan = store.add_loan("2024-01-01", "Anu", "1000", "50")
        store.mark_loan_returned(loan.id)
        writes = storage.save_count
        before = store.loans

        assert store.mark_loan_returned(loan.id) is None
        assert store.loans == before
        assert storage.save_count == writes

    def test_unknown_loan_is_noop(self, store, storage):
        assert store.mark_loan_returned(12345) is None
        assert storage.save_count == 0

    def test_cannot_return_before_loan_date(self, storage):
        store = LedgerStore(storage, clock=lambda: date(2024, 1, 1))
        loan = store.add_loan("2024-02-01", "Anu", "1000", "50")
        with pytest.raises(ValidationError):
            store.mark_loan_returned(loan.id)
        assert store.loans[0].status == LoanStatus.ACTIVE


class TestDeleteEntry:
    """Tests for deleting entries."""

    def test_delete(self, store):
        c = store.add_contribution("2024-01-15", "Ravi", "500")
        assert store.delete_entry("contribution", c.id) is True
        assert store.contributions == []

    def test_delete_is_idempotent(self, store, storage):
        keep = store.add_loan("2024-01-01", "Ravi", 100, 5)
        gone = store.add_loan("2024-01-02", "Anu", 200, 10)

        store.delete_entry(EntryKind.LOAN, gone.id)
        after_once = store.loans
        writes = storage.save_count

        assert store.delete_entry(EntryKind.LOAN, gone.id) is False
        assert store.loans == after_once == [keep]
        assert storage.save_count == writes

    def test_delete_only_touches_named_collection(self, store):
        c = store.add_contribution("2024-01-15", "Ravi", "500")
        store.delete_entry("expense", c.id)
        assert len(store.contributions) == 1

    def test_unknown_kind_rejected(self, store):
        with pytest.raises(ValidationError):
            store.delete_entry("donation", 1)


class TestUpdateEntry:
    """Tests for partial updates."""

    def test_partial_update_keeps_other_fields(self, store):
        c = store.add_contribution("2024-01-15", "Ravi", "500")
        updated = store.update_entry("contribution", c.id, {"amount": "750"})
        assert updated.amount == Decimal("750")
        assert updated.person_name == "Ravi"
        assert updated.entry_date == date(2024, 1, 15)

    def test_date_change_rederives_month(self, store, storage):
        c = store.add_contribution("2024-01-15", "Ravi", "500")
        updated = store.update_entry("contribution", c.id, {"date": "2024-02-03"})
        assert updated.month == "2024-02"
        assert storage.load("velam_contributions")[0]["month"] == "2024-02"

    def test_unknown_id_is_noop(self, store, storage):
        assert store.update_entry("loan", 999, {"principal": 5}) is None
        assert storage.save_count == 0

    def test_invalid_update_leaves_entry_untouched(self, store):
        e = store.add_expense("2024-02-10", "Miscellaneous", "Rope", "120")
        with pytest.raises(ValidationError):
            store.update_entry("expense", e.id, {"amount": "-1", "description": "Rope x2"})
        assert store.expenses == [e]

    def test_update_cannot_break_return_invariant(self, store):
        loan = store.add_loan("2024-01-01", "Anu", "1000", "50")
        store.mark_loan_returned(loan.id)
        with pytest.raises(ValidationError):
            store.update_entry("loan", loan.id, {"date": "2024-04-01"})
        assert store.loans[0].entry_date == date(2024, 1, 1)

    def test_id_cannot_be_changed(self, store):
        c = store.add_contribution("2024-01-15", "Ravi", "500")
        with pytest.raises(ValidationError):
            store.update_entry("contribution", c.id, {"id": 99})

    def test_unchanged_update_skips_write(self, store, storage):
        c = store.add_contribution("2024-01-15", "Ravi", "500")
        writes = storage.save_count
        store.update_entry("contribution", c.id, {"personName": "Ravi"})
        assert storage.save_count == writes

    def test_update_is_logged_with_changed_fields(self, store, recorder):
        loan = store.add_loan("2024-01-01", "Anu", "1000", "50")
        store.update_entry("loan", loan.id, {"principal": "1200", "personName": "Anu"})
        _, _, last = recorder.records[-1]
        assert last["event_type"] == "entry_updated"
        assert last["details"]["changed_fields"] == ["principal"]


class TestActivityLogging:
    """Tests for the events the store emits."""

    def test_mutations_emit_events(self, store, recorder):
        c = store.add_contribution("2024-01-15", "Ravi", "500")
        loan = store.add_loan("2024-01-01", "Anu", "1000", "50")
        store.mark_loan_returned(loan.id)
        store.delete_entry("contribution", c.id)

        assert recorder.event_types()[1:] == [
            "entry_added",
            "entry_added",
            "loan_returned",
            "entry_deleted",
        ]

    def test_rejected_input_is_logged_as_warning(self, store, recorder):
        with pytest.raises(ValidationError):
            store.add_contribution("yesterday", "Ravi", "500")
        level, _, kw = recorder.records[-1]
        assert level == "warning"
        assert kw["event_type"] == "validation_failed"

    def test_default_logger_is_structlog(self, storage):
        store = LedgerStore(storage)
        store.add_contribution("2024-01-15", "Ravi", "500")
        assert len(store.contributions) == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
