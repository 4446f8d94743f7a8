"""
Ledger Store

DESIGN DECISION: The store is the ONLY way to change the fund's books.
It owns the three collections (contributions, loans, expenses) and:
1. Validates input before touching any collection
2. Assigns ids from a monotonic counter
3. Writes all three collections through the persistence port after
   every successful change

Unknown ids on update / delete / mark-returned are no-ops, not errors,
so repeating an action (a double click, a retried request) is safe.

If a storage write fails, the in-memory change is kept and the
StorageError is raised to the caller. The in-memory ledger stays the
source of truth; the caller decides whether to warn the user.
"""

import itertools
from collections.abc import Mapping
from datetime import date
from typing import Any, Callable, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from velam.models.entry import (
    ENTRY_MODELS,
    Contribution,
    EntryKind,
    Expense,
    LedgerEntry,
    Loan,
    LoanStatus,
    ValidationIssue,
)
from velam.observability import LedgerActivityLogger
from velam.services.storage import CorruptDataError, PersistencePort, StorageError
from velam.validation import EntryValidator, ValidationError

DEFAULT_KEYS: dict[EntryKind, str] = {
    EntryKind.CONTRIBUTION: "velam_contributions",
    EntryKind.LOAN: "velam_loans",
    EntryKind.EXPENSE: "velam_expenses",
}


class LedgerStore:
    """
    Owns the fund's three ordered collections.

    Entries keep insertion order. Everything handed out is a copy, so
    callers cannot change the books without going through the store.
    """

    def __init__(
        self,
        storage: PersistencePort,
        keys: Optional[Mapping[EntryKind, str]] = None,
        clock: Callable[[], date] = date.today,
        validator: Optional[EntryValidator] = None,
        activity_logger: Optional[LedgerActivityLogger] = None,
    ):
        """
        Initialize the store and load the stored collections.

        Args:
            storage: Persistence port holding one collection per key
            keys: Storage key for each entry kind (defaults to DEFAULT_KEYS)
            clock: Returns today's date; used when a loan is marked returned
            validator: Input validator
            activity_logger: Structured activity log

        Raises:
            StorageError: If a collection cannot be read
            CorruptDataError: If a stored entry is invalid
        """
        self._storage = storage
        self._keys = dict(DEFAULT_KEYS)
        if keys:
            self._keys.update(keys)
        self._clock = clock
        self._validator = validator or EntryValidator()
        self._activity = activity_logger or LedgerActivityLogger()

        self._collections: dict[EntryKind, list[LedgerEntry]] = {
            kind: [] for kind in EntryKind
        }
        self._ids = itertools.count(1)

        self.reload()

    # -------------------------------------------------------------------------
    # Loading and persistence
    # -------------------------------------------------------------------------

    def reload(self) -> None:
        """
        Replace the in-memory collections with what storage holds.

        Stored entries are never skipped: an entry that fails validation
        would be erased by the next save, so loading stops instead.

        Timestamp ids written by the browser version can repeat within a
        collection. A repeated id is kept on its first entry; later
        entries get fresh ids from the counter. The new ids are written
        back with the next save.
        """
        collections: dict[EntryKind, list[LedgerEntry]] = {}

        for kind in EntryKind:
            key = self._keys[kind]
            raw = self._storage.load(key) or []
            model = ENTRY_MODELS[kind]

            entries: list[LedgerEntry] = []
            for position, item in enumerate(raw):
                try:
                    entries.append(model.model_validate(item))
                except PydanticValidationError as e:
                    raise CorruptDataError(
                        f"Entry {position} of {key} is invalid: {e}"
                    ) from e
            collections[kind] = entries

        highest_id = max(
            (entry.id for entries in collections.values() for entry in entries),
            default=0,
        )
        ids = itertools.count(highest_id + 1)

        for kind, entries in collections.items():
            seen_ids: set[int] = set()
            for position, entry in enumerate(entries):
                if entry.id in seen_ids:
                    new_id = next(ids)
                    entries[position] = entry.model_copy(update={"id": new_id})
                    self._activity.log_id_reassigned(
                        kind.value, entry.id, new_id, self._keys[kind]
                    )
                    entry = entries[position]
                seen_ids.add(entry.id)

        self._collections = collections
        self._ids = ids

        self._activity.log_ledger_loaded(
            {kind.value: len(entries) for kind, entries in collections.items()}
        )

    def _persist(self) -> None:
        """Write all three collections, in full."""
        for kind in EntryKind:
            key = self._keys[kind]
            payload = [entry.to_storage_dict() for entry in self._collections[kind]]
            try:
                self._storage.save(key, payload)
            except StorageError as e:
                self._activity.log_storage_write_failed(key, str(e))
                raise

    # -------------------------------------------------------------------------
    # Read surface
    # -------------------------------------------------------------------------

    @property
    def contributions(self) -> list[Contribution]:
        return self.entries(EntryKind.CONTRIBUTION)

    @property
    def loans(self) -> list[Loan]:
        return self.entries(EntryKind.LOAN)

    @property
    def expenses(self) -> list[Expense]:
        return self.entries(EntryKind.EXPENSE)

    def entries(self, kind: Union[EntryKind, str]) -> list:
        """Copies of every entry of a kind, in insertion order."""
        kind = self._validator.parse_kind(kind)
        return [entry.model_copy() for entry in self._collections[kind]]

    def get_entry(self, kind: Union[EntryKind, str], entry_id: int) -> Optional[LedgerEntry]:
        kind = self._validator.parse_kind(kind)
        index = self._index_of(kind, entry_id)
        if index is None:
            return None
        return self._collections[kind][index].model_copy()

    def _index_of(self, kind: EntryKind, entry_id: int) -> Optional[int]:
        for index, entry in enumerate(self._collections[kind]):
            if entry.id == entry_id:
                return index
        return None

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def _build(self, kind: EntryKind, data: dict[str, Any], entry_id: Optional[int] = None) -> LedgerEntry:
        """Construct an entry, reporting model failures as ValidationError."""
        try:
            return ENTRY_MODELS[kind].model_validate(data)
        except PydanticValidationError as e:
            error = self._validator.from_model_error(e)
            self._activity.log_validation_failed(kind.value, error.issues, entry_id)
            raise error from e

    def _validated(
        self,
        kind: EntryKind,
        check: Callable[[], dict[str, Any]],
        entry_id: Optional[int] = None,
    ) -> dict[str, Any]:
        try:
            return check()
        except ValidationError as e:
            self._activity.log_validation_failed(kind.value, e.issues, entry_id)
            raise

    def _append(self, kind: EntryKind, values: dict[str, Any]) -> LedgerEntry:
        entry = self._build(kind, {"id": next(self._ids), **values})
        self._collections[kind].append(entry)
        self._activity.log_entry_added(kind.value, entry)
        self._persist()
        return entry.model_copy()

    def add_contribution(self, entry_date: Any, person_name: Any, amount: Any) -> Contribution:
        """
        Record a member's contribution.

        Raises:
            ValidationError: If the date or amount is malformed or the
                             amount is negative
            StorageError: If the entry was recorded but could not be saved
        """
        kind = EntryKind.CONTRIBUTION
        values = self._validated(
            kind,
            lambda: self._validator.validate_contribution(entry_date, person_name, amount),
        )
        return self._append(kind, values)

    def add_loan(self, entry_date: Any, person_name: Any, principal: Any, interest: Any) -> Loan:
        """
        Record a loan. New loans are always ACTIVE with no returned date.

        Raises:
            ValidationError: If the date is malformed or either amount is
                             malformed or negative
            StorageError: If the entry was recorded but could not be saved
        """
        kind = EntryKind.LOAN
        values = self._validated(
            kind,
            lambda: self._validator.validate_loan(entry_date, person_name, principal, interest),
        )
        return self._append(kind, values)

    def add_expense(self, entry_date: Any, expense_type: Any, description: Any, amount: Any) -> Expense:
        """
        Record money the fund spent.

        Raises:
            ValidationError: If the date, type or amount is invalid
            StorageError: If the entry was recorded but could not be saved
        """
        kind = EntryKind.EXPENSE
        values = self._validated(
            kind,
            lambda: self._validator.validate_expense(entry_date, expense_type, description, amount),
        )
        return self._append(kind, values)

    def mark_loan_returned(self, loan_id: int) -> Optional[Loan]:
        """
        Mark an active loan as returned today.

        Returns:
            The updated loan, or None when the id is unknown or the loan
            was already returned (nothing changes, nothing is written)

        Raises:
            ValidationError: If today is before the loan's date
            StorageError: If the change was made but could not be saved
        """
        kind = EntryKind.LOAN
        index = self._index_of(kind, loan_id)
        if index is None:
            return None

        loan = self._collections[kind][index]
        if loan.status == LoanStatus.RETURNED:
            return None

        today = self._clock()
        if today < loan.entry_date:
            error = ValidationError([ValidationIssue(
                field="returnedDate",
                issue_type="out_of_range",
                message=(
                    f"Loan #{loan_id} is dated {loan.entry_date.isoformat()}, "
                    f"it cannot be returned on {today.isoformat()}"
                ),
            )])
            self._activity.log_validation_failed(kind.value, error.issues, loan_id)
            raise error

        returned = self._build(
            kind,
            {**loan.model_dump(), "status": LoanStatus.RETURNED, "returned_date": today},
            loan_id,
        )
        self._collections[kind][index] = returned
        self._activity.log_loan_returned(loan_id, today.isoformat())
        self._persist()
        return returned.model_copy()

    def delete_entry(self, kind: Union[EntryKind, str], entry_id: int) -> bool:
        """
        Remove an entry.

        Returns:
            True if an entry was removed, False if the id was unknown
            (nothing is written in that case)

        Raises:
            ValidationError: If kind is not contribution, loan or expense
            StorageError: If the entry was removed but could not be saved
        """
        kind = self._validator.parse_kind(kind)
        index = self._index_of(kind, entry_id)
        if index is None:
            return False

        del self._collections[kind][index]
        self._activity.log_entry_deleted(kind.value, entry_id)
        self._persist()
        return True

    def update_entry(
        self,
        kind: Union[EntryKind, str],
        entry_id: int,
        field_updates: Mapping[str, Any],
    ) -> Optional[LedgerEntry]:
        """
        Merge field updates into an existing entry.

        Unspecified fields stay as they are. The merged entry is
        re-validated as a whole, so derived fields (month) follow a date
        change and a loan's returned date can never precede its date.

        Returns:
            The updated entry, or None when the id is unknown

        Raises:
            ValidationError: If a field is unknown, immutable (id, month)
                             or invalid; the entry is left untouched
            StorageError: If the change was made but could not be saved
        """
        kind = self._validator.parse_kind(kind)
        index = self._index_of(kind, entry_id)
        if index is None:
            return None

        current = self._collections[kind][index]
        updates = self._validated(
            kind,
            lambda: self._validator.validate_updates(kind, field_updates),
            entry_id,
        )

        updated = self._build(kind, {**current.model_dump(), **updates}, entry_id)
        changed = [
            name for name in updates
            if getattr(current, name) != getattr(updated, name)
        ]
        if not changed:
            return current.model_copy()

        self._collections[kind][index] = updated
        self._activity.log_entry_updated(kind.value, entry_id, changed)
        self._persist()
        return updated.model_copy()
