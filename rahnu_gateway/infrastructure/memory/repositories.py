"""In-memory storage backend used for development and tests"""

import copy
import dataclasses
import itertools
import threading
from typing import Any, Dict, Generic, List, Optional, Sequence, Tuple, Type

from rahnu_gateway.domain.exceptions import ConflictError, NotFoundError, ValidationError
from rahnu_gateway.domain.models import (
    Client,
    Document,
    GoldItem,
    GoldPriceQuote,
    Loan,
    Notification,
    Payment,
    User,
)
from rahnu_gateway.domain.repositories import E, Repository, Storage, check_client_fields
from rahnu_gateway.utils.date_utils import utcnow

# One undo entry per write: (repository, entity id, row before the write or None)
UndoEntry = Tuple["InMemoryRepository", int, Any]


class InMemoryRepository(Repository[E], Generic[E]):
    """Dict-backed repository; entities are copied in and out"""

    def __init__(
        self,
        entity_cls: Type[E],
        lock: threading.RLock,
        journal: List[List[UndoEntry]],
        unique_fields: Sequence[str] = (),
    ):
        self.entity_cls = entity_cls
        self.entity_name = entity_cls.__name__
        self.unique_fields = tuple(unique_fields)
        self._lock = lock
        self._journal = journal
        self._rows: Dict[int, E] = {}
        self._ids = itertools.count(1)
        self._field_names = {f.name for f in dataclasses.fields(entity_cls)}

    def _check_field_names(self, names) -> None:
        unknown = sorted(set(names) - self._field_names)
        if unknown:
            raise ValidationError(f"Unknown {self.entity_name} fields: {', '.join(unknown)}", unknown)

    def _remember(self, entity_id: int) -> None:
        if self._journal:
            self._journal[-1].append((self, entity_id, self._rows.get(entity_id)))

    def _check_unique(self, candidate: E, exclude_id: Optional[int] = None) -> None:
        for name in self.unique_fields:
            value = getattr(candidate, name)
            for row in self._rows.values():
                if row.id != exclude_id and getattr(row, name) == value:
                    raise ConflictError(f"{self.entity_name} with {name} '{value}' already exists")

    def get(self, entity_id: int) -> E:
        with self._lock:
            row = self._rows.get(entity_id)
            if row is None:
                raise NotFoundError(self.entity_name, entity_id)
            return copy.deepcopy(row)

    def list(self, **filters: Any) -> List[E]:
        self._check_field_names(filters)
        with self._lock:
            return [
                copy.deepcopy(row)
                for row in self._rows.values()
                if all(getattr(row, name) == value for name, value in filters.items())
            ]

    def create(self, fields: Dict[str, Any]) -> E:
        check_client_fields(fields)
        self._check_field_names(fields)
        now = utcnow()
        server_fields: Dict[str, Any] = {"created_at": now}
        if "updated_at" in self._field_names:
            server_fields["updated_at"] = now

        with self._lock:
            try:
                entity = self.entity_cls(id=0, **copy.deepcopy(fields), **server_fields)
            except TypeError as e:
                raise ValidationError(f"Invalid {self.entity_name} fields: {e}") from e
            self._check_unique(entity)
            # Only consume an id once the row is known to be valid
            entity.id = next(self._ids)
            self._remember(entity.id)
            self._rows[entity.id] = entity
            return copy.deepcopy(entity)

    def update(self, entity_id: int, fields: Dict[str, Any]) -> E:
        check_client_fields(fields)
        self._check_field_names(fields)
        with self._lock:
            row = self._rows.get(entity_id)
            if row is None:
                raise NotFoundError(self.entity_name, entity_id)
            changes = copy.deepcopy(fields)
            if "updated_at" in self._field_names:
                changes["updated_at"] = utcnow()
            updated = dataclasses.replace(row, **changes)
            self._check_unique(updated, exclude_id=entity_id)
            self._remember(entity_id)
            self._rows[entity_id] = updated
            return copy.deepcopy(updated)

    def undo(self, entity_id: int, previous: Optional[E]) -> None:
        # Ids already handed out stay consumed
        if previous is None:
            del self._rows[entity_id]
        else:
            self._rows[entity_id] = previous


class InMemoryStorage(Storage):
    """
    Process-local storage.

    A single re-entrant lock serializes writers. Stored rows are replaced,
    never mutated, so a transaction only journals the prior version of each
    row it writes; rollback replays that journal backwards.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._journal: List[List[UndoEntry]] = []

        self.users = InMemoryRepository(User, self._lock, self._journal, unique_fields=("username",))
        self.clients = InMemoryRepository(Client, self._lock, self._journal)
        self.gold_items = InMemoryRepository(GoldItem, self._lock, self._journal)
        self.loans = InMemoryRepository(Loan, self._lock, self._journal, unique_fields=("contract_number",))
        self.payments = InMemoryRepository(Payment, self._lock, self._journal)
        self.documents = InMemoryRepository(Document, self._lock, self._journal)
        self.notifications = InMemoryRepository(Notification, self._lock, self._journal)
        self.gold_prices = InMemoryRepository(GoldPriceQuote, self._lock, self._journal)

    def begin(self) -> None:
        self._lock.acquire()
        self._journal.append([])

    def commit(self) -> None:
        if self._journal:
            entries = self._journal.pop()
            # An enclosing transaction must still be able to undo these writes
            if self._journal:
                self._journal[-1].extend(entries)
            self._lock.release()

    def rollback(self) -> None:
        if self._journal:
            for repo, entity_id, previous in reversed(self._journal.pop()):
                repo.undo(entity_id, previous)
            self._lock.release()
