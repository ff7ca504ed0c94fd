"""Repository contract shared by the in-memory and SQL storage backends"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Generic, Iterator, List, Optional, TypeVar

from rahnu_gateway.domain.exceptions import ValidationError
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

E = TypeVar("E")

# Fields the store assigns; callers may never supply them
SERVER_FIELDS = frozenset({"id", "created_at", "updated_at"})


def check_client_fields(fields: Dict[str, Any]) -> None:
    forbidden = sorted(SERVER_FIELDS & fields.keys())
    if forbidden:
        raise ValidationError(f"Fields are assigned by the server: {', '.join(forbidden)}", forbidden)


class Repository(ABC, Generic[E]):
    """
    CRUD contract for one entity type.

    get/update raise NotFoundError for unknown ids; list returns an empty
    list when nothing matches. Filters are equality predicates on entity
    fields.
    """

    entity_name: str = "Entity"

    @abstractmethod
    def get(self, entity_id: int) -> E:
        ...

    @abstractmethod
    def list(self, **filters: Any) -> List[E]:
        ...

    @abstractmethod
    def create(self, fields: Dict[str, Any]) -> E:
        ...

    @abstractmethod
    def update(self, entity_id: int, fields: Dict[str, Any]) -> E:
        ...

    def find_one(self, **filters: Any) -> Optional[E]:
        """First entity matching the filters, or None"""
        matches = self.list(**filters)
        return matches[0] if matches else None


class Storage(ABC):
    """Groups the per-entity repositories behind one unit of work"""

    users: Repository[User]
    clients: Repository[Client]
    gold_items: Repository[GoldItem]
    loans: Repository[Loan]
    payments: Repository[Payment]
    documents: Repository[Document]
    notifications: Repository[Notification]
    gold_prices: Repository[GoldPriceQuote]

    @abstractmethod
    def begin(self) -> None:
        ...

    @abstractmethod
    def commit(self) -> None:
        ...

    @abstractmethod
    def rollback(self) -> None:
        ...

    @contextmanager
    def transaction(self) -> Iterator["Storage"]:
        """Commit on success, roll back every write on any exception"""
        self.begin()
        try:
            yield self
        except BaseException:
            self.rollback()
            raise
        self.commit()
