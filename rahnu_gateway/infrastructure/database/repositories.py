"""Data access layer backed by SQLAlchemy"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Generic, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from rahnu_gateway.config import settings
from rahnu_gateway.domain.exceptions import ConflictError, NotFoundError, StorageError, ValidationError
from rahnu_gateway.domain.models import (
    Client,
    Document,
    DocumentStatus,
    GoldItem,
    GoldPriceQuote,
    Loan,
    LoanStatus,
    Notification,
    NotificationStatus,
    Payment,
    PaymentFrequency,
    PaymentStatus,
    User,
    UserRole,
)
from rahnu_gateway.domain.repositories import E, Repository, Storage, check_client_fields
from rahnu_gateway.infrastructure.database.models import (
    ClientRow,
    DocumentRow,
    GoldItemRow,
    GoldPriceRow,
    LoanGoldItemRow,
    LoanRow,
    NotificationRow,
    PaymentRow,
    UserRow,
)
from rahnu_gateway.utils.date_utils import utcnow

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _to_column_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _from_column_value(value: Any) -> Any:
    # SQLite drops tzinfo; everything is stored in UTC
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SqlRepository(Repository[E], Generic[E]):
    """Repository for one table, translating rows to domain dataclasses"""

    def __init__(
        self,
        storage: "SqlStorage",
        row_cls: Type,
        entity_cls: Type[E],
        enum_fields: Optional[Dict[str, Type[Enum]]] = None,
    ):
        self.storage = storage
        self.row_cls = row_cls
        self.entity_cls = entity_cls
        self.entity_name = entity_cls.__name__
        self.enum_fields = enum_fields or {}
        self.columns = [c.key for c in inspect(row_cls).column_attrs]

    @property
    def db(self) -> Session:
        return self.storage.db

    def to_domain(self, row) -> E:
        values = {name: _from_column_value(getattr(row, name)) for name in self.columns}
        for name, enum_cls in self.enum_fields.items():
            if values.get(name) is not None:
                values[name] = enum_cls(values[name])
        return self.entity_cls(**values)

    def _check_columns(self, names) -> None:
        unknown = sorted(set(names) - set(self.columns))
        if unknown:
            raise ValidationError(f"Unknown {self.entity_name} fields: {', '.join(unknown)}", unknown)

    def _read(self, query: Callable[[], T]) -> T:
        """Run a read, retrying transient connection failures outside a unit of work"""
        attempts = max(1, settings.read_retry_attempts)
        for attempt in range(1, attempts + 1):
            try:
                return query()
            except OperationalError as e:
                if attempt >= attempts or self.storage.in_unit_of_work:
                    raise StorageError(f"Database unavailable: {e.orig}") from e
                logger.warning(
                    "Retrying read after database error",
                    extra={"entity": self.entity_name, "attempt": attempt},
                )
                self.db.rollback()
            except SQLAlchemyError as e:
                raise StorageError(f"Database error reading {self.entity_name}: {e}") from e

    def _write(self, action: Callable[[], T]) -> T:
        """Run a write once; writes are never retried"""
        try:
            return action()
        except IntegrityError as e:
            raise ConflictError(f"{self.entity_name} violates a uniqueness or reference constraint") from e
        except SQLAlchemyError as e:
            raise StorageError(f"Database error writing {self.entity_name}: {e}") from e

    def _get_row(self, entity_id: int):
        row = self._read(lambda: self.db.get(self.row_cls, entity_id))
        if row is None:
            raise NotFoundError(self.entity_name, entity_id)
        return row

    def get(self, entity_id: int) -> E:
        return self.to_domain(self._get_row(entity_id))

    def list(self, **filters: Any) -> List[E]:
        self._check_columns(filters)
        criteria = {name: _to_column_value(value) for name, value in filters.items()}
        rows = self._read(
            lambda: self.db.query(self.row_cls).filter_by(**criteria).order_by(self.row_cls.id).all()
        )
        return [self.to_domain(row) for row in rows]

    def _assign(self, row, fields: Dict[str, Any]) -> None:
        for name, value in fields.items():
            setattr(row, name, _to_column_value(value))

    def create(self, fields: Dict[str, Any]) -> E:
        check_client_fields(fields)
        self._check_columns(fields)
        now = utcnow()

        def action():
            row = self.row_cls(created_at=now)
            if "updated_at" in self.columns:
                row.updated_at = now
            self._assign(row, fields)
            self.db.add(row)
            self.db.flush()  # Get ID without committing
            return row

        return self.to_domain(self._write(action))

    def update(self, entity_id: int, fields: Dict[str, Any]) -> E:
        check_client_fields(fields)
        self._check_columns(fields)
        row = self._get_row(entity_id)

        def action():
            self._assign(row, fields)
            if "updated_at" in self.columns:
                row.updated_at = utcnow()
            self.db.flush()
            return row

        return self.to_domain(self._write(action))


class LoanSqlRepository(SqlRepository[Loan]):
    """Loans carry their ordered gold item ids in a link table"""

    def __init__(self, storage: "SqlStorage"):
        super().__init__(
            storage,
            LoanRow,
            Loan,
            enum_fields={"status": LoanStatus, "payment_frequency": PaymentFrequency},
        )

    def to_domain(self, row: LoanRow) -> Loan:
        loan = super().to_domain(row)
        loan.gold_item_ids = [link.gold_item_id for link in row.gold_item_links]
        return loan

    def _check_columns(self, names) -> None:
        super()._check_columns(set(names) - {"gold_item_ids"})

    def list(self, **filters: Any) -> List[Loan]:
        if "gold_item_ids" in filters:
            raise ValidationError("Loans cannot be filtered by gold_item_ids", ["gold_item_ids"])
        return super().list(**filters)

    def _assign(self, row: LoanRow, fields: Dict[str, Any]) -> None:
        fields = dict(fields)
        gold_item_ids: Optional[Sequence[int]] = fields.pop("gold_item_ids", None)
        super()._assign(row, fields)
        if gold_item_ids is not None:
            row.gold_item_links = [
                LoanGoldItemRow(gold_item_id=item_id, position=position)
                for position, item_id in enumerate(gold_item_ids)
            ]


class SqlStorage(Storage):
    """Unit of work over one SQLAlchemy session"""

    def __init__(self, db: Session):
        self.db = db
        self._depth = 0

        self.users = SqlRepository(self, UserRow, User, enum_fields={"role": UserRole})
        self.clients = SqlRepository(self, ClientRow, Client)
        self.gold_items = SqlRepository(self, GoldItemRow, GoldItem)
        self.loans = LoanSqlRepository(self)
        self.payments = SqlRepository(self, PaymentRow, Payment, enum_fields={"status": PaymentStatus})
        self.documents = SqlRepository(self, DocumentRow, Document, enum_fields={"status": DocumentStatus})
        self.notifications = SqlRepository(
            self, NotificationRow, Notification, enum_fields={"status": NotificationStatus}
        )
        self.gold_prices = SqlRepository(self, GoldPriceRow, GoldPriceQuote)

    @property
    def in_unit_of_work(self) -> bool:
        return self._depth > 0

    def begin(self) -> None:
        self._depth += 1

    def commit(self) -> None:
        if self._depth > 0:
            self._depth -= 1
        if self._depth == 0:
            try:
                self.db.commit()
            except IntegrityError as e:
                self.db.rollback()
                raise ConflictError("Commit violates a uniqueness or reference constraint") from e
            except SQLAlchemyError as e:
                self.db.rollback()
                raise StorageError(f"Database commit failed: {e}") from e

    def rollback(self) -> None:
        if self._depth > 0:
            self._depth -= 1
        self.db.rollback()
