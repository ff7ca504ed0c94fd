"""Domain-specific exceptions"""

from typing import Iterable, Optional


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ValidationError(DomainException):
    """Input is malformed or violates a business constraint"""

    def __init__(self, message: str, fields: Optional[Iterable[str]] = None):
        super().__init__(message)
        self.fields = list(fields or [])


class NotFoundError(DomainException):
    """Referenced entity does not exist"""

    def __init__(self, entity: str, entity_id: object):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class InvalidTransitionError(DomainException):
    """Requested status change is not permitted from the current state"""

    def __init__(self, entity: str, current: str, target: str):
        super().__init__(f"{entity} cannot move from '{current}' to '{target}'")
        self.current = current
        self.target = target


class AlreadyPaidError(InvalidTransitionError):
    """Payment has already been recorded"""

    def __init__(self, payment_id: int):
        super().__init__("Payment", "paid", "paid")
        self.args = (f"Payment {payment_id} is already paid",)


class ConflictError(DomainException):
    """Unique constraint violated, e.g. duplicate contract number or username"""

    pass


class StorageError(DomainException):
    """Backing store failed; the operation may be retried by the caller"""

    pass


class MessagingGatewayError(DomainException):
    """Messaging gateway rejected or could not deliver a reminder"""

    pass
