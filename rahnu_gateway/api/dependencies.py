"""Dependency injection for FastAPI endpoints"""

from typing import Iterator

from fastapi import Depends, Request

from rahnu_gateway.domain.repositories import Storage
from rahnu_gateway.infrastructure.clients.messaging import MessagingClient
from rahnu_gateway.infrastructure.database.repositories import SqlStorage
from rahnu_gateway.infrastructure.database.session import get_db
from rahnu_gateway.services.common import Clock
from rahnu_gateway.services.container import Services
from rahnu_gateway.utils.date_utils import utcnow


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_storage(request: Request) -> Iterator[Storage]:
    """Process-wide in-memory store, or one SQL unit of work per request"""
    memory_storage = getattr(request.app.state, "memory_storage", None)
    if memory_storage is not None:
        yield memory_storage
        return

    for db in get_db():
        yield SqlStorage(db)


def get_clock() -> Clock:
    return utcnow


def get_services(
    storage: Storage = Depends(get_storage),
    clock: Clock = Depends(get_clock),
) -> Services:
    return Services(storage, clock)


def get_messaging_client() -> MessagingClient:
    """Provide messaging gateway client instance"""
    return MessagingClient()
