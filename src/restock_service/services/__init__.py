"""Business logic services."""

from restock_service.services.matching_engine import MatchingEngine
from restock_service.services.notification_dispatcher import NotificationDispatcher
from restock_service.services.request_store import InMemoryRequestStore, RequestStore
from restock_service.services.restock import RestockService

__all__ = [
    "InMemoryRequestStore",
    "MatchingEngine",
    "NotificationDispatcher",
    "RequestStore",
    "RestockService",
]
