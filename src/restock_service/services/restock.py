"""Restock workflow: request registration and inventory event handling."""

import time
from collections.abc import Mapping
from typing import Any

import structlog

from restock_service.models import DeliveryOutcome, InventoryEvent, StockRequest, StoreStats
from restock_service.services.matching_engine import MatchingEngine
from restock_service.services.notification_dispatcher import NotificationDispatcher
from restock_service.services.request_store import RequestStore

logger = structlog.get_logger()


class RestockService:
    """Ties the request store, matching engine and dispatcher together."""

    def __init__(
        self,
        store: RequestStore,
        engine: MatchingEngine,
        dispatcher: NotificationDispatcher,
    ):
        self.store = store
        self.engine = engine
        self.dispatcher = dispatcher
        self._started_at = time.monotonic()

    def register(self, fields: Mapping[str, Any]) -> StockRequest:
        """Store a new stock request. Raises ``ValidationError`` on bad input."""
        request = self.store.create(fields)
        logger.info(
            "New stock request",
            request_id=request.id,
            variant_id=request.variant_id,
            product_id=request.product_id,
        )
        return request

    def handle_inventory_event(self, event: InventoryEvent) -> list[StockRequest]:
        """
        Match an inventory event and schedule notifications.

        Matching completes before this returns; email delivery continues in
        the background so the webhook can be acknowledged immediately.
        """
        logger.info(
            "Inventory event received",
            variant_id=event.variant_id,
            quantity=event.quantity,
        )
        matched = self.engine.match(event)
        if matched:
            self.dispatcher.dispatch(matched, event)
        return matched

    def stats(self) -> StoreStats:
        return self.store.stats()

    def list_requests(self) -> list[StockRequest]:
        return self.store.list_all()

    def recent_deliveries(self, limit: int = 50) -> list[DeliveryOutcome]:
        return self.dispatcher.recent_outcomes(limit)

    @property
    def uptime_seconds(self) -> float:
        return time.monotonic() - self._started_at
