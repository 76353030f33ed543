"""Matching of inventory events to pending stock requests."""

import structlog

from restock_service.models import InventoryEvent, StockRequest
from restock_service.services.request_store import RequestStore

logger = structlog.get_logger()


class MatchingEngine:
    """Selects pending requests for a restocked variant and marks them notified.

    Selection and transition run inside one store critical section, so a
    request id is returned by at most one ``match`` call over the lifetime of
    the store, however many times the same event is delivered.
    """

    def __init__(self, store: RequestStore):
        self.store = store

    def match(self, event: InventoryEvent) -> list[StockRequest]:
        """
        Claim every pending request for the event's variant.

        Args:
            event: Inventory change for a single variant

        Returns:
            list: Requests transitioned to notified by this call, ordered by id.
                  Empty when the quantity is not positive or nothing is pending.
        """
        if not event.in_stock:
            logger.debug(
                "Inventory event ignored, variant not in stock",
                variant_id=event.variant_id,
                quantity=event.quantity,
            )
            return []

        with self.store.locked():
            pending = self.store.find_pending_by_variant(event.variant_id)
            matched = self.store.mark_notified(r.id for r in pending)

        logger.info(
            "Matched pending stock requests",
            variant_id=event.variant_id,
            quantity=event.quantity,
            matched=len(matched),
        )
        return matched
