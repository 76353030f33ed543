"""Asynchronous delivery of back-in-stock notifications."""

import asyncio
from collections import deque
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog

from restock_service.models import DeliveryOutcome, InventoryEvent, StockRequest

if TYPE_CHECKING:
    from restock_service.notifiers import Notifier

logger = structlog.get_logger()


class NotificationDispatcher:
    """
    Sends notifications for matched requests in background tasks.

    A delivery failure is recorded as a failed ``DeliveryOutcome`` and never
    reverts the request's notified state: a matched request is consumed
    whether or not the email arrives, and no retry is attempted.
    """

    def __init__(
        self,
        notifier: "Notifier",
        max_concurrent_deliveries: int = 10,
        history_size: int = 500,
    ):
        self.notifier = notifier
        self._semaphore = asyncio.Semaphore(max_concurrent_deliveries)
        self._history: deque[DeliveryOutcome] = deque(maxlen=history_size)
        self._tasks: set[asyncio.Task] = set()

    def dispatch(
        self, requests: Iterable[StockRequest], event: InventoryEvent
    ) -> "asyncio.Task[list[DeliveryOutcome]]":
        """
        Schedule delivery for matched requests and return immediately.

        Must be called from a running event loop.

        Returns:
            asyncio.Task: Resolves to one outcome per request
        """
        task = asyncio.create_task(self.deliver(list(requests), event))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def deliver(
        self, requests: list[StockRequest], event: InventoryEvent
    ) -> list[DeliveryOutcome]:
        """Invoke the notifier for each request and collect the outcomes."""
        if not requests:
            return []
        outcomes = await asyncio.gather(*(self._deliver_one(r, event) for r in requests))
        sent = sum(1 for o in outcomes if o.sent)
        logger.info(
            "Back in stock notifications dispatched",
            variant_id=event.variant_id,
            sent=sent,
            failed=len(outcomes) - sent,
        )
        return list(outcomes)

    async def _deliver_one(self, request: StockRequest, event: InventoryEvent) -> DeliveryOutcome:
        error: str | None = None
        async with self._semaphore:
            try:
                await self.notifier.send(request, event)
            except Exception as e:
                error = f"{type(e).__name__}: {e}"
                logger.error(
                    "Notification delivery failed",
                    request_id=request.id,
                    variant_id=request.variant_id,
                    to_email=request.email,
                    error=error,
                )

        outcome = DeliveryOutcome(
            request_id=request.id,
            variant_id=request.variant_id,
            email=request.email,
            sent=error is None,
            attempted_at=datetime.now(timezone.utc),
            error=error,
        )
        self._history.append(outcome)
        return outcome

    def recent_outcomes(self, limit: int = 50) -> list[DeliveryOutcome]:
        """Most recent delivery outcomes, newest last."""
        if limit <= 0:
            return []
        return list(self._history)[-limit:]

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for every scheduled delivery to finish."""
        if not self._tasks:
            return
        logger.info("Waiting for in-flight notifications", tasks=len(self._tasks))
        await asyncio.gather(*list(self._tasks), return_exceptions=True)
