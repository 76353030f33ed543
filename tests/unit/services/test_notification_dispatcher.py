"""Unit tests for the notification dispatcher."""

import asyncio

import pytest

from restock_service.exceptions import NotConnectedError
from restock_service.models import InventoryEvent, StockRequest
from restock_service.services.matching_engine import MatchingEngine
from restock_service.services.notification_dispatcher import NotificationDispatcher
from restock_service.services.request_store import InMemoryRequestStore

EVENT = InventoryEvent(variant_id="10", quantity=3)


class FailingForNotifier:
    """Raises for selected recipients, succeeds for everyone else."""

    def __init__(self, *failing: str):
        self.failing = set(failing)
        self.delivered: list[str] = []

    async def send(self, request: StockRequest, event: InventoryEvent) -> None:
        if request.email in self.failing:
            raise NotConnectedError("smtp down")
        self.delivered.append(request.email)


class GatedNotifier:
    """Blocks every send until the gate opens, tracking peak concurrency."""

    def __init__(self) -> None:
        self.gate = asyncio.Event()
        self.active = 0
        self.peak = 0

    async def send(self, request: StockRequest, event: InventoryEvent) -> None:
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            await self.gate.wait()
        finally:
            self.active -= 1


@pytest.fixture
def matched(store: InMemoryRequestStore, engine: MatchingEngine, request_fields) -> list[StockRequest]:
    for email in ("a@x.com", "b@x.com", "c@x.com"):
        store.create(request_fields(10, email))
    return engine.match(EVENT)


class TestDispatch:
    """Tests for background delivery."""

    @pytest.mark.asyncio
    async def test_sends_every_matched_request(
        self, dispatcher: NotificationDispatcher, notifier, matched: list[StockRequest]
    ) -> None:
        outcomes = await dispatcher.dispatch(matched, EVENT)

        assert sorted(notifier.emails) == ["a@x.com", "b@x.com", "c@x.com"]
        assert all(o.sent and o.error is None for o in outcomes)
        assert {o.request_id for o in outcomes} == {r.id for r in matched}

    @pytest.mark.asyncio
    async def test_empty_dispatch(self, dispatcher: NotificationDispatcher, notifier) -> None:
        assert await dispatcher.dispatch([], EVENT) == []
        assert notifier.sent == []

    @pytest.mark.asyncio
    async def test_returns_before_delivery_completes(self, matched: list[StockRequest]) -> None:
        notifier = GatedNotifier()
        dispatcher = NotificationDispatcher(notifier)

        task = dispatcher.dispatch(matched, EVENT)
        await asyncio.sleep(0)
        assert not task.done()
        assert dispatcher.in_flight == 1

        notifier.gate.set()
        outcomes = await task
        assert len(outcomes) == 3
        assert dispatcher.in_flight == 0

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(self, matched: list[StockRequest]) -> None:
        notifier = GatedNotifier()
        dispatcher = NotificationDispatcher(notifier, max_concurrent_deliveries=2)

        task = dispatcher.dispatch(matched, EVENT)
        for _ in range(5):
            await asyncio.sleep(0)
        assert notifier.active == 2

        notifier.gate.set()
        await task
        assert notifier.peak == 2

    @pytest.mark.asyncio
    async def test_drain_waits_for_in_flight(self, matched: list[StockRequest]) -> None:
        notifier = GatedNotifier()
        dispatcher = NotificationDispatcher(notifier)
        task = dispatcher.dispatch(matched, EVENT)

        asyncio.get_running_loop().call_later(0.01, notifier.gate.set)
        await dispatcher.drain()
        assert task.done()


class TestDeliveryFailures:
    """A failed send is recorded and never undoes the match."""

    @pytest.mark.asyncio
    async def test_failure_isolated_to_one_request(
        self, store: InMemoryRequestStore, matched: list[StockRequest]
    ) -> None:
        notifier = FailingForNotifier("b@x.com")
        dispatcher = NotificationDispatcher(notifier)

        outcomes = await dispatcher.dispatch(matched, EVENT)
        by_email = {o.email: o for o in outcomes}

        assert not by_email["b@x.com"].sent
        assert "NotConnectedError" in by_email["b@x.com"].error
        assert by_email["a@x.com"].sent
        assert by_email["c@x.com"].sent
        assert sorted(notifier.delivered) == ["a@x.com", "c@x.com"]

    @pytest.mark.asyncio
    async def test_failed_request_stays_notified(
        self,
        store: InMemoryRequestStore,
        engine: MatchingEngine,
        matched: list[StockRequest],
    ) -> None:
        dispatcher = NotificationDispatcher(FailingForNotifier("a@x.com", "b@x.com", "c@x.com"))
        outcomes = await dispatcher.dispatch(matched, EVENT)

        assert not any(o.sent for o in outcomes)
        assert store.stats().pending == 0
        assert engine.match(EVENT) == []

    @pytest.mark.asyncio
    async def test_history_records_outcomes(self, matched: list[StockRequest]) -> None:
        dispatcher = NotificationDispatcher(FailingForNotifier("a@x.com"), history_size=2)
        await dispatcher.dispatch(matched, EVENT)

        recent = dispatcher.recent_outcomes()
        assert len(recent) == 2
        assert len(dispatcher.recent_outcomes(limit=1)) == 1
        assert dispatcher.recent_outcomes(limit=0) == []
