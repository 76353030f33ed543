"""Pytest configuration and fixtures."""

from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from restock_service.config import Settings
from restock_service.main import create_app
from restock_service.models import InventoryEvent, StockRequest
from restock_service.services import (
    InMemoryRequestStore,
    MatchingEngine,
    NotificationDispatcher,
)


class RecordingNotifier:
    """Notifier double that remembers every send."""

    def __init__(self) -> None:
        self.sent: list[tuple[StockRequest, InventoryEvent]] = []

    async def send(self, request: StockRequest, event: InventoryEvent) -> None:
        self.sent.append((request, event))

    @property
    def emails(self) -> list[str]:
        return [request.email for request, _ in self.sent]


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Get test settings with overrides."""
    return Settings(
        app_env="test",
        debug=True,
        store_url="shop.example.com",
        store_name="Example Store",
        email_service="mock",
        mock_email_storage_path=str(tmp_path / "emails"),
    )


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def store() -> InMemoryRequestStore:
    return InMemoryRequestStore()


@pytest.fixture
def engine(store: InMemoryRequestStore) -> MatchingEngine:
    return MatchingEngine(store)


@pytest.fixture
def dispatcher(notifier: RecordingNotifier) -> NotificationDispatcher:
    return NotificationDispatcher(notifier, max_concurrent_deliveries=4, history_size=100)


@pytest.fixture
def app(test_settings: Settings, notifier: RecordingNotifier) -> FastAPI:
    """Create test application."""
    return create_app(settings=test_settings, notifier=notifier)


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """Create test client with the application lifespan running."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def sample_request_data() -> dict[str, Any]:
    """Sample stock request body as sent by the storefront."""
    return {
        "email": "a@x.com",
        "variant_id": "10",
        "product_id": "1001",
        "product_title": "Linen Shirt",
        "customer_name": "Ada",
        "option_label": "M",
    }


def make_request_fields(variant_id: Any, email: str, **extra: Any) -> dict[str, Any]:
    return {"variant_id": variant_id, "email": email, "product_title": "Linen Shirt", **extra}


@pytest.fixture
def request_fields():
    """Factory for raw stock request fields."""
    return make_request_fields
