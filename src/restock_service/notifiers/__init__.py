"""Notification transports."""

from typing import Protocol

from restock_service.config import Settings
from restock_service.models import InventoryEvent, StockRequest
from restock_service.notifiers.mock import MockNotifier
from restock_service.notifiers.smtp import SmtpNotifier


class Notifier(Protocol):
    """Delivers a back-in-stock notification for one request.

    Implementations raise on failure; the dispatcher turns the exception
    into a failed delivery outcome.
    """

    async def send(self, request: StockRequest, event: InventoryEvent) -> None: ...


def build_notifier(settings: Settings) -> Notifier:
    """Create the notifier selected by ``settings.email_service``."""
    if settings.email_service == "smtp":
        return SmtpNotifier(settings)
    return MockNotifier(settings)


__all__ = [
    "MockNotifier",
    "Notifier",
    "SmtpNotifier",
    "build_notifier",
]
