"""Mock notifier for testing and development."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from uuid import uuid4

import structlog

from restock_service.config import Settings
from restock_service.models import InventoryEvent, StockRequest
from restock_service.services.rendering import render_back_in_stock_email

logger = structlog.get_logger()


class MockNotifier:
    """
    Notifier that records emails instead of sending them.

    Stores rendered emails to the filesystem for inspection. Set
    ``EMAIL_SERVICE=smtp`` to deliver real mail.
    """

    def __init__(self, settings: Settings, storage_path: str | None = None):
        """
        Initialize the mock notifier.

        Args:
            settings: Application settings (sender identity, store details)
            storage_path: Directory to store mock emails.
                         Defaults to settings.mock_email_storage_path
        """
        self.settings = settings
        self.storage_path = Path(storage_path or settings.mock_email_storage_path)
        self.storage_path.mkdir(parents=True, exist_ok=True)
        self.sent_emails: list[dict[str, Any]] = []

    async def send(self, request: StockRequest, event: InventoryEvent) -> None:
        """Render the back-in-stock email and store it as JSON."""
        rendered = render_back_in_stock_email(
            request,
            event,
            store_url=self.settings.store_url,
            store_name=self.settings.store_name,
        )
        message_id = str(uuid4())
        timestamp = datetime.now(timezone.utc)

        email_record = {
            "message_id": message_id,
            "request_id": request.id,
            "variant_id": request.variant_id,
            "to_email": request.email,
            "from_email": self.settings.email_from_address,
            "from_name": self.settings.email_from_name,
            "subject": rendered.subject,
            "html_content": rendered.html,
            "text_content": rendered.text,
            "sent_at": timestamp.isoformat(),
        }

        self.sent_emails.append(email_record)

        filename = f"{timestamp.strftime('%Y%m%d_%H%M%S')}_{message_id}.json"
        filepath = self.storage_path / filename
        with open(filepath, "w") as f:
            json.dump(email_record, f, indent=2)

        logger.info(
            "Mock email stored",
            message_id=message_id,
            to_email=request.email,
            subject=rendered.subject,
            stored_at=str(filepath),
        )

    def get_sent_emails(
        self,
        limit: int = 50,
        to_email: str | None = None,
    ) -> list[dict[str, Any]]:
        """Return recently recorded emails, optionally filtered by recipient."""
        emails = self.sent_emails
        if to_email:
            emails = [e for e in emails if e["to_email"] == to_email]
        return emails[-limit:]

    def clear_stored_emails(self) -> int:
        """
        Delete all stored mock emails.

        Returns:
            int: Number of files deleted
        """
        count = 0
        for filepath in self.storage_path.glob("*.json"):
            filepath.unlink()
            count += 1

        self.sent_emails.clear()
        logger.info("Cleared mock emails", count=count)

        return count
