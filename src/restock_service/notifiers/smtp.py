"""SMTP notifier."""

import asyncio
import smtplib
from email.message import EmailMessage
from email.utils import formataddr

import structlog

from restock_service.config import Settings
from restock_service.exceptions import NotConnectedError
from restock_service.models import InventoryEvent, StockRequest
from restock_service.services.rendering import render_back_in_stock_email

logger = structlog.get_logger()


class SmtpNotifier:
    """Sends back-in-stock emails through an SMTP relay."""

    def __init__(self, settings: Settings):
        self._settings = settings

    async def send(self, request: StockRequest, event: InventoryEvent) -> None:
        """
        Render and send the notification for one request.

        Raises:
            NotConnectedError: No SMTP host is configured or the server is unreachable.
            smtplib.SMTPException: The server rejected the message.
        """
        if not self._settings.smtp_configured:
            raise NotConnectedError("SMTP host not configured")

        message = self._build_message(request, event)
        await asyncio.to_thread(self._send_sync, message)
        logger.info("Back in stock email sent", to_email=request.email, request_id=request.id)

    def _build_message(self, request: StockRequest, event: InventoryEvent) -> EmailMessage:
        rendered = render_back_in_stock_email(
            request,
            event,
            store_url=self._settings.store_url,
            store_name=self._settings.store_name,
        )
        message = EmailMessage()
        message["Subject"] = rendered.subject
        message["From"] = self._formatted_from_address
        message["To"] = request.email
        message.set_content(rendered.text)
        message.add_alternative(rendered.html, subtype="html")
        return message

    @property
    def _formatted_from_address(self) -> str:
        from_email = self._settings.email_from_address or self._settings.smtp_username
        return formataddr((self._settings.email_from_name, from_email))

    def _send_sync(self, message: EmailMessage) -> None:
        settings = self._settings
        host = settings.smtp_host
        port = settings.smtp_port or (465 if settings.smtp_use_ssl else 587)

        try:
            if settings.smtp_use_ssl:
                smtp = smtplib.SMTP_SSL(host=host, port=port, timeout=settings.smtp_timeout)
            else:
                smtp = smtplib.SMTP(host=host, port=port, timeout=settings.smtp_timeout)
        except (OSError, smtplib.SMTPConnectError) as exc:
            raise NotConnectedError(f"Cannot reach SMTP server {host}:{port}: {exc}") from exc

        try:
            if settings.smtp_use_tls and not settings.smtp_use_ssl:
                smtp.starttls()
            if settings.smtp_username and settings.smtp_password:
                smtp.login(settings.smtp_username, settings.smtp_password)
            smtp.send_message(message)
        finally:
            try:
                smtp.quit()
            except (smtplib.SMTPException, OSError):
                smtp.close()
