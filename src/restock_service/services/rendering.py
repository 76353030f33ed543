"""Back-in-stock email content."""

from dataclasses import dataclass
from html import escape

from restock_service.models import InventoryEvent, StockRequest

DEFAULT_GREETING_NAME = "there"
DEFAULT_OPTION_LABEL = "Default"


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str
    text: str


def product_url(store_url: str, request: StockRequest) -> str | None:
    """Storefront link to the restocked variant, if the store URL is known."""
    if not store_url or not request.product_id:
        return None
    host = store_url.removeprefix("https://").removeprefix("http://").rstrip("/")
    return f"https://{host}/products/{request.product_id}?variant={request.variant_id}"


def render_back_in_stock_email(
    request: StockRequest,
    event: InventoryEvent,
    store_url: str = "",
    store_name: str = "",
) -> RenderedEmail:
    """
    Build the notification sent when a requested variant is restocked.

    Args:
        request: The matched stock request
        event: Inventory event that triggered the match
        store_url: Storefront host used for the product link
        store_name: Signature shown in the footer

    Returns:
        RenderedEmail: Subject plus HTML and plain text bodies
    """
    title = request.product_title or "Your item"
    name = request.customer_name or DEFAULT_GREETING_NAME
    # Shopify variant webhooks carry the option name as "title"
    option = request.option_label or event.payload.get("title") or DEFAULT_OPTION_LABEL
    link = product_url(store_url, request)

    subject = f"{title} is back in stock"

    lines = [
        f"Hi {name},",
        "",
        "Good news! The item you asked about is available again:",
        f"{title} ({option})",
    ]
    if link:
        lines.append(f"Buy now: {link}")
    lines += ["", "Stock is limited, so don't miss out."]
    if store_name:
        lines += ["", store_name]

    html_parts = [
        f"<p>Hi <strong>{escape(name)}</strong>,</p>",
        "<p>Good news! The item you asked about is available again:</p>",
        f"<h3>{escape(title)}</h3>",
        f"<p><strong>Option:</strong> {escape(option)}</p>",
    ]
    if link:
        html_parts.append(f'<p><a href="{escape(link)}">Buy now</a></p>')
    html_parts.append("<p><strong>Stock is limited</strong>, so don't miss out.</p>")
    html_parts.append(
        "<p><small>You are receiving this email because you asked to be "
        f"notified when this item was restocked.<br>{escape(store_name)}</small></p>"
    )

    return RenderedEmail(subject=subject, html="".join(html_parts), text="\n".join(lines))
