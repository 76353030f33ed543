"""Domain models for stock requests, inventory events and deliveries."""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class StockRequest:
    """A customer's registered interest in a specific product variant.

    Instances are immutable snapshots. The store swaps in a new instance
    when the request moves from pending to notified.
    """

    id: int
    variant_id: str
    email: str
    created_at: datetime
    product_id: str | None = None
    product_title: str | None = None
    option_label: str | None = None
    customer_name: str | None = None
    notified_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return self.notified_at is None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["created_at"] = self.created_at.isoformat()
        data["notified_at"] = self.notified_at.isoformat() if self.notified_at else None
        data["notified"] = not self.is_pending
        return data


@dataclass(frozen=True)
class InventoryEvent:
    """A report that a variant's available quantity changed."""

    variant_id: str
    quantity: int
    payload: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def in_stock(self) -> bool:
        return self.quantity > 0


@dataclass(frozen=True)
class DeliveryOutcome:
    """Result of one notifier invocation for one matched request."""

    request_id: int
    variant_id: str
    email: str
    sent: bool
    attempted_at: datetime
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["attempted_at"] = self.attempted_at.isoformat()
        return data


@dataclass(frozen=True)
class StoreStats:
    """Point-in-time request counts."""

    total: int = 0
    pending: int = 0
    notified: int = 0


def normalize_id(value: Any) -> str | None:
    """Normalize an external identifier to its canonical string form.

    Storefront forms and webhooks send variant ids as either numbers or
    strings; both map to the same string. Blank values map to ``None``.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None
