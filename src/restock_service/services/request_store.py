"""Stock request storage.

The store exclusively owns the collection of ``StockRequest`` records. Other
components only see immutable snapshots returned by its methods.
"""

import itertools
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

import structlog

from restock_service.exceptions import ValidationError
from restock_service.models import StockRequest, StoreStats, normalize_id

logger = structlog.get_logger()

OPTIONAL_TEXT_FIELDS = ("product_title", "option_label", "customer_name")


class RequestStore(ABC):
    """Interface for stock request storage backends."""

    @abstractmethod
    def create(self, fields: Mapping[str, Any]) -> StockRequest:
        """Validate and store a new pending request."""

    @abstractmethod
    def get(self, request_id: int) -> StockRequest | None:
        """Return a single request by id."""

    @abstractmethod
    def find_pending_by_variant(self, variant_id: str) -> list[StockRequest]:
        """Return pending requests for a variant, ordered by id."""

    @abstractmethod
    def mark_notified(self, ids: Iterable[int]) -> list[StockRequest]:
        """Transition pending ids to notified and return the transitioned records."""

    @abstractmethod
    def list_all(self) -> list[StockRequest]:
        """Return every stored request, ordered by id."""

    @abstractmethod
    def stats(self) -> StoreStats:
        """Return point-in-time counts."""

    @abstractmethod
    def locked(self) -> Any:
        """Context manager holding the store's exclusive lock.

        Operations performed inside the block are not interleaved with
        any other store operation.
        """


def build_request_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Validate raw ingest fields and return normalized constructor kwargs.

    Raises:
        ValidationError: if ``email`` or ``variant_id`` is missing or blank.
    """
    email = fields.get("email")
    email = email.strip() if isinstance(email, str) else ""
    if not email:
        raise ValidationError("email is required", field="email")

    variant_id = normalize_id(fields.get("variant_id"))
    if variant_id is None:
        raise ValidationError("variant_id is required", field="variant_id")

    normalized: dict[str, Any] = {
        "variant_id": variant_id,
        "email": email,
        "product_id": normalize_id(fields.get("product_id")),
    }
    for name in OPTIONAL_TEXT_FIELDS:
        value = fields.get(name)
        normalized[name] = str(value).strip() or None if value is not None else None
    return normalized


class InMemoryRequestStore(RequestStore):
    """Volatile, thread-safe request store.

    A single reentrant lock guards every read and write. ``locked()`` exposes
    the same lock so callers can compose several operations into one
    critical section.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._requests: dict[int, StockRequest] = {}
        self._ids = itertools.count(1)

    @contextmanager
    def locked(self) -> Iterator[None]:
        with self._lock:
            yield

    def create(self, fields: Mapping[str, Any]) -> StockRequest:
        kwargs = build_request_fields(fields)
        with self._lock:
            request = StockRequest(
                id=next(self._ids),
                created_at=datetime.now(timezone.utc),
                **kwargs,
            )
            self._requests[request.id] = request
        return request

    def get(self, request_id: int) -> StockRequest | None:
        with self._lock:
            return self._requests.get(request_id)

    def find_pending_by_variant(self, variant_id: str) -> list[StockRequest]:
        with self._lock:
            return [
                r for r in self._requests.values()
                if r.variant_id == variant_id and r.is_pending
            ]

    def mark_notified(self, ids: Iterable[int]) -> list[StockRequest]:
        transitioned: list[StockRequest] = []
        with self._lock:
            now = datetime.now(timezone.utc)
            for request_id in sorted(set(ids)):
                current = self._requests.get(request_id)
                if current is None or not current.is_pending:
                    continue
                updated = replace(current, notified_at=now)
                self._requests[request_id] = updated
                transitioned.append(updated)
        return transitioned

    def list_all(self) -> list[StockRequest]:
        with self._lock:
            return list(self._requests.values())

    def stats(self) -> StoreStats:
        with self._lock:
            total = len(self._requests)
            pending = sum(1 for r in self._requests.values() if r.is_pending)
        return StoreStats(total=total, pending=pending, notified=total - pending)
