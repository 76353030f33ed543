"""Inventory webhook endpoint."""

import math
from typing import Any

import structlog
from fastapi import APIRouter, Depends, Request

from restock_service.api.dependencies import get_restock_service
from restock_service.models import InventoryEvent, normalize_id
from restock_service.services.restock import RestockService

logger = structlog.get_logger()

router = APIRouter()

VARIANT_ID_KEYS = ("variant_id", "id")
QUANTITY_KEYS = ("quantity", "inventory_quantity", "available")


def _first_present(payload: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if payload.get(key) is not None:
            return payload[key]
    return None


def coerce_quantity(raw: Any) -> int | None:
    """
    Convert a webhook quantity to an int.

    Fractional values round up, so any quantity above zero counts as in
    stock. Non-numeric and non-finite values return None.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        try:
            raw = float(raw)
        except ValueError:
            return None
    if not isinstance(raw, float) or not math.isfinite(raw):
        return None
    return math.ceil(raw)


def parse_inventory_event(payload: Any) -> InventoryEvent | None:
    """
    Build an inventory event from a storefront webhook body.

    Accepts Shopify variant payloads (``id``/``inventory_quantity``) as well
    as ``variant_id``/``quantity``. Unrelated fields are kept on the event
    but otherwise ignored.

    Returns:
        InventoryEvent or None if the body has no usable variant id or quantity
    """
    if not isinstance(payload, dict):
        return None

    variant_id = normalize_id(_first_present(payload, VARIANT_ID_KEYS))
    quantity = coerce_quantity(_first_present(payload, QUANTITY_KEYS))
    if variant_id is None or quantity is None:
        return None

    return InventoryEvent(variant_id=variant_id, quantity=quantity, payload=payload)


@router.post("/inventory")
async def inventory_webhook(
    request: Request,
    service: RestockService = Depends(get_restock_service),
) -> dict[str, Any]:
    """
    Receive an inventory change from the storefront.

    Always acknowledged with 200 so the storefront does not retry; emails
    are sent in the background after matching.
    """
    try:
        payload = await request.json()
    except ValueError:
        payload = None

    event = parse_inventory_event(payload)
    if event is None:
        logger.warning("Ignoring unusable inventory webhook", payload=payload)
        return {"status": "OK", "matched": 0}

    matched = service.handle_inventory_event(event)
    return {"status": "OK", "matched": len(matched)}
