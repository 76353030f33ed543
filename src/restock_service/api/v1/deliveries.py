"""Delivery outcome endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from restock_service.api.dependencies import get_restock_service
from restock_service.services.restock import RestockService

router = APIRouter()


class DeliveryOutcomeResponse(BaseModel):
    """Result of one notification attempt."""

    request_id: int
    variant_id: str
    email: str
    sent: bool
    attempted_at: str
    error: str | None


@router.get("", response_model=list[DeliveryOutcomeResponse])
async def list_deliveries(
    limit: Annotated[int, Query(ge=1, le=500)] = 50,
    service: RestockService = Depends(get_restock_service),
) -> list[DeliveryOutcomeResponse]:
    """
    Recent notification attempts, newest last.

    Failed deliveries are not retried; the request stays notified.
    """
    return [
        DeliveryOutcomeResponse(**outcome.to_dict())
        for outcome in service.recent_deliveries(limit)
    ]
