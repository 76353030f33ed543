"""Stock request API endpoints."""

from fastapi import APIRouter, Depends
from pydantic import AliasChoices, BaseModel, Field

from restock_service.api.dependencies import get_restock_service
from restock_service.models import StockRequest
from restock_service.services.restock import RestockService

router = APIRouter()


# =============================================================================
# Models
# =============================================================================


class StockRequestCreate(BaseModel):
    """Request model for registering interest in an out-of-stock variant."""

    email: str = Field(..., description="Customer email address")
    variant_id: str | int = Field(..., description="Variant the customer is waiting for")
    product_id: str | int = Field(..., description="Product the variant belongs to")
    product_title: str = Field(..., description="Product title shown in the email")
    customer_name: str | None = Field(
        None,
        validation_alias=AliasChoices("customer_name", "name"),
        description="Customer display name",
    )
    option_label: str | None = Field(
        None,
        validation_alias=AliasChoices("option_label", "option", "size"),
        description="Selected option, e.g. size or colour",
    )


class StockRequestCreated(BaseModel):
    """Response after registering a stock request."""

    success: bool
    id: int


class StockRequestResponse(BaseModel):
    """A stored stock request."""

    id: int
    variant_id: str
    email: str
    product_id: str | None
    product_title: str | None
    option_label: str | None
    customer_name: str | None
    created_at: str
    notified_at: str | None
    notified: bool

    @classmethod
    def from_domain(cls, request: StockRequest) -> "StockRequestResponse":
        return cls(**request.to_dict())


# =============================================================================
# Endpoints
# =============================================================================


@router.post("", response_model=StockRequestCreated)
async def create_stock_request(
    body: StockRequestCreate,
    service: RestockService = Depends(get_restock_service),
) -> StockRequestCreated:
    """
    Register a customer's interest in a variant.

    The customer is emailed once, the first time the variant is reported
    in stock after this call.
    """
    request = service.register(body.model_dump())
    return StockRequestCreated(success=True, id=request.id)


@router.get("", response_model=list[StockRequestResponse])
async def list_stock_requests(
    service: RestockService = Depends(get_restock_service),
) -> list[StockRequestResponse]:
    """List every stored stock request, pending and notified."""
    return [StockRequestResponse.from_domain(r) for r in service.list_requests()]
