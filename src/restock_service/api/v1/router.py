"""API v1 router that aggregates all endpoint routers."""

from fastapi import APIRouter

from restock_service.api.v1 import (
    deliveries,
    health,
    stock_requests,
    webhooks,
)

api_router = APIRouter()

# Include all routers
api_router.include_router(
    health.router,
    tags=["Health"],
)

api_router.include_router(
    stock_requests.router,
    prefix="/stock-requests",
    tags=["Stock Requests"],
)

api_router.include_router(
    webhooks.router,
    prefix="/webhooks",
    tags=["Webhooks"],
)

api_router.include_router(
    deliveries.router,
    prefix="/deliveries",
    tags=["Deliveries"],
)

# Paths used by the existing storefront snippet and webhook subscription
legacy_router = APIRouter(tags=["Legacy"], include_in_schema=False)
legacy_router.add_api_route("/", health.legacy_status, methods=["GET"])
legacy_router.add_api_route("/requests", stock_requests.list_stock_requests, methods=["GET"])
legacy_router.add_api_route(
    "/api/stock-request", stock_requests.create_stock_request, methods=["POST"]
)
legacy_router.add_api_route("/webhook/inventory", webhooks.inventory_webhook, methods=["POST"])
