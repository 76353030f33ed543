"""FastAPI dependencies."""

from fastapi import Request

from restock_service.config import Settings
from restock_service.services.restock import RestockService


def get_restock_service(request: Request) -> RestockService:
    """Return the service instance created by the app factory."""
    return request.app.state.restock_service


def get_app_settings(request: Request) -> Settings:
    """Return the settings the app was created with."""
    return request.app.state.settings
