"""Health check endpoint with record store connectivity check."""

from typing import Annotated

from fastapi import APIRouter, Depends

from commons.core.config import Settings, get_settings
from commons.core.errors import NotConfiguredError
from commons.core.store import get_store
from commons.schemas.health import HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def get_health(settings: Annotated[Settings, Depends(get_settings)]) -> HealthResponse:
    """
    Return service health status and record store connectivity.
    Used by load balancers and monitoring.
    """
    try:
        store_status = "connected" if get_store().ping() else "disconnected"
    except NotConfiguredError:
        store_status = "unconfigured"

    return HealthResponse(
        status="ok",
        environment=settings.APP_ENV,
        store=store_status,
        store_backend=settings.RECORD_STORE_BACKEND,
    )
