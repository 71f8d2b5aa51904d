"""Admin console endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends

from commons.api.auth import get_current_viewer
from commons.api.errors import http_error
from commons.core.errors import ServiceError
from commons.core.store import RecordStore, get_store
from commons.schemas.admin import AdminConsole
from commons.schemas.users import UserRecord
from commons.services.moderation import load_console

router = APIRouter()


@router.get("/console", response_model=AdminConsole)
def get_console(
    store: Annotated[RecordStore, Depends(get_store)],
    viewer: Annotated[UserRecord, Depends(get_current_viewer)],
) -> AdminConsole:
    """Roster, service requests, posts and chat for moderation (admin only, 403 otherwise)."""
    try:
        return load_console(store, viewer)
    except ServiceError as e:
        raise http_error(e) from e
