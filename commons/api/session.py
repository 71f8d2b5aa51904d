"""Session endpoint: the caller's role/ban flags and landing screen."""

from typing import Annotated

from fastapi import APIRouter, Depends

from commons.api.auth import get_current_viewer
from commons.core.config import Settings, get_settings
from commons.schemas.session import ViewerState
from commons.schemas.users import UserRecord
from commons.services.access import viewer_state

router = APIRouter()


@router.get("", response_model=ViewerState)
def get_session(
    viewer: Annotated[UserRecord, Depends(get_current_viewer)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> ViewerState:
    """
    Derived view state for the signed-in caller. Clients open the admin console only when
    landing is "admin"; 401 sends them back to login.
    """
    return viewer_state(viewer, ban_blocks_requests=settings.BAN_BLOCKS_REQUESTS)
