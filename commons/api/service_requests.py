"""Service request endpoints: open, list (own, or all for admins), change status (admin)."""

from typing import Annotated

from fastapi import APIRouter, Depends

from commons.api.auth import get_caller_uid, get_current_viewer, resolve_author
from commons.api.errors import http_error
from commons.core.config import Settings, get_settings
from commons.core.errors import ServiceError
from commons.core.store import RecordStore, get_store
from commons.schemas.content import ServiceRequest, ServiceRequestCreate, StatusUpdateRequest
from commons.schemas.users import UserRecord
from commons.services import service_requests

router = APIRouter()


@router.get("", response_model=list[ServiceRequest])
def get_requests(
    store: Annotated[RecordStore, Depends(get_store)],
    viewer: Annotated[UserRecord, Depends(get_current_viewer)],
) -> list[ServiceRequest]:
    try:
        return service_requests.list_requests(store, viewer)
    except ServiceError as e:
        raise http_error(e) from e


@router.post("", response_model=ServiceRequest)
def post_request(
    body: ServiceRequestCreate,
    store: Annotated[RecordStore, Depends(get_store)],
    settings: Annotated[Settings, Depends(get_settings)],
    caller_uid: Annotated[str | None, Depends(get_caller_uid)],
) -> ServiceRequest:
    """Open a pending request. Banned users may do so unless BAN_BLOCKS_REQUESTS is set."""
    viewer = resolve_author(store, settings, caller_uid, body.uid)
    try:
        return service_requests.create_request(
            store,
            viewer,
            body.type,
            body.desc,
            ban_blocks_requests=settings.BAN_BLOCKS_REQUESTS,
        )
    except ServiceError as e:
        raise http_error(e) from e


@router.patch("/{request_id}/status", response_model=ServiceRequest)
def patch_request_status(
    request_id: str,
    body: StatusUpdateRequest,
    store: Annotated[RecordStore, Depends(get_store)],
    viewer: Annotated[UserRecord, Depends(get_current_viewer)],
) -> ServiceRequest:
    try:
        return service_requests.update_status(store, viewer, request_id, body.status)
    except ServiceError as e:
        raise http_error(e) from e
