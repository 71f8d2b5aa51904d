"""Service requests: users open them as pending; admins approve or complete them."""

import logging

from pydantic import ValidationError

from commons.core.errors import NotFoundError
from commons.core.store import RecordStore, now_ms
from commons.schemas.content import RequestStatus, ServiceRequest
from commons.schemas.users import UserRecord
from commons.services.access import Action, ensure_allowed

logger = logging.getLogger(__name__)

REQUESTS = "requests"


def _parse_request(key: str, data: dict) -> ServiceRequest | None:
    try:
        return ServiceRequest.model_validate({**data, "id": key})
    except ValidationError:
        logger.warning("Skipping malformed service request record", extra={"request_id": key})
        return None


def _newest_first(items: dict[str, dict]) -> list[ServiceRequest]:
    parsed = [_parse_request(key, data) for key, data in items.items()]
    return sorted(
        (r for r in parsed if r is not None),
        key=lambda r: (r.timestamp, r.id),
        reverse=True,
    )


def list_all_requests(store: RecordStore) -> list[ServiceRequest]:
    return _newest_first(store.list(REQUESTS))


def list_requests(store: RecordStore, viewer: UserRecord) -> list[ServiceRequest]:
    """Admins see every request; other users see their own."""
    if viewer.is_admin:
        return list_all_requests(store)
    return _newest_first(store.query_equal(REQUESTS, "uid", viewer.uid))


def create_request(
    store: RecordStore,
    viewer: UserRecord | None,
    type_: str,
    desc: str,
    *,
    ban_blocks_requests: bool = False,
) -> ServiceRequest:
    """Open a pending request for the viewer. The ban flag is checked only if ban_blocks_requests."""
    ensure_allowed(viewer, Action.CREATE_REQUEST, ban_blocks_requests=ban_blocks_requests)
    record = {
        "uid": viewer.uid,
        "type": type_,
        "desc": desc,
        "status": "pending",
        "timestamp": now_ms(),
    }
    request_id = store.push(REQUESTS, record)
    return ServiceRequest(id=request_id, **record)


def update_status(
    store: RecordStore,
    viewer: UserRecord | None,
    request_id: str,
    status: RequestStatus,
) -> ServiceRequest:
    """Set a request's status (admin only). Any status may follow any other."""
    ensure_allowed(viewer, Action.CHANGE_REQUEST_STATUS)
    data = store.get(REQUESTS, request_id)
    if data is None:
        raise NotFoundError("Service request not found")
    store.update(REQUESTS, request_id, {"status": status})
    logger.info(
        "Service request status changed",
        extra={"request_id": request_id, "status": status, "by": viewer.uid},
    )
    return ServiceRequest.model_validate({**data, "id": request_id, "status": status})
