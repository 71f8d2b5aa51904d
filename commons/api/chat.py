"""Chat endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from commons.api.auth import get_caller_uid, get_current_viewer, resolve_author
from commons.api.errors import http_error
from commons.core.config import Settings, get_settings
from commons.core.errors import ServiceError
from commons.core.store import RecordStore, get_store
from commons.schemas.content import ChatCreateRequest, ChatMessage, DeletedResponse
from commons.schemas.users import UserRecord
from commons.services import chat

router = APIRouter()


@router.get("", response_model=list[ChatMessage])
def get_chat(store: Annotated[RecordStore, Depends(get_store)]) -> list[ChatMessage]:
    try:
        return chat.list_messages(store)
    except ServiceError as e:
        raise http_error(e) from e


@router.post("", response_model=ChatMessage)
def post_chat(
    body: ChatCreateRequest,
    store: Annotated[RecordStore, Depends(get_store)],
    settings: Annotated[Settings, Depends(get_settings)],
    caller_uid: Annotated[str | None, Depends(get_caller_uid)],
) -> ChatMessage:
    viewer = resolve_author(store, settings, caller_uid, body.uid)
    try:
        return chat.send_message(store, viewer, body.msg)
    except ServiceError as e:
        raise http_error(e) from e


@router.delete("/{message_id}", response_model=DeletedResponse)
def delete_chat(
    message_id: str,
    store: Annotated[RecordStore, Depends(get_store)],
    viewer: Annotated[UserRecord, Depends(get_current_viewer)],
) -> DeletedResponse:
    """Delete a message (admin only)."""
    try:
        chat.delete_message(store, viewer, message_id)
    except ServiceError as e:
        raise http_error(e) from e
    return DeletedResponse(deleted=message_id)
