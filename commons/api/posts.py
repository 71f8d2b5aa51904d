"""Feed endpoints: list newest first, create (ban-checked), delete by author or admin."""

from typing import Annotated

from fastapi import APIRouter, Depends

from commons.api.auth import get_caller_uid, get_current_viewer, resolve_author
from commons.api.errors import http_error
from commons.core.config import Settings, get_settings
from commons.core.errors import ServiceError
from commons.core.store import RecordStore, get_store
from commons.schemas.content import DeletedResponse, Post, PostCreateRequest
from commons.schemas.users import UserRecord
from commons.services import feed

router = APIRouter()


@router.get("", response_model=list[Post])
def get_posts(store: Annotated[RecordStore, Depends(get_store)]) -> list[Post]:
    """All posts, newest first."""
    try:
        return feed.list_posts(store)
    except ServiceError as e:
        raise http_error(e) from e


@router.post("", response_model=Post)
def post_post(
    body: PostCreateRequest,
    store: Annotated[RecordStore, Depends(get_store)],
    settings: Annotated[Settings, Depends(get_settings)],
    caller_uid: Annotated[str | None, Depends(get_caller_uid)],
) -> Post:
    """Create a post as the caller. 403 if the caller is banned or has no user record."""
    viewer = resolve_author(store, settings, caller_uid, body.uid)
    try:
        return feed.create_post(store, viewer, body.content)
    except ServiceError as e:
        raise http_error(e) from e


@router.delete("/{post_id}", response_model=DeletedResponse)
def delete_post(
    post_id: str,
    store: Annotated[RecordStore, Depends(get_store)],
    viewer: Annotated[UserRecord, Depends(get_current_viewer)],
) -> DeletedResponse:
    """Delete a post. Allowed for its author and for admins."""
    try:
        feed.delete_post(store, viewer, post_id)
    except ServiceError as e:
        raise http_error(e) from e
    return DeletedResponse(deleted=post_id)
