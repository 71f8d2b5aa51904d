"""User endpoints: roster, own profile, and admin role/ban changes."""

from typing import Annotated

from fastapi import APIRouter, Depends

from commons.api.auth import get_current_viewer
from commons.api.errors import http_error
from commons.core.errors import ServiceError
from commons.core.store import RecordStore, get_store
from commons.schemas.users import BanUpdateRequest, ProfileUpdateRequest, RoleUpdateRequest, UserRecord
from commons.services import users

router = APIRouter()


@router.get("", response_model=list[UserRecord])
def get_users(store: Annotated[RecordStore, Depends(get_store)]) -> list[UserRecord]:
    """All user records. Not access-checked, matching existing clients."""
    try:
        return users.list_users(store)
    except ServiceError as e:
        raise http_error(e) from e


@router.get("/me", response_model=UserRecord)
def get_me(viewer: Annotated[UserRecord, Depends(get_current_viewer)]) -> UserRecord:
    return viewer


@router.patch("/me", response_model=UserRecord)
def patch_me(
    body: ProfileUpdateRequest,
    store: Annotated[RecordStore, Depends(get_store)],
    viewer: Annotated[UserRecord, Depends(get_current_viewer)],
) -> UserRecord:
    """Update name and/or avatar. Email, role and ban state are rejected (422)."""
    try:
        return users.update_profile(store, viewer, body)
    except ServiceError as e:
        raise http_error(e) from e


@router.patch("/{uid}/role", response_model=UserRecord)
def patch_role(
    uid: str,
    body: RoleUpdateRequest,
    store: Annotated[RecordStore, Depends(get_store)],
    viewer: Annotated[UserRecord, Depends(get_current_viewer)],
) -> UserRecord:
    try:
        return users.set_role(store, viewer, uid, body.role)
    except ServiceError as e:
        raise http_error(e) from e


@router.patch("/{uid}/ban", response_model=UserRecord)
def patch_ban(
    uid: str,
    body: BanUpdateRequest,
    store: Annotated[RecordStore, Depends(get_store)],
    viewer: Annotated[UserRecord, Depends(get_current_viewer)],
) -> UserRecord:
    try:
        return users.set_banned(store, viewer, uid, body.is_banned)
    except ServiceError as e:
        raise http_error(e) from e
