"""Signup/login endpoints and the caller-identity dependencies used by every other router."""

from typing import Annotated

import jwt
from fastapi import APIRouter, Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from commons.api.errors import http_error
from commons.core.config import Settings, get_settings
from commons.core.errors import ServiceError
from commons.core.identity import IdentityProvider, get_identity
from commons.core.security import decode_access_token
from commons.core.store import InvalidKeyError, RecordStore, get_store
from commons.schemas.auth import LoginRequest, LoginResponse, SignupRequest
from commons.schemas.users import UserRecord
from commons.services import session as session_service
from commons.services.users import get_user, signup

router = APIRouter()
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


@router.post("/signup", response_model=UserRecord)
def post_signup(
    body: SignupRequest,
    store: Annotated[RecordStore, Depends(get_store)],
    identity: Annotated[IdentityProvider, Depends(get_identity)],
) -> UserRecord:
    """Create an account and its user record. 400 if the email is already registered."""
    try:
        return signup(store, identity, body)
    except ServiceError as e:
        raise http_error(e) from e


@router.post("/login", response_model=LoginResponse)
async def post_login(
    body: LoginRequest,
    store: Annotated[RecordStore, Depends(get_store)],
    identity: Annotated[IdentityProvider, Depends(get_identity)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> LoginResponse:
    """
    Authenticate and return the caller's user record.
    With AUTH_ENABLED the password is checked and access_token is set; send it as
    Authorization: Bearer <access_token> on later calls.
    """
    try:
        viewer, token = await session_service.login(store, identity, settings, body.email, body.password)
    except ServiceError as e:
        raise http_error(e) from e
    return LoginResponse(**viewer.model_dump(), access_token=token)


def get_caller_uid(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    settings: Annotated[Settings, Depends(get_settings)],
    x_user_id: Annotated[str | None, Header(alias="X-User-Id")] = None,
) -> str | None:
    """
    Dependency: identity claimed by the caller, or None.

    With AUTH_ENABLED it comes from a valid Bearer session token (401 if the token is bad).
    Otherwise the caller's X-User-Id header is trusted as-is.
    """
    if not settings.AUTH_ENABLED:
        return x_user_id.strip() if x_user_id and x_user_id.strip() else None
    if credentials is None:
        return None
    try:
        payload = decode_access_token(credentials.credentials, settings)
    except jwt.PyJWTError:
        raise _unauthorized("Invalid or expired token")
    sub = payload.get("sub")
    if not sub or not isinstance(sub, str):
        raise _unauthorized("Invalid token payload")
    return sub


def get_current_viewer(
    caller_uid: Annotated[str | None, Depends(get_caller_uid)],
    store: Annotated[RecordStore, Depends(get_store)],
) -> UserRecord:
    """Dependency: the caller's own user record, loaded fresh. 401 if unauthenticated or missing."""
    if caller_uid is None:
        raise _unauthorized("Not authenticated")
    try:
        viewer = get_user(store, caller_uid)
    except InvalidKeyError:
        raise _unauthorized("Not authenticated")
    except ServiceError as e:
        raise http_error(e) from e
    if viewer is None:
        raise _unauthorized("User profile not found")
    return viewer


def resolve_author(
    store: RecordStore,
    settings: Settings,
    caller_uid: str | None,
    body_uid: str | None,
) -> UserRecord | None:
    """
    Viewer for create endpoints that accept a uid in the body.

    The body uid stands in for the caller only when AUTH_ENABLED is false and no X-User-Id header
    was sent; otherwise it must match the caller. Returns None if no record exists, which the
    access rules deny.
    """
    if caller_uid and body_uid and body_uid != caller_uid:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Cannot act on behalf of another user",
        )
    uid = caller_uid
    if uid is None and not settings.AUTH_ENABLED:
        uid = body_uid
    if not uid:
        raise _unauthorized("Not authenticated")
    try:
        return get_user(store, uid)
    except InvalidKeyError:
        raise _unauthorized("Not authenticated")
    except ServiceError as e:
        raise http_error(e) from e
