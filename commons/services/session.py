"""Viewer resolution: login, the one-time bootstrap admin seed, and per-request viewer loading."""

import logging
from typing import TYPE_CHECKING

from commons.core.errors import NotAuthenticatedError
from commons.core.identity import IdentityProvider
from commons.core.security import create_access_token
from commons.core.store import RecordStore, now_ms
from commons.schemas.users import UserRecord
from commons.services.users import USERS, find_user_by_email, get_user

if TYPE_CHECKING:
    from commons.core.config import Settings

logger = logging.getLogger(__name__)


def _is_bootstrap_admin(email: str | None, settings: "Settings") -> bool:
    admin_email = settings.BOOTSTRAP_ADMIN_EMAIL
    return bool(admin_email and email and email.strip().lower() == admin_email)


def resolve_viewer(
    store: RecordStore,
    uid: str,
    email: str | None,
    settings: "Settings",
) -> UserRecord | None:
    """
    Return the users/{uid} record for an authenticated identity.

    If no record exists and the identity's email is BOOTSTRAP_ADMIN_EMAIL, an admin record is
    written for that uid and returned. Any other missing record yields None.
    """
    viewer = get_user(store, uid)
    if viewer is not None:
        return viewer
    if not _is_bootstrap_admin(email, settings):
        return None

    viewer = UserRecord(
        uid=uid,
        email=email.strip(),
        name="Admin",
        role="admin",
        is_banned=False,
        joined_at=now_ms(),
    )
    store.set(USERS, uid, viewer.model_dump(by_alias=True))
    logger.warning("Bootstrap admin record created", extra={"uid": uid})
    return viewer


async def login(
    store: RecordStore,
    identity: IdentityProvider,
    settings: "Settings",
    email: str,
    password: str | None,
) -> tuple[UserRecord, str | None]:
    """
    Authenticate by email and return (viewer, access_token).

    With AUTH_ENABLED the password is verified by the identity provider and a session token is
    issued. Without it, the first user record with that email is returned and no token is issued.
    Raises NotAuthenticatedError (or InvalidCredentialsError) on failure.
    """
    email = email.strip()
    if settings.AUTH_ENABLED:
        if not password:
            raise NotAuthenticatedError("Password is required")
        account = await identity.verify_password(email, password)
        viewer = resolve_viewer(store, account.uid, account.email, settings)
        if viewer is None:
            raise NotAuthenticatedError("User profile not found")
        return viewer, create_access_token(viewer.uid, viewer.email, settings)

    viewer = find_user_by_email(store, email)
    if viewer is None and _is_bootstrap_admin(email, settings):
        account = identity.find_account_by_email(email)
        if account is not None:
            viewer = resolve_viewer(store, account.uid, account.email, settings)
    if viewer is None:
        raise NotAuthenticatedError("Invalid credentials")
    return viewer, None
