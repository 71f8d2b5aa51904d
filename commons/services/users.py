"""User accounts: signup, lookups, self-service profile edits and admin role/ban changes."""

import logging

from pydantic import ValidationError

from commons.core.errors import ConflictError, NotFoundError
from commons.core.identity import IdentityError, IdentityProvider
from commons.core.store import RecordStore, StoreError, now_ms
from commons.schemas.auth import SignupRequest
from commons.schemas.users import ProfileUpdateRequest, Role, UserRecord
from commons.services.access import Action, ensure_allowed

logger = logging.getLogger(__name__)

USERS = "users"


def parse_user(key: str, data: dict) -> UserRecord | None:
    """Build a UserRecord from stored data (older records may lack uid). Malformed records yield None."""
    try:
        return UserRecord.model_validate({**data, "uid": data.get("uid") or key})
    except ValidationError:
        logger.warning("Malformed user record", extra={"uid": key})
        return None


def get_user(store: RecordStore, uid: str) -> UserRecord | None:
    data = store.get(USERS, uid)
    return parse_user(uid, data) if data is not None else None


def find_user_by_email(store: RecordStore, email: str) -> UserRecord | None:
    """First user record whose email matches exactly, or None."""
    matches = store.query_equal(USERS, "email", email.strip())
    for key in sorted(matches):
        user = parse_user(key, matches[key])
        if user is not None:
            return user
    return None


def list_users(store: RecordStore) -> list[UserRecord]:
    """All user records, oldest account first."""
    users = [parse_user(key, data) for key, data in store.list(USERS).items()]
    return sorted((u for u in users if u is not None), key=lambda u: (u.joined_at, u.uid))


def signup(
    store: RecordStore,
    identity: IdentityProvider,
    body: SignupRequest,
    role: Role = "user",
) -> UserRecord:
    """
    Create an identity account and its users/{uid} record.

    Raises ConflictError if the email is already registered (no identity account is created).
    If the record write fails, the identity account is deleted again before the error propagates.
    """
    email = str(body.email).strip()
    if find_user_by_email(store, email) is not None:
        raise ConflictError("Email already exists")

    account = identity.create_account(email, body.password, display_name=body.name)
    user = UserRecord(
        uid=account.uid,
        email=email,
        name=body.name,
        phone=body.phone,
        role=role,
        is_banned=False,
        joined_at=now_ms(),
    )
    try:
        store.set(USERS, user.uid, user.model_dump(by_alias=True))
    except StoreError:
        logger.exception("Signup record write failed; removing identity account", extra={"uid": user.uid})
        try:
            identity.delete_account(user.uid)
        except IdentityError as cleanup_error:
            logger.error(
                "Signup cleanup failed; identity account is orphaned",
                extra={"uid": user.uid, "reason": cleanup_error.message[:500]},
            )
        raise

    logger.info("User signed up", extra={"uid": user.uid, "role": role})
    return user


def update_profile(store: RecordStore, viewer: UserRecord, body: ProfileUpdateRequest) -> UserRecord:
    """Apply name/avatar changes to the viewer's own record."""
    ensure_allowed(viewer, Action.UPDATE_PROFILE, viewer)
    fields = body.model_dump(exclude_none=True)
    if not fields:
        return viewer
    store.update(USERS, viewer.uid, fields)
    return viewer.model_copy(update=fields)


def _require_user(store: RecordStore, uid: str) -> UserRecord:
    target = get_user(store, uid)
    if target is None:
        raise NotFoundError("User not found")
    return target


def set_role(store: RecordStore, viewer: UserRecord | None, uid: str, role: Role) -> UserRecord:
    """Promote or demote a user (admin only)."""
    ensure_allowed(viewer, Action.CHANGE_ROLE)
    target = _require_user(store, uid)
    store.update(USERS, uid, {"role": role})
    logger.info("User role changed", extra={"uid": uid, "role": role, "by": viewer.uid})
    return target.model_copy(update={"role": role})


def set_banned(store: RecordStore, viewer: UserRecord | None, uid: str, is_banned: bool) -> UserRecord:
    """Ban or unban a user (admin only)."""
    ensure_allowed(viewer, Action.CHANGE_BAN)
    target = _require_user(store, uid)
    store.update(USERS, uid, {"isBanned": is_banned})
    logger.info("User ban flag changed", extra={"uid": uid, "is_banned": is_banned, "by": viewer.uid})
    return target.model_copy(update={"is_banned": is_banned})
