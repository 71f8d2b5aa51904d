"""
Access control: decide whether a viewer may perform an action on a target record.

The viewer is the caller's own user record, freshly loaded for the request. A missing viewer
(unauthenticated, or profile failed to load) is denied every action.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from commons.core.errors import ServiceError
from commons.schemas.session import ViewerState
from commons.schemas.users import UserRecord


class Action(str, Enum):
    CREATE_POST = "create_post"
    CREATE_CHAT = "create_chat"
    CREATE_REQUEST = "create_request"
    DELETE_POST = "delete_post"
    DELETE_CHAT = "delete_chat"
    UPDATE_PROFILE = "update_profile"
    CHANGE_ROLE = "change_role"
    CHANGE_BAN = "change_ban"
    CHANGE_REQUEST_STATUS = "change_request_status"
    VIEW_ADMIN_CONSOLE = "view_admin_console"


ADMIN_ONLY_ACTIONS = frozenset(
    {
        Action.DELETE_CHAT,
        Action.CHANGE_ROLE,
        Action.CHANGE_BAN,
        Action.CHANGE_REQUEST_STATUS,
        Action.VIEW_ADMIN_CONSOLE,
    }
)


class AccessDenied(ServiceError):
    """Raised when a role, ownership or ban check fails."""


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str = ""


ALLOW = Decision(True)


def _owner_uid(target: Any) -> str | None:
    if target is None:
        return None
    if isinstance(target, dict):
        return target.get("uid")
    return getattr(target, "uid", None)


def authorize(
    viewer: UserRecord | None,
    action: Action,
    target: Any = None,
    *,
    ban_blocks_requests: bool = False,
) -> Decision:
    """
    Evaluate the rule table for one action.

    target is the record acted on (post, chat message, user record); only its uid is read.
    Request creation ignores the ban flag unless ban_blocks_requests is set.
    """
    if viewer is None:
        return Decision(False, "User profile not found")

    if action in (Action.CREATE_POST, Action.CREATE_CHAT):
        if viewer.is_banned:
            noun = "posting" if action == Action.CREATE_POST else "chatting"
            return Decision(False, f"You are banned from {noun}")
        return ALLOW

    if action == Action.CREATE_REQUEST:
        if ban_blocks_requests and viewer.is_banned:
            return Decision(False, "You are banned from requesting services")
        return ALLOW

    if action == Action.DELETE_POST:
        if viewer.is_admin or viewer.uid == _owner_uid(target):
            return ALLOW
        return Decision(False, "Only the author or an admin can delete this post")

    if action == Action.UPDATE_PROFILE:
        if viewer.uid == _owner_uid(target):
            return ALLOW
        return Decision(False, "You can only edit your own profile")

    if action in ADMIN_ONLY_ACTIONS:
        if viewer.is_admin:
            return ALLOW
        return Decision(False, "Admin access required")

    return Decision(False, f"Unknown action: {action}")


def ensure_allowed(
    viewer: UserRecord | None,
    action: Action,
    target: Any = None,
    *,
    ban_blocks_requests: bool = False,
) -> None:
    """Raise AccessDenied with the rule's reason unless authorize() allows the action."""
    decision = authorize(viewer, action, target, ban_blocks_requests=ban_blocks_requests)
    if not decision.allowed:
        raise AccessDenied(decision.reason)


def viewer_state(viewer: UserRecord, *, ban_blocks_requests: bool = False) -> ViewerState:
    """Derive the role/ban flags and landing screen shown to the viewer."""

    def can(action: Action) -> bool:
        return authorize(viewer, action, ban_blocks_requests=ban_blocks_requests).allowed

    return ViewerState(
        uid=viewer.uid,
        email=viewer.email,
        role=viewer.role,
        is_admin=viewer.is_admin,
        is_banned=viewer.is_banned,
        can_post=can(Action.CREATE_POST),
        can_chat=can(Action.CREATE_CHAT),
        can_request=can(Action.CREATE_REQUEST),
        landing="admin" if can(Action.VIEW_ADMIN_CONSOLE) else "dashboard",
    )
