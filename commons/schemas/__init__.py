"""Pydantic request/response schemas."""

from commons.schemas.admin import AdminConsole
from commons.schemas.auth import LoginRequest, LoginResponse, SignupRequest
from commons.schemas.content import (
    ChatCreateRequest,
    ChatMessage,
    DeletedResponse,
    Post,
    PostCreateRequest,
    RequestStatus,
    ServiceRequest,
    ServiceRequestCreate,
    StatusUpdateRequest,
)
from commons.schemas.health import HealthResponse
from commons.schemas.session import ViewerState
from commons.schemas.users import (
    BanUpdateRequest,
    ProfileUpdateRequest,
    Role,
    RoleUpdateRequest,
    UserRecord,
)

__all__ = [
    "AdminConsole",
    "BanUpdateRequest",
    "ChatCreateRequest",
    "ChatMessage",
    "DeletedResponse",
    "HealthResponse",
    "LoginRequest",
    "LoginResponse",
    "Post",
    "PostCreateRequest",
    "ProfileUpdateRequest",
    "RequestStatus",
    "Role",
    "RoleUpdateRequest",
    "ServiceRequest",
    "ServiceRequestCreate",
    "SignupRequest",
    "StatusUpdateRequest",
    "UserRecord",
    "ViewerState",
]
