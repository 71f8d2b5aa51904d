"""Viewer state derived from the caller's own user record."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from commons.schemas.users import Role


class ViewerState(BaseModel):
    """What the caller may see and do; clients gate controls on these flags."""

    model_config = ConfigDict(populate_by_name=True)

    uid: str
    email: str
    role: Role
    is_admin: bool = Field(..., alias="isAdmin")
    is_banned: bool = Field(..., alias="isBanned")
    can_post: bool = Field(..., alias="canPost")
    can_chat: bool = Field(..., alias="canChat")
    can_request: bool = Field(..., alias="canRequest")
    landing: Literal["admin", "dashboard"] = Field(
        ..., description="Screen the client should open; non-admins never land on the admin console"
    )
