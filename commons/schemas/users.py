"""User record as stored under users/{uid}, plus profile/role/ban update bodies."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["user", "admin"]

ROLE_VALUES: frozenset[str] = frozenset({"user", "admin"})


class UserRecord(BaseModel):
    """
    Stored user record. Field names match the record store (camelCase aliases).

    Dump with by_alias=True before writing to the store.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    uid: str
    email: str
    name: str = ""
    phone: str = ""
    avatar: str = ""
    role: Role = "user"
    is_banned: bool = Field(default=False, alias="isBanned")
    joined_at: int = Field(default=0, alias="joinedAt", description="Epoch milliseconds")

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class ProfileUpdateRequest(BaseModel):
    """Self-service profile change. Email, role and ban state are not self-editable."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=255)
    avatar: str | None = Field(default=None, max_length=2048, description="Avatar image URL")


class RoleUpdateRequest(BaseModel):
    role: Role


class BanUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_banned: bool = Field(..., alias="isBanned")
