"""Pydantic schemas for content records: feed posts, chat messages and service requests."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

RequestStatus = Literal["pending", "Approved", "Completed"]

MAX_CONTENT_LEN = 5000
MAX_CHAT_LEN = 2000


def _non_blank(value: str) -> str:
    """Strip surrounding whitespace; reject empty text."""
    value = value.strip()
    if not value:
        raise ValueError("must not be empty")
    return value


class Post(BaseModel):
    """Feed post. uid/email are copied from the author's record at creation time."""

    model_config = ConfigDict(extra="ignore")

    id: str
    uid: str
    email: str = ""
    content: str
    timestamp: int = Field(..., description="Epoch milliseconds")


class PostCreateRequest(BaseModel):
    """
    New post. uid/email are accepted for compatibility with older clients; the author is always
    the resolved caller and a mismatching uid is rejected.
    """

    uid: str | None = None
    email: str | None = None
    content: str = Field(..., max_length=MAX_CONTENT_LEN)

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        return _non_blank(v)


class ChatMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    uid: str
    email: str = ""
    msg: str
    timestamp: int


class ChatCreateRequest(BaseModel):
    uid: str | None = None
    email: str | None = None
    msg: str = Field(..., max_length=MAX_CHAT_LEN)

    @field_validator("msg")
    @classmethod
    def validate_msg(cls, v: str) -> str:
        return _non_blank(v)


class ServiceRequest(BaseModel):
    """Service request opened by a user; status changes are admin-only."""

    model_config = ConfigDict(extra="ignore")

    id: str
    uid: str
    type: str
    desc: str
    status: RequestStatus = "pending"
    timestamp: int


class ServiceRequestCreate(BaseModel):
    uid: str | None = None
    type: str = Field(..., max_length=255)
    desc: str = Field(..., max_length=MAX_CONTENT_LEN)

    @field_validator("type", "desc")
    @classmethod
    def validate_text(cls, v: str) -> str:
        return _non_blank(v)


class StatusUpdateRequest(BaseModel):
    status: RequestStatus


class DeletedResponse(BaseModel):
    deleted: str = Field(..., description="Id of the removed record")
