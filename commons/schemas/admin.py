"""Admin console snapshot: user roster, service requests and moderated content."""

from pydantic import BaseModel

from commons.schemas.content import ChatMessage, Post, ServiceRequest
from commons.schemas.users import UserRecord


class AdminConsole(BaseModel):
    users: list[UserRecord]
    requests: list[ServiceRequest]
    posts: list[Post]
    chat: list[ChatMessage]
