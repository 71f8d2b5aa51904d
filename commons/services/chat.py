"""Chat: messages in timestamp order; sending is ban-checked, deletion is admin-only."""

import logging

from pydantic import ValidationError

from commons.core.errors import NotFoundError
from commons.core.store import RecordStore, now_ms
from commons.schemas.content import ChatMessage
from commons.schemas.users import UserRecord
from commons.services.access import Action, ensure_allowed

logger = logging.getLogger(__name__)

CHAT = "chat"


def _parse_message(key: str, data: dict) -> ChatMessage | None:
    try:
        return ChatMessage.model_validate({**data, "id": key})
    except ValidationError:
        logger.warning("Skipping malformed chat record", extra={"message_id": key})
        return None


def list_messages(store: RecordStore) -> list[ChatMessage]:
    """All messages, oldest first."""
    messages = [_parse_message(key, data) for key, data in store.list(CHAT).items()]
    return sorted((m for m in messages if m is not None), key=lambda m: (m.timestamp, m.id))


def send_message(store: RecordStore, viewer: UserRecord | None, msg: str) -> ChatMessage:
    ensure_allowed(viewer, Action.CREATE_CHAT)
    record = {
        "uid": viewer.uid,
        "email": viewer.email,
        "msg": msg,
        "timestamp": now_ms(),
    }
    message_id = store.push(CHAT, record)
    return ChatMessage(id=message_id, **record)


def delete_message(store: RecordStore, viewer: UserRecord | None, message_id: str) -> None:
    ensure_allowed(viewer, Action.DELETE_CHAT)
    if store.get(CHAT, message_id) is None:
        raise NotFoundError("Message not found")
    store.delete(CHAT, message_id)
    logger.info("Chat message deleted", extra={"message_id": message_id, "by": viewer.uid})
