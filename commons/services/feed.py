"""Feed: list posts newest first, create posts, delete by author or admin."""

import logging

from pydantic import ValidationError

from commons.core.errors import NotFoundError
from commons.core.store import RecordStore, now_ms
from commons.schemas.content import Post
from commons.schemas.users import UserRecord
from commons.services.access import Action, ensure_allowed

logger = logging.getLogger(__name__)

POSTS = "posts"


def parse_post(key: str, data: dict) -> Post | None:
    """Build a Post from stored data, keyed by its store key. Malformed records are skipped."""
    try:
        return Post.model_validate({**data, "id": key})
    except ValidationError:
        logger.warning("Skipping malformed post record", extra={"post_id": key})
        return None


def order_newest_first(posts: list[Post]) -> list[Post]:
    """Sort by timestamp descending, ties by id descending, independent of store order."""
    return sorted(posts, key=lambda p: (p.timestamp, p.id), reverse=True)


def list_posts(store: RecordStore) -> list[Post]:
    posts = [parse_post(key, data) for key, data in store.list(POSTS).items()]
    return order_newest_first([p for p in posts if p is not None])


def create_post(store: RecordStore, viewer: UserRecord | None, content: str) -> Post:
    """Create a post authored by the viewer. Banned viewers are refused."""
    ensure_allowed(viewer, Action.CREATE_POST)
    record = {
        "uid": viewer.uid,
        "email": viewer.email,
        "content": content,
        "timestamp": now_ms(),
    }
    post_id = store.push(POSTS, record)
    return Post(id=post_id, **record)


def delete_post(store: RecordStore, viewer: UserRecord | None, post_id: str) -> None:
    """Delete a post if the viewer is its author or an admin."""
    data = store.get(POSTS, post_id)
    if data is None:
        raise NotFoundError("Post not found")
    ensure_allowed(viewer, Action.DELETE_POST, data)
    store.delete(POSTS, post_id)
    logger.info(
        "Post deleted",
        extra={"post_id": post_id, "author_uid": data.get("uid"), "by": viewer.uid},
    )
