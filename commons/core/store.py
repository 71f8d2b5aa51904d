"""Record store: flat key/value collections (users, posts, requests, chat) one level deep."""

import copy
import logging
import re
import threading
import time
import uuid
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any

from firebase_admin import db, exceptions as firebase_exceptions

from commons.core.config import get_settings
from commons.core.errors import NotFoundError, UpstreamError
from commons.core.firebase import get_firebase_app

logger = logging.getLogger(__name__)

COLLECTIONS = frozenset({"users", "posts", "requests", "chat"})

# Realtime Database keys may not contain . $ # [ ] / or control characters.
_INVALID_KEY_RE = re.compile(r"[.$#\[\]/\x00-\x1f\x7f]")
MAX_KEY_LEN = 768

Record = dict[str, Any]


class StoreError(UpstreamError):
    """Raised when the backing store call fails."""


class InvalidKeyError(NotFoundError):
    """Raised for keys that cannot name a record (empty, too long, or path characters)."""


def now_ms() -> int:
    """Current time as epoch milliseconds, the timestamp unit stored on every record."""
    return int(time.time() * 1000)


def validate_key(key: str) -> str:
    if not key or len(key) > MAX_KEY_LEN or _INVALID_KEY_RE.search(key):
        raise InvalidKeyError(f"Invalid record key: {key[:64]!r}")
    return key


def _validate_collection(collection: str) -> str:
    if collection not in COLLECTIONS:
        raise ValueError(f"Unknown collection: {collection!r}")
    return collection


def _as_mapping(value: Any) -> dict[str, Record]:
    """Normalize a collection snapshot to {key: record}; the Realtime Database may return sparse arrays."""
    if value is None:
        return {}
    if isinstance(value, list):
        return {str(i): v for i, v in enumerate(value) if isinstance(v, dict)}
    if isinstance(value, dict):
        return {str(k): v for k, v in value.items() if isinstance(v, dict)}
    return {}


class RecordStore(ABC):
    """Point reads, scans, equality queries, point writes/merges and deletes over named collections."""

    @abstractmethod
    def get(self, collection: str, key: str) -> Record | None: ...

    @abstractmethod
    def list(self, collection: str) -> dict[str, Record]: ...

    @abstractmethod
    def query_equal(self, collection: str, field: str, value: Any) -> dict[str, Record]: ...

    @abstractmethod
    def set(self, collection: str, key: str, record: Record) -> None: ...

    @abstractmethod
    def update(self, collection: str, key: str, fields: Record) -> None: ...

    @abstractmethod
    def push(self, collection: str, record: Record) -> str:
        """Store a record under a newly generated key, with `id` set to that key, and return the key."""

    @abstractmethod
    def delete(self, collection: str, key: str) -> None: ...

    @abstractmethod
    def ping(self) -> bool:
        """Return True if the store is reachable."""


class MemoryRecordStore(RecordStore):
    """Process-local store for local development and tests. Contents are lost on restart."""

    def __init__(self) -> None:
        self._data: dict[str, dict[str, Record]] = {name: {} for name in COLLECTIONS}
        self._lock = threading.Lock()

    def get(self, collection: str, key: str) -> Record | None:
        _validate_collection(collection)
        validate_key(key)
        with self._lock:
            record = self._data[collection].get(key)
            return copy.deepcopy(record) if record is not None else None

    def list(self, collection: str) -> dict[str, Record]:
        _validate_collection(collection)
        with self._lock:
            return copy.deepcopy(self._data[collection])

    def query_equal(self, collection: str, field: str, value: Any) -> dict[str, Record]:
        _validate_collection(collection)
        with self._lock:
            return {
                k: copy.deepcopy(v)
                for k, v in self._data[collection].items()
                if v.get(field) == value
            }

    def set(self, collection: str, key: str, record: Record) -> None:
        _validate_collection(collection)
        validate_key(key)
        with self._lock:
            self._data[collection][key] = copy.deepcopy(record)

    def update(self, collection: str, key: str, fields: Record) -> None:
        _validate_collection(collection)
        validate_key(key)
        with self._lock:
            # Realtime Database update() creates the node if it does not exist
            self._data[collection].setdefault(key, {}).update(copy.deepcopy(fields))

    def push(self, collection: str, record: Record) -> str:
        _validate_collection(collection)
        key = uuid.uuid4().hex
        with self._lock:
            self._data[collection][key] = {**copy.deepcopy(record), "id": key}
        return key

    def delete(self, collection: str, key: str) -> None:
        _validate_collection(collection)
        validate_key(key)
        with self._lock:
            self._data[collection].pop(key, None)

    def ping(self) -> bool:
        return True


class FirebaseRecordStore(RecordStore):
    """Firebase Realtime Database store. Paths are `<collection>/<key>`; reads are one-shot (pull mode)."""

    def __init__(self, app: Any) -> None:
        self._app = app

    def _ref(self, path: str) -> db.Reference:
        return db.reference(path, app=self._app)

    def _call(self, operation: str, collection: str, fn: Any) -> Any:
        try:
            return fn()
        except firebase_exceptions.FirebaseError as e:
            logger.error(
                "Record store call failed",
                extra={"operation": operation, "collection": collection, "reason": str(e)[:500]},
            )
            raise StoreError(f"Record store {operation} on '{collection}' failed.", cause=e) from e

    def get(self, collection: str, key: str) -> Record | None:
        _validate_collection(collection)
        validate_key(key)
        value = self._call("get", collection, lambda: self._ref(f"{collection}/{key}").get())
        return value if isinstance(value, dict) else None

    def list(self, collection: str) -> dict[str, Record]:
        _validate_collection(collection)
        return _as_mapping(self._call("list", collection, lambda: self._ref(collection).get()))

    def query_equal(self, collection: str, field: str, value: Any) -> dict[str, Record]:
        _validate_collection(collection)
        # Needs ".indexOn" for `field` in the database rules
        result = self._call(
            "query",
            collection,
            lambda: self._ref(collection).order_by_child(field).equal_to(value).get(),
        )
        return _as_mapping(result)

    def set(self, collection: str, key: str, record: Record) -> None:
        _validate_collection(collection)
        validate_key(key)
        self._call("set", collection, lambda: self._ref(f"{collection}/{key}").set(record))

    def update(self, collection: str, key: str, fields: Record) -> None:
        _validate_collection(collection)
        validate_key(key)
        self._call("update", collection, lambda: self._ref(f"{collection}/{key}").update(fields))

    def push(self, collection: str, record: Record) -> str:
        _validate_collection(collection)
        ref = self._call("push", collection, lambda: self._ref(collection).push())
        # A failed second write leaves an empty placeholder node; _as_mapping skips non-record values
        self._call("push", collection, lambda: ref.set({**record, "id": ref.key}))
        return ref.key

    def delete(self, collection: str, key: str) -> None:
        _validate_collection(collection)
        validate_key(key)
        self._call("delete", collection, lambda: self._ref(f"{collection}/{key}").delete())

    def ping(self) -> bool:
        """Shallow read of the root; True if the database answers."""
        try:
            self._ref("/").get(shallow=True)
            return True
        except firebase_exceptions.FirebaseError:
            return False


@lru_cache
def _memory_store() -> MemoryRecordStore:
    return MemoryRecordStore()


def get_store() -> RecordStore:
    """Dependency returning the configured record store (one instance per process)."""
    settings = get_settings()
    if settings.RECORD_STORE_BACKEND == "memory":
        return _memory_store()
    return FirebaseRecordStore(get_firebase_app(settings))
