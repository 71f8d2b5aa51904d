"""Identity provider: create/delete accounts, look them up by email, verify email+password."""

from __future__ import annotations

import logging
import threading
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Any

import httpx
from firebase_admin import auth as firebase_auth, exceptions as firebase_exceptions

from commons.core.config import get_settings
from commons.core.errors import (
    ConflictError,
    InvalidInputError,
    NotAuthenticatedError,
    NotConfiguredError,
    UpstreamError,
)
from commons.core.firebase import get_firebase_app
from commons.core.security import hash_password, verify_password

if TYPE_CHECKING:
    from commons.core.config import Settings

logger = logging.getLogger(__name__)

# Identity Toolkit error codes that mean "wrong email or password" rather than an outage.
INVALID_CREDENTIAL_CODES = frozenset(
    {"INVALID_LOGIN_CREDENTIALS", "EMAIL_NOT_FOUND", "INVALID_PASSWORD", "INVALID_EMAIL"}
)


class IdentityError(UpstreamError):
    """Raised when the identity provider is unreachable or returns an unexpected error."""


class EmailExistsError(ConflictError):
    """Raised when an account with the email already exists at the identity provider."""


class InvalidCredentialsError(NotAuthenticatedError):
    """Raised when email/password verification fails."""


class IdentityNotConfiguredError(NotConfiguredError):
    """Raised when password verification is used but FIREBASE_WEB_API_KEY is not set."""


@dataclass(frozen=True)
class IdentityAccount:
    """Stable identity issued by the provider."""

    uid: str
    email: str


class IdentityProvider(ABC):
    @abstractmethod
    def create_account(self, email: str, password: str, display_name: str = "") -> IdentityAccount:
        """Create an account. Raises EmailExistsError if the email is taken."""

    @abstractmethod
    def delete_account(self, uid: str) -> None: ...

    @abstractmethod
    def find_account_by_email(self, email: str) -> IdentityAccount | None: ...

    @abstractmethod
    async def verify_password(self, email: str, password: str) -> IdentityAccount:
        """Return the account for valid credentials. Raises InvalidCredentialsError otherwise."""


class MemoryIdentityProvider(IdentityProvider):
    """In-process accounts with bcrypt-hashed passwords, for local development and tests."""

    def __init__(self) -> None:
        self._accounts: dict[str, tuple[IdentityAccount, str]] = {}
        self._lock = threading.Lock()

    def create_account(self, email: str, password: str, display_name: str = "") -> IdentityAccount:
        key = email.strip().lower()
        password_hash = hash_password(password)
        with self._lock:
            if key in self._accounts:
                raise EmailExistsError("Email already exists")
            account = IdentityAccount(uid=uuid.uuid4().hex[:28], email=email.strip())
            self._accounts[key] = (account, password_hash)
        return account

    def delete_account(self, uid: str) -> None:
        with self._lock:
            for key, (account, _) in list(self._accounts.items()):
                if account.uid == uid:
                    del self._accounts[key]

    def find_account_by_email(self, email: str) -> IdentityAccount | None:
        with self._lock:
            entry = self._accounts.get(email.strip().lower())
        return entry[0] if entry else None

    async def verify_password(self, email: str, password: str) -> IdentityAccount:
        with self._lock:
            entry = self._accounts.get(email.strip().lower())
        if entry is None or not verify_password(password, entry[1]):
            raise InvalidCredentialsError("Invalid credentials")
        return entry[0]


class FirebaseIdentityProvider(IdentityProvider):
    """
    Firebase Authentication.

    Account management uses the Admin SDK; password verification goes through the Identity
    Toolkit REST endpoint `accounts:signInWithPassword`, since the Admin SDK cannot check passwords.
    """

    def __init__(self, app: Any, settings: "Settings") -> None:
        self._app = app
        self._settings = settings

    def create_account(self, email: str, password: str, display_name: str = "") -> IdentityAccount:
        try:
            user = firebase_auth.create_user(
                email=email,
                password=password,
                display_name=display_name or None,
                app=self._app,
            )
        except firebase_auth.EmailAlreadyExistsError as e:
            raise EmailExistsError("Email already exists", cause=e) from e
        except ValueError as e:
            raise InvalidInputError(str(e), cause=e) from e
        except firebase_exceptions.FirebaseError as e:
            raise IdentityError("Identity provider failed to create the account.", cause=e) from e
        return IdentityAccount(uid=user.uid, email=user.email or email)

    def delete_account(self, uid: str) -> None:
        try:
            firebase_auth.delete_user(uid, app=self._app)
        except firebase_auth.UserNotFoundError:
            return
        except firebase_exceptions.FirebaseError as e:
            raise IdentityError("Identity provider failed to delete the account.", cause=e) from e

    def find_account_by_email(self, email: str) -> IdentityAccount | None:
        try:
            user = firebase_auth.get_user_by_email(email, app=self._app)
        except firebase_auth.UserNotFoundError:
            return None
        except ValueError:
            return None
        except firebase_exceptions.FirebaseError as e:
            raise IdentityError("Identity provider lookup failed.", cause=e) from e
        return IdentityAccount(uid=user.uid, email=user.email or email)

    async def verify_password(self, email: str, password: str) -> IdentityAccount:
        api_key = self._settings.FIREBASE_WEB_API_KEY
        if api_key is None or not api_key.get_secret_value().strip():
            raise IdentityNotConfiguredError(
                "Password login is not configured; set FIREBASE_WEB_API_KEY."
            )
        url = f"{self._settings.IDENTITY_TOOLKIT_URL}/accounts:signInWithPassword"
        payload = {"email": email, "password": password, "returnSecureToken": True}
        timeout = httpx.Timeout(self._settings.IDENTITY_REQUEST_TIMEOUT_SEC)

        try:
            async with httpx.AsyncClient(timeout=timeout) as client:
                resp = await client.post(
                    url, params={"key": api_key.get_secret_value()}, json=payload
                )
        except httpx.TimeoutException as e:
            raise IdentityError("Identity provider request timed out.", cause=e) from e
        except httpx.HTTPError as e:
            raise IdentityError("Identity provider is unreachable.", cause=e) from e

        if resp.status_code == 400:
            try:
                code = resp.json().get("error", {}).get("message", "")
            except ValueError:
                code = ""
            # Codes may carry a suffix, e.g. "TOO_MANY_ATTEMPTS_TRY_LATER : ..."
            code = code.split(" ", 1)[0]
            if code in INVALID_CREDENTIAL_CODES:
                raise InvalidCredentialsError("Invalid credentials")
            if code == "USER_DISABLED":
                raise InvalidCredentialsError("Account is disabled")
            raise IdentityError(f"Identity provider rejected the login: {code or 'unknown error'}")
        if resp.status_code != 200:
            raise IdentityError(f"Identity provider returned status {resp.status_code}.")

        body = resp.json()
        uid = body.get("localId")
        if not uid:
            raise IdentityError("Identity provider response missing localId.")
        return IdentityAccount(uid=uid, email=body.get("email") or email)


@lru_cache
def _memory_identity() -> MemoryIdentityProvider:
    return MemoryIdentityProvider()


def get_identity() -> IdentityProvider:
    """Dependency returning the configured identity provider."""
    settings = get_settings()
    if settings.IDENTITY_BACKEND == "memory":
        return _memory_identity()
    return FirebaseIdentityProvider(get_firebase_app(settings), settings)
