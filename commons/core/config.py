"""Application configuration loaded from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Firebase service-account fields required by the firebase record store and identity provider.
FIREBASE_CREDENTIAL_FIELDS = (
    "FIREBASE_PROJECT_ID",
    "FIREBASE_PRIVATE_KEY",
    "FIREBASE_CLIENT_EMAIL",
    "FIREBASE_CLIENT_ID",
    "FIREBASE_CLIENT_CERT_URL",
    "FIREBASE_DB_URL",
)

DEFAULT_JWT_SECRET = "change-me-in-production"
JWT_SECRET_MIN_LEN = 32


class Settings(BaseSettings):
    """Validated application settings from env and optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    APP_ENV: Literal["dev", "prod"] = "dev"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    API_PREFIX: str = "/api"

    # Single-page entry document and assets; served only when the directory exists
    STATIC_DIR: str = "public"

    # "memory" keeps records in-process (local development, tests); "firebase" uses the Realtime Database
    RECORD_STORE_BACKEND: Literal["firebase", "memory"] = "firebase"
    # "memory" keeps accounts in-process with bcrypt-hashed passwords; "firebase" uses Firebase Authentication
    IDENTITY_BACKEND: Literal["firebase", "memory"] = "firebase"

    # Firebase service account (required only when the firebase backend or identity provider is used)
    FIREBASE_PROJECT_ID: str | None = None
    FIREBASE_PRIVATE_KEY: SecretStr | None = None
    FIREBASE_CLIENT_EMAIL: str | None = None
    FIREBASE_CLIENT_ID: str | None = None
    FIREBASE_CLIENT_CERT_URL: str | None = None
    FIREBASE_DB_URL: str | None = None

    # Web API key for password verification through the Identity Toolkit REST API
    FIREBASE_WEB_API_KEY: SecretStr | None = None
    IDENTITY_TOOLKIT_URL: str = "https://identitytoolkit.googleapis.com/v1"
    IDENTITY_REQUEST_TIMEOUT_SEC: float = 10.0

    # Identity whose first login seeds an admin record when none exists yet
    BOOTSTRAP_ADMIN_EMAIL: str | None = None

    # When True, banned users cannot open service requests either
    BAN_BLOCKS_REQUESTS: bool = False

    # When False, callers identify themselves (X-User-Id header or body uid) and login skips the
    # password check. Insecure; meant for trusted clients only.
    AUTH_ENABLED: bool = True

    # Session tokens issued on login
    JWT_SECRET: SecretStr = SecretStr(DEFAULT_JWT_SECRET)
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 60

    @field_validator("API_PREFIX")
    @classmethod
    def validate_api_prefix(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v.startswith("/"):
            raise ValueError("API_PREFIX must start with '/' (e.g. /api)")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError("LOG_LEVEL must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL")
        return level

    @field_validator("FIREBASE_DB_URL", "FIREBASE_CLIENT_CERT_URL")
    @classmethod
    def validate_firebase_url(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        s = v.strip().lower()
        if not s.startswith("https://"):
            raise ValueError(
                "Firebase URLs must use https (e.g. https://<project>-default-rtdb.firebaseio.com)"
            )
        return v.strip().rstrip("/")

    @field_validator("FIREBASE_PRIVATE_KEY")
    @classmethod
    def expand_private_key_newlines(cls, v: SecretStr | None) -> SecretStr | None:
        if v is None or not v.get_secret_value().strip():
            return None
        # Keys pasted into .env usually carry literal "\n" sequences
        return SecretStr(v.get_secret_value().replace("\\n", "\n"))

    @field_validator("IDENTITY_TOOLKIT_URL")
    @classmethod
    def validate_identity_toolkit_url(cls, v: str) -> str:
        s = v.strip().lower()
        if not (s.startswith("http://") or s.startswith("https://")):
            raise ValueError("IDENTITY_TOOLKIT_URL must use http or https")
        return v.strip().rstrip("/")

    @field_validator("IDENTITY_REQUEST_TIMEOUT_SEC")
    @classmethod
    def validate_identity_timeout(cls, v: float) -> float:
        if v <= 0 or v > 60:
            raise ValueError(
                "IDENTITY_REQUEST_TIMEOUT_SEC must be greater than 0 and at most 60"
            )
        return v

    @field_validator("BOOTSTRAP_ADMIN_EMAIL")
    @classmethod
    def validate_bootstrap_admin_email(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        if "@" not in v:
            raise ValueError("BOOTSTRAP_ADMIN_EMAIL must be an email address")
        return v.strip().lower()

    @field_validator("JWT_SECRET")
    @classmethod
    def validate_jwt_secret(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value() or not v.get_secret_value().strip():
            raise ValueError("JWT_SECRET must be set and non-empty")
        return v

    @field_validator("JWT_ALGORITHM")
    @classmethod
    def validate_jwt_algorithm(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("JWT_ALGORITHM must be set and non-empty")
        return v.strip()

    @field_validator("JWT_EXPIRE_MINUTES")
    @classmethod
    def validate_jwt_expire_minutes(cls, v: int) -> int:
        if v < 1 or v > 10080:
            raise ValueError(
                "JWT_EXPIRE_MINUTES must be between 1 and 10080 (1 min to 7 days)"
            )
        return v

    @model_validator(mode="after")
    def validate_prod_jwt_secret(self) -> "Settings":
        """Reject the default or a short JWT_SECRET in prod while token auth is on."""
        if self.APP_ENV == "prod" and self.AUTH_ENABLED:
            secret = self.JWT_SECRET.get_secret_value()
            if secret == DEFAULT_JWT_SECRET or len(secret) < JWT_SECRET_MIN_LEN:
                raise ValueError(
                    f"JWT_SECRET must be changed from the default and be at least "
                    f"{JWT_SECRET_MIN_LEN} characters when APP_ENV=prod and AUTH_ENABLED=true"
                )
        return self

    def missing_firebase_fields(self) -> list[str]:
        """Names of required Firebase credential settings that are unset."""
        return [name for name in FIREBASE_CREDENTIAL_FIELDS if getattr(self, name) is None]


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance (safe to call from dependencies)."""
    return Settings()


settings = get_settings()
