"""Firebase Admin SDK initialization shared by the record store and identity provider."""

import logging
from typing import TYPE_CHECKING

import firebase_admin
from firebase_admin import credentials

from commons.core.errors import NotConfiguredError

if TYPE_CHECKING:
    from commons.core.config import Settings

logger = logging.getLogger(__name__)

FIREBASE_APP_NAME = "commons"


class FirebaseNotConfiguredError(NotConfiguredError):
    """Raised when a Firebase-backed component is used but service-account settings are missing."""


def _service_account_info(settings: "Settings") -> dict[str, str]:
    """Build the service-account mapping expected by credentials.Certificate."""
    private_key = settings.FIREBASE_PRIVATE_KEY.get_secret_value() if settings.FIREBASE_PRIVATE_KEY else ""
    return {
        "type": "service_account",
        "project_id": settings.FIREBASE_PROJECT_ID or "",
        "private_key": private_key,
        "client_email": settings.FIREBASE_CLIENT_EMAIL or "",
        "client_id": settings.FIREBASE_CLIENT_ID or "",
        "auth_uri": "https://accounts.google.com/o/oauth2/auth",
        "token_uri": "https://oauth2.googleapis.com/token",
        "auth_provider_x509_cert_url": "https://www.googleapis.com/oauth2/v1/certs",
        "client_x509_cert_url": settings.FIREBASE_CLIENT_CERT_URL or "",
    }


def get_firebase_app(settings: "Settings") -> firebase_admin.App:
    """
    Return the process-wide Firebase app, initializing it on first use.

    Raises FirebaseNotConfiguredError if any service-account setting is missing.
    """
    try:
        return firebase_admin.get_app(FIREBASE_APP_NAME)
    except ValueError:
        pass

    missing = settings.missing_firebase_fields()
    if missing:
        raise FirebaseNotConfiguredError(
            "Firebase is not configured; set " + ", ".join(missing) + "."
        )

    cred = credentials.Certificate(_service_account_info(settings))
    app = firebase_admin.initialize_app(
        cred,
        {"databaseURL": settings.FIREBASE_DB_URL},
        name=FIREBASE_APP_NAME,
    )
    logger.info(
        "Firebase Admin initialized",
        extra={"project_id": settings.FIREBASE_PROJECT_ID},
    )
    return app
