"""Core app configuration, record store and identity provider."""

from commons.core.config import get_settings, settings
from commons.core.identity import get_identity
from commons.core.store import get_store

__all__ = ["get_settings", "settings", "get_identity", "get_store"]
