"""Base exceptions shared by the store, identity provider and services. Routers map them to HTTP statuses."""


class ServiceError(Exception):
    """Base for errors surfaced to API callers as {"error": message}."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)


class NotFoundError(ServiceError):
    """Referenced user or record does not exist."""


class InvalidInputError(ServiceError):
    """Input rejected by a backing service (e.g. password too weak for the identity provider)."""


class ConflictError(ServiceError):
    """Write would duplicate an existing record (e.g. email already registered)."""


class NotAuthenticatedError(ServiceError):
    """No caller identity could be established."""


class UpstreamError(ServiceError):
    """Identity provider or record store call failed."""


class NotConfiguredError(ServiceError):
    """A backing service is used but its settings are missing."""
