"""Translate service-layer exceptions into HTTP errors rendered as {"error": message}."""

from fastapi import HTTPException, status

from commons.core.errors import (
    ConflictError,
    InvalidInputError,
    NotAuthenticatedError,
    NotConfiguredError,
    NotFoundError,
    ServiceError,
    UpstreamError,
)
from commons.services.access import AccessDenied

# First match wins; subclasses must come before their bases.
STATUS_BY_ERROR: tuple[tuple[type[ServiceError], int], ...] = (
    (AccessDenied, status.HTTP_403_FORBIDDEN),
    (NotAuthenticatedError, status.HTTP_401_UNAUTHORIZED),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    # Duplicate signup answers 400, as existing clients expect
    (ConflictError, status.HTTP_400_BAD_REQUEST),
    (InvalidInputError, 422),
    (NotConfiguredError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (UpstreamError, status.HTTP_502_BAD_GATEWAY),
)


def http_error(e: ServiceError) -> HTTPException:
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(e, error_type):
            headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
            return HTTPException(status_code=status_code, detail=e.message, headers=headers)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)
