"""Pydantic schemas for health check responses."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response body for the health check endpoint."""

    status: Literal["ok"] = Field(default="ok", description="Service status")
    environment: str = Field(description="Current app environment (e.g. dev, prod)")
    store: Literal["connected", "disconnected", "unconfigured"] | None = Field(
        default=None,
        description="Record store connectivity status when check is performed",
    )
    store_backend: str = Field(description="Configured record store backend (firebase or memory)")
