"""
Health check contract models.
"""

from typing import Literal

from pydantic import BaseModel, Field


class BasicHealthResponse(BaseModel):
    """Basic health check response (liveness check)"""
    status: Literal["healthy"] = Field(default="healthy", description="Health status (always healthy if API responds)")
    service: str = Field(default="Jalsampada Forms API", description="Service name")
    timestamp: str = Field(..., description="Health check timestamp (ISO 8601)")
    forms: int = Field(default=0, description="Number of registered form layouts")
