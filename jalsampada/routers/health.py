"""
Health Router

Liveness check. Does not contact Frappe.
"""

from datetime import datetime, timezone

from fastapi import APIRouter

from jalsampada.core.dependencies import FormRegistryDep
from jalsampada.models.contracts.health import BasicHealthResponse

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=BasicHealthResponse,
    summary="Liveness check",
)
async def health(registry: FormRegistryDep) -> BasicHealthResponse:
    return BasicHealthResponse(
        timestamp=datetime.now(timezone.utc).isoformat(),
        forms=len(registry),
    )
