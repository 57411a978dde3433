"""Health check endpoints."""

import json
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Response

from askdocs.config import Settings, get_settings
from askdocs.gateways.factory import check_configuration

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, str]:
    """Simple health check for Docker/k8s.

    Returns:
        200 OK always (application is running)
    """
    return {"status": "ok"}


@router.get("/healthz", response_model=None)
async def healthz(
    settings: Annotated[Settings, Depends(get_settings)],
) -> dict[str, Any] | Response:
    """Configuration health check.

    Reports whether each gateway has the settings it needs. No managed
    service is contacted.

    Returns:
        200 with component status if every gateway is configured
        503 otherwise
    """
    components = check_configuration(settings)
    all_ok = all(value == "configured" for value in components.values())

    response_body = {
        "status": "ok" if all_ok else "degraded",
        "components": components,
    }

    if not all_ok:
        return Response(
            content=json.dumps(response_body),
            status_code=503,
            media_type="application/json",
        )

    return response_body
