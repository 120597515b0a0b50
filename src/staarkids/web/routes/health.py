"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter

from staarkids.config.app_config import load_app_config
from staarkids.core.svg_diagrams import list_diagram_types
from staarkids.web.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Service status plus which generation paths are available."""
    return HealthResponse(
        status="ok",
        version="0.1.0",
        timestamp=datetime.now(timezone.utc).isoformat(),
        llm_enabled=load_app_config().llm.enabled,
        diagram_types=len(list_diagram_types()),
    )
