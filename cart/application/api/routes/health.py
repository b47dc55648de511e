"""
Health Check Routes
===================

GET /health reports whether the service can take orders. The database is
the only hard dependency: when it is unreachable the endpoint answers 503.
The points sink is reported through the circuit breaker state but never
makes the service unhealthy, since orders succeed without it.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Request, Response, status
from pydantic import BaseModel

from cart.application.api.dependencies import DatabaseDep, MenuStateDep, PipelineDep

router = APIRouter(prefix="/health", tags=["Health"])


class HealthResponse(BaseModel):
    status: str  # "healthy" or "unhealthy"
    timestamp: str  # ISO 8601
    version: str
    components: dict | None = None


@router.get("", response_model=HealthResponse)
async def health_check(
    request: Request,
    response: Response,
    database: DatabaseDep,
    menu_state: MenuStateDep,
    pipeline: PipelineDep,
):
    database_ok = await database.ping()
    breaker = pipeline.circuit_breaker

    components = {
        "database": "up" if database_ok else "down",
        "menu": {"installed": menu_state.installed, "size": len(menu_state.snapshot())},
        "points_sink": breaker.state.value if breaker is not None else "unguarded",
    }
    if not database_ok:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthResponse(
        status="healthy" if database_ok else "unhealthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=request.app.version,
        components=components,
    )
