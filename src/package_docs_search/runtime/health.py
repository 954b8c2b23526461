"""Health endpoint factory."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.responses import JSONResponse


if TYPE_CHECKING:
    from starlette.requests import Request

    from ..service_layer.index_service import IndexService


def build_health_endpoint(service: IndexService):
    """Return a coroutine function reporting index loading health.

    The response is always 200; ``status`` is ``degraded`` while loading and
    ``unhealthy`` once the catalog fetch has failed.
    """

    async def health_check(request: Request) -> JSONResponse:
        status = service.status()
        if status.state == "failed":
            overall = "unhealthy"
        elif status.complete:
            overall = "healthy"
        else:
            overall = "degraded"
        return JSONResponse({"status": overall, "index": status.to_dict()})

    return health_check
