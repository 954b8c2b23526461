"""Main ASGI application entry point.

Routes:
    GET  /health                              → loading health
    GET  /status                              → index progress counters
    GET  /search?q=...                        → ranked results for a query
    POST /packages/{user}/{project}/retry     → re-issue a package docs fetch
    GET  /metrics                             → Prometheus metrics

Usage:
    python -m package_docs_search.app
"""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from .clients.package_site import PackageSiteClient
from .config import Settings
from .observability.logging import configure_logging
from .observability.metrics import get_metrics, get_metrics_content_type
from .observability.tracing import TraceContextMiddleware, init_tracing
from .runtime.health import build_health_endpoint
from .service_layer.index_service import IndexService


logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, service: IndexService | None = None) -> Starlette:
    """Create the ASGI application.

    Args:
        settings: Settings instance (loaded from the environment when omitted)
        service: Pre-built index service (used by tests)
    """
    settings = settings or Settings()
    if service is None:
        service = IndexService(settings, PackageSiteClient(settings))

    @asynccontextmanager
    async def lifespan(app: Starlette):
        app.state.index_service = service
        await service.start()
        try:
            yield
        finally:
            await service.stop()
            await service.client.close()

    async def status_endpoint(request: Request) -> JSONResponse:
        return JSONResponse(service.status().to_dict())

    async def search_endpoint(request: Request) -> JSONResponse:
        query = request.query_params.get("q", "")
        response = await service.query(query)
        return JSONResponse(response.model_dump())

    async def retry_endpoint(request: Request) -> JSONResponse:
        identifier = f"{request.path_params['user']}/{request.path_params['project']}"
        if not service.retry(identifier):
            return JSONResponse(
                {"success": False, "message": f"Package '{identifier}' is not scheduled for indexing"},
                status_code=404,
            )
        return JSONResponse({"success": True, "package": identifier}, status_code=202)

    def metrics_endpoint(request: Request) -> Response:
        return Response(get_metrics(), media_type=get_metrics_content_type())

    routes = [
        Route("/health", endpoint=build_health_endpoint(service), methods=["GET"]),
        Route("/status", endpoint=status_endpoint, methods=["GET"]),
        Route("/search", endpoint=search_endpoint, methods=["GET"]),
        Route("/packages/{user}/{project}/retry", endpoint=retry_endpoint, methods=["POST"]),
        Route("/metrics", endpoint=metrics_endpoint, methods=["GET"]),
    ]

    return Starlette(
        debug=settings.log_level.lower() == "debug",
        routes=routes,
        middleware=[Middleware(TraceContextMiddleware)],
        lifespan=lifespan,
    )


def main() -> None:
    """Main entry point for the search server."""
    import uvicorn

    settings = Settings()
    configure_logging(settings.log_level, json_output=settings.json_logs)
    init_tracing()

    logger.info("Starting package docs search against %s", settings.package_site_url)
    app = create_app(settings)

    uvicorn.run(
        app,
        host=settings.search_host,
        port=settings.search_port,
        log_level=settings.log_level.lower(),
        log_config=None,  # Keep our logging configuration
    )


if __name__ == "__main__":
    main()
