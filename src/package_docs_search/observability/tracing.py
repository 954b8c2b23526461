"""OpenTelemetry spans for package site calls, plus request trace propagation."""

from __future__ import annotations

from contextlib import contextmanager
import logging
from typing import TYPE_CHECKING, Any

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.trace import SpanKind, Status, StatusCode

from .context import get_trace_context, start_trace, update_span_id


if TYPE_CHECKING:
    from collections.abc import Generator

    from opentelemetry.trace import Span, Tracer

logger = logging.getLogger(__name__)

TRACE_HEADER = b"x-trace-id"

_tracer_holder: dict[str, Tracer | None] = {"tracer": None}


def init_tracing(
    service_name: str = "package-docs-search",
    resource_attributes: dict[str, str] | None = None,
) -> TracerProvider:
    """Install an SDK tracer provider; spans stay in process since no exporter is configured."""
    provider = TracerProvider(resource=Resource.create({"service.name": service_name, **(resource_attributes or {})}))
    trace.set_tracer_provider(provider)
    _tracer_holder["tracer"] = trace.get_tracer(__name__)
    logger.info("Tracing initialized for service: %s", service_name)
    return provider


def get_tracer() -> Tracer:
    if _tracer_holder["tracer"] is None:
        _tracer_holder["tracer"] = trace.get_tracer(__name__)
    return _tracer_holder["tracer"]  # type: ignore[return-value]


@contextmanager
def create_span(
    name: str,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: dict[str, Any] | None = None,
) -> Generator[Span, None, None]:
    """Run the block inside a span, recording any exception on it before re-raising.

    The span is tagged with the package of the current trace, if any.
    """
    span_attributes = dict(attributes or {})
    if package := get_trace_context().get("package"):
        span_attributes.setdefault("package.identifier", package)

    with get_tracer().start_as_current_span(name, kind=kind, attributes=span_attributes) as span:
        span_context = span.get_span_context()
        if span_context.is_valid:
            update_span_id(format(span_context.span_id, "016x"))
        try:
            yield span
        except Exception as exc:
            span.set_status(Status(StatusCode.ERROR, str(exc)))
            span.record_exception(exc)
            raise


def package_from_path(path: str) -> str | None:
    """``/packages/{user}/{project}/...`` -> ``user/project``."""
    parts = path.strip("/").split("/")
    if len(parts) >= 3 and parts[0] == "packages" and parts[1] and parts[2]:
        return f"{parts[1]}/{parts[2]}"
    return None


class TraceContextMiddleware:
    """ASGI middleware starting one trace per HTTP request.

    An incoming ``X-Trace-Id`` header is honoured; package routes also tag
    the trace with the package they act on.
    """

    def __init__(self, app: Any) -> None:
        self.app = app

    async def __call__(self, scope: dict, receive: Any, send: Any) -> None:
        if scope["type"] == "http":
            headers = dict(scope.get("headers", []))
            trace_id = headers.get(TRACE_HEADER, b"").decode() or None
            package = package_from_path(scope.get("path", ""))
            start_trace(trace_id, **({"package": package} if package else {}))
        await self.app(scope, receive, send)
