"""Trace correlation ids carried across async tasks.

Every docs fetch task and every HTTP request starts its own trace, so JSON
log lines can be grouped by ``trace_id`` and, for fetches, by ``package``.
Tasks copy the context they are created in, so a trace started inside a task
never leaks into its siblings.
"""

from __future__ import annotations

from contextvars import ContextVar
from uuid import uuid4


trace_context: ContextVar[dict | None] = ContextVar("trace_context", default=None)


def _new_ids() -> dict[str, str]:
    return {"trace_id": uuid4().hex, "span_id": uuid4().hex[:16]}


def get_trace_context() -> dict:
    """Current trace context, creating one on first use."""
    ctx = trace_context.get()
    if not ctx or not ctx.get("trace_id"):
        ctx = _new_ids()
        trace_context.set(ctx)
    return ctx


def start_trace(trace_id: str | None = None, **extra: object) -> dict:
    """Begin a new trace for the current task, e.g. ``start_trace(package="elm/json")``.

    A ``trace_id`` propagated by a caller is kept; the span id is always fresh.
    """
    ctx: dict = _new_ids()
    if trace_id:
        ctx["trace_id"] = trace_id
    ctx.update(extra)
    trace_context.set(ctx)
    return ctx


def update_span_id(span_id: str) -> None:
    ctx = trace_context.get() or {}
    trace_context.set({**ctx, "span_id": span_id})
