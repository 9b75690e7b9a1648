"""Log context bound to the current execution context.

Fields bound here (application, operation, format, trace and span ids) are
attached to every log record emitted while they are bound.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from collections.abc import Iterator

    from opentelemetry.trace import Span

log_context: ContextVar[dict[str, Any] | None] = ContextVar("ministate_log_context", default=None)


def current_context() -> dict[str, Any]:
    """Return a copy of the fields bound in the current context."""
    return dict(log_context.get() or {})


@contextmanager
def bound(**fields: Any) -> Iterator[dict[str, Any]]:
    """Bind ``fields`` for the duration of a ``with`` block.

    ``None`` values are skipped. Inner bindings shadow outer ones and the
    previous context is restored on exit.
    """
    merged = {**current_context(), **{key: value for key, value in fields.items() if value is not None}}
    token = log_context.set(merged)
    try:
        yield dict(merged)
    finally:
        log_context.reset(token)


def span_ids(span: Span) -> dict[str, str]:
    """Return the hex trace and span ids of ``span``; empty for a non-recording span."""
    ctx = span.get_span_context()
    if not ctx.is_valid:
        return {}
    return {
        "trace_id": format(ctx.trace_id, "032x"),
        "span_id": format(ctx.span_id, "016x"),
    }
