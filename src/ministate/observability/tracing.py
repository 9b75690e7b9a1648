"""OpenTelemetry spans around import and export operations."""

from __future__ import annotations

from contextlib import contextmanager
import logging
from typing import TYPE_CHECKING, Any

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.trace import SpanKind, Status, StatusCode

from ministate.observability.context import bound, span_ids


if TYPE_CHECKING:
    from collections.abc import Iterator

    from opentelemetry.trace import Span, Tracer

logger = logging.getLogger(__name__)

# Cached tracer; None means "ask the global provider on next use"
_tracer_holder: dict[str, Tracer | None] = {"tracer": None}


def init_tracing(service_name: str = "ministate", resource_attributes: dict[str, str] | None = None) -> TracerProvider:
    """Install a global TracerProvider and return it.

    The provider has no span processor. Attach one (for example a
    ``BatchSpanProcessor`` with an exporter) to ship spans anywhere.
    """
    provider = TracerProvider(resource=Resource.create({"service.name": service_name, **(resource_attributes or {})}))
    trace.set_tracer_provider(provider)
    _tracer_holder["tracer"] = provider.get_tracer("ministate")
    logger.debug("Tracing initialized for service %s", service_name)
    return provider


def get_tracer() -> Tracer:
    tracer = _tracer_holder["tracer"]
    if tracer is None:
        tracer = trace.get_tracer("ministate")
        _tracer_holder["tracer"] = tracer
    return tracer


def reset_tracer() -> None:
    """Drop the cached tracer so the next span picks up the current global provider."""
    _tracer_holder["tracer"] = None


@contextmanager
def create_span(
    name: str,
    attributes: dict[str, Any] | None = None,
    *,
    kind: SpanKind = SpanKind.INTERNAL,
) -> Iterator[Span]:
    """Run the block inside a span.

    Log records emitted inside the block carry the span's trace and span ids.
    An exception marks the span as failed, is recorded on it and propagates.
    """
    with get_tracer().start_as_current_span(
        name,
        kind=kind,
        attributes=attributes,
        record_exception=False,
        set_status_on_exception=False,
    ) as span, bound(**span_ids(span)):
        try:
            yield span
        except Exception as exc:
            span.set_status(Status(StatusCode.ERROR, f"{type(exc).__name__}: {exc}"))
            span.record_exception(exc)
            raise
