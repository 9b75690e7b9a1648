"""Logging and tracing for ministate operations."""

from ministate.observability.context import bound, current_context, span_ids
from ministate.observability.logging import ContextFilter, JsonFormatter, PlainFormatter, configure_logging
from ministate.observability.tracing import create_span, get_tracer, init_tracing, reset_tracer


__all__ = [
    "ContextFilter",
    "JsonFormatter",
    "PlainFormatter",
    "bound",
    "configure_logging",
    "create_span",
    "current_context",
    "get_tracer",
    "init_tracing",
    "reset_tracer",
    "span_ids",
]
