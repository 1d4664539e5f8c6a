"""Observability module: structured logging with per-search context."""

from classroom_search.observability.context import bind_search_context, get_search_context
from classroom_search.observability.logging import JsonFormatter, configure_logging


__all__ = [
    "JsonFormatter",
    "bind_search_context",
    "configure_logging",
    "get_search_context",
]
