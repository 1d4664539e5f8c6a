"""Per-search logging context.

Fields bound here (entity kind, query) are attached to every log line emitted
while the context is active, including lines from the matcher and index.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any


search_context: ContextVar[dict[str, Any] | None] = ContextVar("search_context", default=None)


def get_search_context() -> dict[str, Any]:
    """Fields bound in the current context (empty when none)."""
    return dict(search_context.get() or {})


@contextmanager
def bind_search_context(**fields: Any) -> Iterator[dict[str, Any]]:
    """Attach ``fields`` to log lines for the duration of the block.

    Nested bindings extend the outer ones; the outer context is restored on
    exit.
    """
    merged = {**(search_context.get() or {}), **fields}
    token = search_context.set(merged)
    try:
        yield merged
    finally:
        search_context.reset(token)
