"""
Observability helpers: structured logging with run/node trace context.

- ContextVar-based propagation, safe across asyncio tasks
- JSON output for production, colorized output for development
"""

from mediaflow.observability.logging import (
    clear_trace_context,
    configure_logging,
    get_trace_context,
    set_trace_context,
)

__all__ = [
    "configure_logging",
    "get_trace_context",
    "set_trace_context",
    "clear_trace_context",
]
