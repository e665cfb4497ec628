"""Logging and optional Logfire tracing for the memory store.

setup_logging:
    stderr plus rotating `memory.log`, text or JSON, tagged with the
    per-command op id from set_op_context.

trace_operation:
    Wraps each store operation; the yielded dict collects outcomes such as
    the new item id or the number of search hits.

setup_tracing:
    Turns trace_operation blocks into Logfire spans (ENABLE_LOGFIRE=true,
    needs the `tracing` extra).
"""

from observability.logging import setup_logging, set_op_context
from observability.tracing import setup_tracing, trace_operation, TracingContext

__all__ = [
    "setup_logging",
    "set_op_context",
    "setup_tracing",
    "trace_operation",
    "TracingContext",
]
