"""Spans and timing for memory store operations.

Every ChromaVectorStore operation runs inside trace_operation. The caller
names the collection (and the result limit for searches) up front, then
fills in what it learned along the way through the dict the context manager
yields: the generated id on add, the number of hits on search, the item
count left after clear. Both sets of attributes go onto the Logfire span
when tracing is on, and onto the debug line logged when the operation ends.

Logfire is an optional extra:
    ENABLE_LOGFIRE=true
    LOGFIRE_TOKEN=your-token  # only needed for the hosted dashboard
"""

import logging
import time
from contextlib import contextmanager, nullcontext
from dataclasses import dataclass, field
from typing import Any, Generator

logger = logging.getLogger(__name__)

SERVICE_NAME = "semantic-memory"


@dataclass
class TracingContext:
    """Process-wide tracing state set by setup_tracing()."""
    enabled: bool = False
    service_name: str = SERVICE_NAME
    token: str = ""
    _logfire_configured: bool = field(default=False, init=False)

    @property
    def active(self) -> bool:
        return self.enabled and self._logfire_configured


_context = TracingContext()


def setup_tracing(
    enabled: bool = False,
    service_name: str = SERVICE_NAME,
    token: str = "",
) -> TracingContext:
    """Send memory operation spans to Logfire.

    A missing logfire package or a failing configure() leaves tracing off;
    store operations then only produce their debug timing lines.

    Args:
        enabled: ENABLE_LOGFIRE
        service_name: Service the spans are reported under
        token: LOGFIRE_TOKEN, empty for local-only export

    Returns:
        The shared TracingContext
    """
    _context.enabled = enabled
    _context.service_name = service_name
    _context.token = token
    _context._logfire_configured = False

    if not enabled:
        return _context

    try:
        import logfire

        logfire.configure(service_name=service_name, token=token or None)
    except ImportError:
        logger.warning("logfire is not installed | tracing disabled")
        _context.enabled = False
    except Exception as e:
        logger.error("Logfire configuration failed | error=%s", e)
        _context.enabled = False
    else:
        _context._logfire_configured = True
        logger.info("Tracing memory operations | service=%s", service_name)

    return _context


def _span(name: str, attributes: dict[str, Any]):
    if not _context.active:
        return nullcontext()

    import logfire

    return logfire.span(name, **attributes)


def _describe(attributes: dict[str, Any]) -> str:
    return " ".join(f"{key}={value}" for key, value in attributes.items())


@contextmanager
def trace_operation(
    name: str,
    attributes: dict[str, Any] | None = None,
) -> Generator[dict[str, Any], None, None]:
    """Time a store operation and record what it touched.

    Args:
        name: Operation name, e.g. ``memory.search``
        attributes: Attributes known before the operation starts

    Yields:
        Dict for outcomes discovered during the operation. Only recorded
        when the block completes without raising.

    Example:
        >>> with trace_operation("memory.search", {"limit": 5}) as outcome:
        ...     outcome["results"] = 3
    """
    attributes = dict(attributes or {})
    outcome: dict[str, Any] = {}
    start = time.perf_counter()

    try:
        with _span(name, attributes) as span:
            yield outcome
            if span is not None:
                for key, value in outcome.items():
                    span.set_attribute(key, value)
    except Exception:
        logger.debug("%s failed after %.3fs", name, time.perf_counter() - start)
        raise

    logger.debug(
        "%s finished in %.3fs | %s",
        name, time.perf_counter() - start, _describe({**attributes, **outcome}),
    )
