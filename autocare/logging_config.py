"""
Logging setup and request correlation ids.

Every log record carries the correlation id of the request that produced it,
so a single request can be followed across the service layer.
"""
import logging
import uuid
from contextvars import ContextVar

CORRELATION_ID_HEADER = "X-Correlation-ID"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(correlation_id)s] %(name)s: %(message)s"
HANDLER_NAME = "autocare"

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def get_correlation_id(fallback: str | None = None) -> str | None:
    """Return the current request's correlation id, or ``fallback``."""
    value = _correlation_id.get()
    return value if value is not None else fallback


def set_correlation_id(value: str | None):
    """Bind ``value`` to the current context. Returns a reset token."""
    return _correlation_id.set(value)


def reset_correlation_id(token) -> None:
    _correlation_id.reset(token)


def new_correlation_id() -> str:
    return f"req-{uuid.uuid4().hex[:8]}"


class CorrelationIdFilter(logging.Filter):
    """Stamp ``record.correlation_id`` on every record passing through."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id("-")
        return True


def configure_logging(level: str = "INFO") -> None:
    """Install a single stream handler on the root logger."""
    root = logging.getLogger()
    root.setLevel(level.upper())
    if any(h.get_name() == HANDLER_NAME for h in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(CorrelationIdFilter())
    root.addHandler(handler)
