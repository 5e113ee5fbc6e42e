# user_audit/core/context.py

import contextvars
import uuid
from typing import Optional

correlation_id_ctx = contextvars.ContextVar("correlation_id", default=None)


class CorrelationIdUnavailableError(RuntimeError):
    """Raised when no correlation id can be generated. Fatal to the request."""


def new_correlation_id() -> str:
    """Generate a fresh correlation id. No retry: entropy failure fails closed."""
    try:
        return str(uuid.uuid4())
    except (OSError, NotImplementedError) as e:
        raise CorrelationIdUnavailableError(
            f"Cannot generate correlation id: {e}"
        ) from e


def bind_correlation_id(supplied: Optional[str] = None) -> str:
    """
    Adopt the caller-supplied id unchanged, or generate one if none was supplied.
    The result is bound to the current context for the lifetime of the request.
    """
    correlation_id = supplied if supplied and supplied.strip() else new_correlation_id()
    correlation_id_ctx.set(correlation_id)
    return correlation_id


def get_correlation_id() -> Optional[str]:
    return correlation_id_ctx.get()
