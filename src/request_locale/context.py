"""Current request locale for code that has no request object at hand.

The middleware (or the route dependency) binds the request's
``scope["state"]`` dict here; the resolved locale lives in that dict under
``LOCALE_STATE_KEY``. Services, templates and error handlers read it with
``get_locale()``. Since the dict is shared, sync dependencies running in the
threadpool and the ``request.state`` accessors all see the same value.
"""

from contextvars import ContextVar, Token
from typing import Any

LOCALE_STATE_KEY = "_request_locale"

_request_state: ContextVar[dict[str, Any] | None] = ContextVar(
    "request_locale_state", default=None
)


def get_locale(default: str | None = None) -> str | None:
    """Locale of the request bound to this context, else ``default``."""
    state = _request_state.get()
    if state is None:
        return default
    value = state.get(LOCALE_STATE_KEY)
    return value if isinstance(value, str) else default


def set_locale(locale: str) -> None:
    """Change the locale of the request bound to this context.

    Raises:
        LookupError: No request is bound (called outside a request).
    """
    state = _request_state.get()
    if state is None:
        raise LookupError("No request state is bound to the current context")
    state[LOCALE_STATE_KEY] = locale


def bind_request_state(state: dict[str, Any]) -> Token[dict[str, Any] | None]:
    return _request_state.set(state)


def unbind_request_state(token: Token[dict[str, Any] | None]) -> None:
    _request_state.reset(token)
