"""Attach the resolved locale to a request.

Two integration points run after a locale has been chosen:

- accessors: a zero-argument getter and a one-argument setter placed at
  dotted slots on ``request.state`` (``i18n.get_locale`` becomes
  ``request.state.i18n.get_locale()``);
- a callback, either a plain function or the name of a method reachable
  from ``request.state``, called with the locale.

Both operate on the request's ``scope["state"]`` dict so they work the same
from ASGI middleware and from a FastAPI dependency.
"""

from collections.abc import Callable
from dataclasses import dataclass
from types import SimpleNamespace
from typing import Any

from request_locale.context import LOCALE_STATE_KEY
from request_locale.core.exceptions import LocaleConfigurationError
from request_locale.core.logging import get_logger

logger = get_logger(__name__)

_MISSING = object()


def get_slot(state: dict[str, Any], path: str) -> Any:
    """Read a dotted slot from request state; returns None when absent."""
    head, *rest = path.split(".")
    current = state.get(head, _MISSING)
    for part in rest:
        if current is _MISSING:
            break
        if isinstance(current, dict):
            current = current.get(part, _MISSING)
        else:
            current = getattr(current, part, _MISSING)
    return None if current is _MISSING else current


def set_slot(state: dict[str, Any], path: str, value: Any) -> None:
    """Write a dotted slot, creating intermediate namespaces as needed."""
    head, *rest = path.split(".")
    if not rest:
        state[head] = value
        return

    node = state.get(head)
    if node is None:
        node = state[head] = SimpleNamespace()
    for part in rest[:-1]:
        child = node.get(part) if isinstance(node, dict) else getattr(node, part, None)
        if child is None:
            child = SimpleNamespace()
            if isinstance(node, dict):
                node[part] = child
            else:
                setattr(node, part, child)
        node = child

    if isinstance(node, dict):
        node[rest[-1]] = value
    else:
        setattr(node, rest[-1], value)


@dataclass(frozen=True, slots=True)
class LocaleAccessors:
    """Getter/setter slots to populate on ``request.state``."""

    getter: str | None = "i18n.get_locale"
    setter: str | None = "i18n.set_locale"
    create_if_missing: bool = True

    def attach(self, state: dict[str, Any], locale: str) -> None:
        state[LOCALE_STATE_KEY] = locale

        def get_locale() -> str:
            return state.get(LOCALE_STATE_KEY, locale)

        def set_request_locale(value: str) -> None:
            state[LOCALE_STATE_KEY] = value

        for path, fn in ((self.getter, get_locale), (self.setter, set_request_locale)):
            if not path:
                continue
            if self.create_if_missing and get_slot(state, path) is not None:
                continue
            set_slot(state, path, fn)


@dataclass(frozen=True, slots=True)
class InvokeFunction:
    fn: Callable[[str], Any]

    def __call__(self, state: dict[str, Any], locale: str) -> None:
        self.fn(locale)


@dataclass(frozen=True, slots=True)
class InvokeNamedMethod:
    """Call the method found at a dotted slot on ``request.state``."""

    name: str

    def __call__(self, state: dict[str, Any], locale: str) -> None:
        method = get_slot(state, self.name)
        if not callable(method):
            logger.warning("locale_callback_missing", callback=self.name)
            return
        method(locale)


LocaleCallback = InvokeFunction | InvokeNamedMethod


def callback_from(value: Callable[[str], Any] | str | None) -> LocaleCallback | None:
    """Turn a configured callback into its invocation variant."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        return InvokeNamedMethod(value)
    if callable(value):
        return InvokeFunction(value)
    raise LocaleConfigurationError(
        f"Locale callback must be a callable or a method name, got {value!r}",
        setting="CALLBACK",
    )
