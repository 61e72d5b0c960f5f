"""Request sources a locale can be read from, and their lookup keys.

The configured order (e.g. ``["cookie", "query"]``) is turned into concrete
lookups once at start-up so the resolver never touches settings per request.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from request_locale.core.config import LocaleSettings
from request_locale.core.exceptions import LocaleConfigurationError


class LocaleSource(str, Enum):
    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    COOKIE = "cookie"


VALID_SOURCES: frozenset[str] = frozenset(s.value for s in LocaleSource)


@dataclass(frozen=True, slots=True)
class LookupSource:
    """Where to look in a request: which bag, under which key.

    ``nested_key`` only applies to cookies, whose value may be a structured
    object (``{"lang": {"lang": "en_US"}}``).
    """

    source: LocaleSource
    key: str
    nested_key: str | None = None


def validate_order(source_names: Iterable[str]) -> None:
    """Raise LocaleConfigurationError for any unknown source name."""
    for name in source_names:
        if name not in VALID_SOURCES:
            raise LocaleConfigurationError(
                f'Unknown locale source "{name}" in order; '
                f"expected one of: {', '.join(s.value for s in LocaleSource)}",
                setting="ORDER",
            )


def derive_order(
    source_names: Iterable[str], settings: LocaleSettings
) -> tuple[LookupSource, ...]:
    """Map source names to lookups using the configured key names."""
    names = list(source_names)
    validate_order(names)

    keys = {
        LocaleSource.PATH: settings.PARAM_NAME,
        LocaleSource.QUERY: settings.QUERY_NAME,
        LocaleSource.HEADER: settings.HEADER_NAME,
        LocaleSource.COOKIE: settings.COOKIE_NAME,
    }

    order: list[LookupSource] = []
    for name in names:
        source = LocaleSource(name)
        if source is LocaleSource.COOKIE:
            order.append(LookupSource(source, keys[source], settings.COOKIE_KEY))
        else:
            order.append(LookupSource(source, keys[source]))
    return tuple(order)
