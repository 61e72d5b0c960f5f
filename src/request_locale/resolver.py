"""Per-request locale resolution.

The resolver walks the configured lookups in priority order. The first
source that carries any value decides the request: its candidates are
matched against the registry and, when none is supported, later sources
are NOT consulted. Whether that ends in the default locale or a rejection
depends on the source (a locale in the path always rejects) and on strict
mode.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from request_locale.core.logging import get_logger
from request_locale.registry import LocaleRegistry
from request_locale.sources import LocaleSource, LookupSource

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class RequestView:
    """Read-only projection of the request attributes a locale may come from.

    Values are either a string or an ordered sequence of strings (most
    preferred first). Cookie values may also be a mapping for structured
    cookies. Header keys are expected in lower case.
    """

    path_params: Mapping[str, Any] = field(default_factory=dict)
    query_params: Mapping[str, Any] = field(default_factory=dict)
    headers: Mapping[str, Any] = field(default_factory=dict)
    cookies: Mapping[str, Any] = field(default_factory=dict)

    def bag(self, source: LocaleSource) -> Mapping[str, Any]:
        if source is LocaleSource.PATH:
            return self.path_params
        if source is LocaleSource.QUERY:
            return self.query_params
        if source is LocaleSource.HEADER:
            return self.headers
        return self.cookies


@dataclass(frozen=True, slots=True)
class Resolved:
    locale: str
    source: LocaleSource


@dataclass(frozen=True, slots=True)
class DefaultApplied:
    locale: str


@dataclass(frozen=True, slots=True)
class Rejected:
    """No acceptable locale; the request should be answered with 404."""

    candidates: tuple[str, ...]
    source: LocaleSource | None


Outcome = Resolved | DefaultApplied | Rejected


def _as_candidates(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value] if value else []
    if isinstance(value, Sequence):
        return [v for v in value if isinstance(v, str) and v]
    return []


def requested_locales(view: RequestView, lookup: LookupSource) -> list[str]:
    """Return the candidates one source carries, most preferred first.

    Empty strings count as absent. For a cookie with a nested key the cookie
    value must be a mapping; any other shape yields no candidates.
    """
    bag = view.bag(lookup.source)
    key = lookup.key.lower() if lookup.source is LocaleSource.HEADER else lookup.key
    value = bag.get(key)

    if lookup.nested_key is not None:
        if not isinstance(value, Mapping):
            return []
        value = value.get(lookup.nested_key)

    return _as_candidates(value)


def first_requested(
    view: RequestView, order: Sequence[LookupSource]
) -> tuple[LookupSource | None, list[str]]:
    """Find the highest-priority source that carries any candidate."""
    for lookup in order:
        candidates = requested_locales(view, lookup)
        if candidates:
            return lookup, candidates
    return None, []


def resolve(
    view: RequestView,
    order: Sequence[LookupSource],
    registry: LocaleRegistry,
    strict: bool = False,
) -> Outcome:
    """Decide the locale for one request.

    Args:
        view: The request's path, query, header and cookie values.
        order: Lookups in priority order, as built by ``derive_order``.
        registry: Supported locales and default.
        strict: Reject instead of falling back to the default locale.

    Returns:
        ``Resolved`` with the first supported candidate of the first source
        that has any; otherwise ``Rejected`` when that source is the path
        or ``strict`` is set, else ``DefaultApplied``.
    """
    lookup, candidates = first_requested(view, order)

    for candidate in candidates:
        if registry.is_supported(candidate):
            logger.debug(
                "locale_resolved", locale=candidate, source=lookup.source.value
            )
            return Resolved(candidate, lookup.source)

    source = lookup.source if lookup is not None else None
    if source is LocaleSource.PATH or strict:
        return Rejected(tuple(candidates), source)

    logger.debug(
        "locale_default_applied",
        locale=registry.default,
        requested=candidates,
        source=source.value if source else None,
    )
    return DefaultApplied(registry.default)
