"""Tests for per-request locale resolution."""

from request_locale.registry import LocaleRegistry
from request_locale.resolver import (
    DefaultApplied,
    Rejected,
    RequestView,
    Resolved,
    requested_locales,
    resolve,
)
from request_locale.sources import LocaleSource, LookupSource

ALL_SOURCES = ["path", "query", "header", "cookie"]


class TestRequestedLocales:
    """Tests for extracting candidates from one source."""

    def test_single_string_becomes_list(self):
        """A plain value is one candidate."""
        view = RequestView(query_params={"lang": "tr_TR"})
        lookup = LookupSource(LocaleSource.QUERY, "lang")
        assert requested_locales(view, lookup) == ["tr_TR"]

    def test_multi_value_keeps_order(self):
        """Multiple values keep their preference order."""
        view = RequestView(headers={"accept-language": ["de_DE", "tr_TR"]})
        lookup = LookupSource(LocaleSource.HEADER, "accept-language")
        assert requested_locales(view, lookup) == ["de_DE", "tr_TR"]

    def test_empty_values_are_absent(self):
        """Empty strings never count as candidates."""
        view = RequestView(query_params={"lang": ["", "en_US", ""]})
        lookup = LookupSource(LocaleSource.QUERY, "lang")
        assert requested_locales(view, lookup) == ["en_US"]
        assert requested_locales(RequestView(query_params={"lang": ""}), lookup) == []

    def test_header_key_is_case_insensitive(self):
        """Header keys are matched in lower case."""
        view = RequestView(headers={"x-locale": "tr_TR"})
        lookup = LookupSource(LocaleSource.HEADER, "X-Locale")
        assert requested_locales(view, lookup) == ["tr_TR"]

    def test_nested_cookie(self):
        """Structured cookies are read through the inner key."""
        view = RequestView(cookies={"prefs": {"lang": "tr_TR", "theme": "dark"}})
        lookup = LookupSource(LocaleSource.COOKIE, "prefs", "lang")
        assert requested_locales(view, lookup) == ["tr_TR"]

    def test_nested_cookie_with_plain_value(self):
        """A plain cookie has no inner key to read."""
        view = RequestView(cookies={"prefs": "tr_TR"})
        lookup = LookupSource(LocaleSource.COOKIE, "prefs", "lang")
        assert requested_locales(view, lookup) == []

    def test_plain_cookie_without_nested_key(self):
        """Without an inner key the cookie value is used directly."""
        view = RequestView(cookies={"lang": "tr_TR"})
        lookup = LookupSource(LocaleSource.COOKIE, "lang")
        assert requested_locales(view, lookup) == ["tr_TR"]


class TestResolve:
    """Tests for the first-source-wins resolution policy."""

    def test_highest_priority_source_wins(self, registry, make_order):
        """The first source with a supported value is used."""
        view = RequestView(
            path_params={"lang": "tr_TR"},
            query_params={"lang": "en_US"},
        )
        outcome = resolve(view, make_order(ALL_SOURCES), registry)
        assert outcome == Resolved("tr_TR", LocaleSource.PATH)

    def test_first_supported_candidate(self, registry, make_order):
        """Unsupported candidates are skipped within a source."""
        view = RequestView(headers={"accept-language": ["de_DE", "tr_TR", "en_US"]})
        outcome = resolve(view, make_order(ALL_SOURCES), registry)
        assert outcome == Resolved("tr_TR", LocaleSource.HEADER)

    def test_absent_sources_are_skipped(self, registry, make_order):
        """Missing and empty values fall through to the next source."""
        view = RequestView(
            path_params={"lang": ""},
            cookies={"lang": "tr_TR"},
        )
        outcome = resolve(view, make_order(ALL_SOURCES), registry)
        assert outcome == Resolved("tr_TR", LocaleSource.COOKIE)

    def test_unsupported_query_applies_default(self, registry, make_order):
        """Outside the path and strict mode the default is applied."""
        view = RequestView(query_params={"lang": "de_DE"})
        outcome = resolve(view, make_order(ALL_SOURCES), registry)
        assert outcome == DefaultApplied("en_US")

    def test_unsupported_path_rejects(self, registry, make_order):
        """An unsupported locale in the path always rejects."""
        view = RequestView(path_params={"lang": "de_DE"})
        outcome = resolve(view, make_order(ALL_SOURCES), registry, strict=False)
        assert outcome == Rejected(("de_DE",), LocaleSource.PATH)

    def test_strict_rejects_unsupported(self, registry, make_order):
        """Strict mode rejects instead of falling back."""
        view = RequestView(query_params={"lang": "de_DE"})
        outcome = resolve(view, make_order(ALL_SOURCES), registry, strict=True)
        assert outcome == Rejected(("de_DE",), LocaleSource.QUERY)

    def test_no_candidates_applies_default(self, registry, make_order):
        """A request without any locale hint gets the default."""
        outcome = resolve(RequestView(), make_order(ALL_SOURCES), registry)
        assert outcome == DefaultApplied("en_US")

    def test_no_candidates_strict_rejects(self, registry, make_order):
        """Strict mode also rejects requests without any hint."""
        outcome = resolve(RequestView(), make_order(ALL_SOURCES), registry, strict=True)
        assert outcome == Rejected((), None)

    def test_no_fallthrough_after_unsupported_cookie(self, make_order):
        """The first non-empty source decides even if later ones would match."""
        registry = LocaleRegistry(supported=("en_US",), default="en_US")
        order = make_order(["cookie", "query"], COOKIE_NAME="lang", COOKIE_KEY="lang")
        view = RequestView(
            cookies={"lang": {"lang": "fr_FR"}},
            query_params={"lang": "de_DE"},
        )
        assert resolve(view, order, registry) == DefaultApplied("en_US")

    def test_no_fallthrough_to_supported_source(self, registry, make_order):
        """A supported value in a lower-priority source is ignored."""
        view = RequestView(
            query_params={"lang": "de_DE"},
            headers={"accept-language": ["tr_TR"]},
        )
        outcome = resolve(view, make_order(["query", "header"]), registry)
        assert outcome == DefaultApplied("en_US")

    def test_path_source_not_in_order(self, registry, make_order):
        """Path values are ignored when the path is not in the order."""
        view = RequestView(path_params={"lang": "de_DE"}, query_params={"lang": "tr_TR"})
        outcome = resolve(view, make_order(["query"]), registry)
        assert outcome == Resolved("tr_TR", LocaleSource.QUERY)

    def test_exact_comparison(self, registry, make_order):
        """Locale identifiers are compared without normalization."""
        view = RequestView(query_params={"lang": "tr_tr"})
        outcome = resolve(view, make_order(["query"]), registry)
        assert outcome == DefaultApplied("en_US")

    def test_resolve_is_idempotent(self, registry, make_order):
        """Same inputs give the same outcome."""
        order = make_order(ALL_SOURCES)
        view = RequestView(
            query_params={"lang": ["de_DE", "tr_TR"]},
            headers={"accept-language": ["en_US"]},
        )
        assert resolve(view, order, registry) == resolve(view, order, registry)
