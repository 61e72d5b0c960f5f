"""Request-time locale resolution for Starlette/FastAPI applications.

Decides which of the supported locales applies to a request by looking at
path parameters, query parameters, cookies and headers in a configured
order, then exposes the result on ``request.state`` and in a context
variable. Supported locales come from settings, a JSON/TOML config file,
or a directory scan.

No translation is done here; pair it with whatever message catalog the
application uses.
"""

from request_locale.context import get_locale, set_locale
from request_locale.core.config import LocaleSettings, get_settings
from request_locale.core.exceptions import (
    AppException,
    LocaleConfigurationError,
    LocaleNotFoundError,
)
from request_locale.hooks import (
    InvokeFunction,
    InvokeNamedMethod,
    LocaleAccessors,
    callback_from,
)
from request_locale.middleware import (
    LocaleMiddleware,
    parse_accept_language,
    request_view_from_request,
    request_view_from_scope,
)
from request_locale.plugin import LocalePlugin, register
from request_locale.registry import LocaleRegistry, build_registry, scan_locales
from request_locale.resolver import (
    DefaultApplied,
    Outcome,
    Rejected,
    RequestView,
    Resolved,
    resolve,
)
from request_locale.sources import LocaleSource, LookupSource, derive_order

__all__ = [
    "AppException",
    "DefaultApplied",
    "InvokeFunction",
    "InvokeNamedMethod",
    "LocaleAccessors",
    "LocaleConfigurationError",
    "LocaleMiddleware",
    "LocaleNotFoundError",
    "LocalePlugin",
    "LocaleRegistry",
    "LocaleSettings",
    "LocaleSource",
    "LookupSource",
    "Outcome",
    "Rejected",
    "RequestView",
    "Resolved",
    "build_registry",
    "callback_from",
    "derive_order",
    "get_locale",
    "get_settings",
    "parse_accept_language",
    "register",
    "request_view_from_request",
    "request_view_from_scope",
    "resolve",
    "scan_locales",
    "set_locale",
]
