"""Locale plugin: the object an application builds once and installs.

Usage:
    settings = LocaleSettings(LOCALES=["en_US", "tr_TR"], ORDER=["path", "query"])
    app = FastAPI()
    plugin = register(app, settings)

    plugin.get_supported_locales()  # ["en_US", "tr_TR"]
    request.state.i18n.get_locale()  # inside a handler
"""

from collections.abc import Callable
from typing import Any

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute

from request_locale.context import bind_request_state
from request_locale.core.config import LocaleSettings
from request_locale.core.exceptions import (
    LocaleConfigurationError,
    LocaleNotFoundError,
)
from request_locale.core.logging import get_logger
from request_locale.hooks import LocaleAccessors, LocaleCallback, callback_from
from request_locale.middleware import LocaleMiddleware, request_view_from_request
from request_locale.registry import LocaleRegistry, build_registry
from request_locale.resolver import (
    DefaultApplied,
    Outcome,
    Rejected,
    RequestView,
    Resolved,
    resolve,
)
from request_locale.sources import LookupSource, derive_order

logger = get_logger(__name__)


class LocalePlugin:
    """Supported locales, resolution order and request hooks.

    Everything is computed in the constructor; a bad configuration raises
    LocaleConfigurationError there, before any request is served. After
    construction the plugin is read-only and shared by all requests.
    """

    def __init__(
        self,
        settings: LocaleSettings,
        callback: Callable[[str], Any] | None = None,
    ) -> None:
        self.settings = settings
        self.registry: LocaleRegistry = build_registry(settings)
        self.order: tuple[LookupSource, ...] = derive_order(settings.ORDER, settings)
        self.strict = settings.STRICT
        self.accessors = LocaleAccessors(
            getter=settings.GETTER,
            setter=settings.SETTER,
            create_if_missing=settings.CREATE_ACCESSORS,
        )
        self.callback: LocaleCallback | None = callback_from(
            callback if callback is not None else settings.CALLBACK
        )

    def get_supported_locales(self) -> list[str]:
        return list(self.registry.supported)

    def get_default_locale(self) -> str:
        return self.registry.default

    def resolve(self, view: RequestView) -> Outcome:
        """Resolve one request; the caller decides what a rejection means."""
        outcome = resolve(view, self.order, self.registry, self.strict)
        if isinstance(outcome, Rejected):
            logger.info(
                "locale_rejected",
                requested=list(outcome.candidates),
                source=outcome.source.value if outcome.source else None,
                strict=self.strict,
            )
        return outcome

    def get_locale(self, view: RequestView) -> str:
        """Resolved locale, or the default one. Never rejects."""
        outcome = resolve(view, self.order, self.registry, self.strict)
        if isinstance(outcome, Resolved | DefaultApplied):
            return outcome.locale
        return self.registry.default

    def apply(self, state: dict[str, Any], locale: str) -> None:
        """Attach accessors and run the callback for one request."""
        self.accessors.attach(state, locale)
        if self.callback is not None:
            self.callback(state, locale)

    async def dependency(self, request: Request) -> str:
        """FastAPI dependency for the ``route`` event.

        Runs after routing, so ``request.path_params`` is already populated.
        """
        outcome = self.resolve(request_view_from_request(request))
        if isinstance(outcome, Rejected):
            raise LocaleNotFoundError(
                outcome.candidates,
                outcome.source.value if outcome.source else None,
            )

        state = request.scope.setdefault("state", {})
        bind_request_state(state)
        self.apply(state, outcome.locale)
        return outcome.locale

    def install(self, app: FastAPI) -> None:
        """Hook resolution into ``app`` on the configured event.

        For the ``route`` event the dependency is attached to the app router,
        which only covers routes registered afterwards; installing it on an
        app that already has API routes raises LocaleConfigurationError.
        """
        if self.settings.ON_EVENT == "route":
            registered = [
                route.path for route in app.router.routes if isinstance(route, APIRoute)
            ]
            if registered:
                raise LocaleConfigurationError(
                    "Register the locale plugin before declaring routes when "
                    f"ON_EVENT is \"route\"; already declared: {', '.join(registered)}",
                    setting="ON_EVENT",
                )

        app.add_exception_handler(LocaleNotFoundError, locale_not_found_handler)

        if self.settings.ON_EVENT == "route":
            app.router.dependencies.append(Depends(self.dependency))
        else:
            app.add_middleware(LocaleMiddleware, plugin=self)

        logger.info(
            "locale_plugin_installed",
            on_event=self.settings.ON_EVENT,
            order=[lookup.source.value for lookup in self.order],
            strict=self.strict,
        )


async def locale_not_found_handler(
    request: Request, exc: LocaleNotFoundError
) -> JSONResponse:
    """Render a rejected locale as a 404 JSON response."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def register(
    app: FastAPI,
    settings: LocaleSettings | None = None,
    callback: Callable[[str], Any] | None = None,
) -> LocalePlugin:
    """Build the plugin and install it on ``app``.

    Raises:
        LocaleConfigurationError: The locale set could not be built; the
            application must not start.
    """
    plugin = LocalePlugin(settings or LocaleSettings(), callback=callback)
    app.state.locale_plugin = plugin
    plugin.install(app)
    return plugin
