"""ASGI integration: build request views and resolve the locale per request.

Uses pure ASGI middleware to avoid BaseHTTPMiddleware's contextvars issues.
See: https://github.com/encode/starlette/discussions/1729

Path parameters are not in the scope yet when middleware runs (routing
happens further down the stack), so the middleware matches the app's routes
itself to recover them.
"""

from collections.abc import Iterable
import json
from typing import TYPE_CHECKING, Any
from urllib.parse import unquote

from starlette.datastructures import Headers, MutableHeaders, QueryParams
from starlette.requests import Request, cookie_parser
from starlette.responses import JSONResponse
from starlette.routing import BaseRoute, Match, Mount
from starlette.types import ASGIApp, Message, Receive, Scope, Send
from starlette.websockets import WebSocketClose

from request_locale.context import (
    LOCALE_STATE_KEY,
    bind_request_state,
    unbind_request_state,
)
from request_locale.core.exceptions import LocaleNotFoundError
from request_locale.resolver import Rejected, RequestView

if TYPE_CHECKING:
    from request_locale.plugin import LocalePlugin

ACCEPT_LANGUAGE = "accept-language"


def parse_accept_language(header: str | None) -> list[str]:
    """Parse an Accept-Language header into language tags, best first.

    Handles formats like:
    - "en-US,en;q=0.9,es;q=0.8"
    - "fr"
    - "tr_TR, en_US;q=0.5"

    Tags keep their original spelling; ties keep header order. Wildcards and
    tags with q=0 are dropped.
    """
    if not header:
        return []

    languages: list[tuple[str, float]] = []

    for raw_part in header.split(","):
        part = raw_part.strip()
        if not part:
            continue

        if ";" in part:
            lang, quality_part = part.split(";", 1)
            lang = lang.strip()
            try:
                q_value = float(quality_part.strip().split("=")[1])
            except (IndexError, ValueError):
                q_value = 1.0
        else:
            lang = part
            q_value = 1.0

        if not lang or lang == "*" or q_value <= 0:
            continue
        languages.append((lang, q_value))

    # sort() is stable, so equal weights keep header order
    languages.sort(key=lambda x: x[1], reverse=True)
    return [lang for lang, _ in languages]


def _decode_cookie(value: str) -> Any:
    """Structured cookies hold a JSON object; anything else stays a string."""
    text = unquote(value) if value.startswith("%7B") else value
    if text.startswith("{"):
        try:
            decoded = json.loads(text)
        except ValueError:
            return value
        if isinstance(decoded, dict):
            return decoded
    return value


def _single_or_list(values: list[str]) -> str | list[str]:
    return values[0] if len(values) == 1 else values


def request_view_from_scope(
    scope: Scope, path_params: dict[str, Any] | None = None
) -> RequestView:
    """Project an ASGI scope onto the four locale source bags."""
    query = QueryParams(scope.get("query_string", b""))
    query_params = {key: _single_or_list(query.getlist(key)) for key in query}

    raw_headers = Headers(scope=scope)
    headers: dict[str, Any] = {
        key: _single_or_list(raw_headers.getlist(key)) for key in raw_headers
    }
    if ACCEPT_LANGUAGE in raw_headers:
        headers[ACCEPT_LANGUAGE] = parse_accept_language(
            ",".join(raw_headers.getlist(ACCEPT_LANGUAGE))
        )

    cookies = {
        key: _decode_cookie(value)
        for key, value in cookie_parser(raw_headers.get("cookie", "")).items()
    }

    return RequestView(
        path_params=dict(path_params or {}),
        query_params=query_params,
        headers=headers,
        cookies=cookies,
    )


def request_view_from_request(request: Request) -> RequestView:
    return request_view_from_scope(request.scope, request.path_params)


def _match_routes(routes: Iterable[BaseRoute], scope: Scope) -> dict[str, Any] | None:
    partial: dict[str, Any] | None = None
    for route in routes:
        match, child_scope = route.matches(scope)
        if match is Match.NONE:
            continue
        params = dict(child_scope.get("path_params", {}))
        if isinstance(route, Mount):
            nested = _match_routes(route.routes, {**scope, **child_scope})
            if nested is None:
                continue
            params.update(nested)
        if match is Match.FULL:
            return params
        if partial is None:
            partial = params
    return partial


def match_path_params(scope: Scope) -> dict[str, Any]:
    """Recover the path parameters the router will extract for ``scope``."""
    app = scope.get("app")
    router = getattr(app, "router", None)
    routes = getattr(router, "routes", None)
    if not routes:
        return {}
    return _match_routes(routes, scope) or {}


class LocaleMiddleware:
    """Pure ASGI middleware that resolves the request locale.

    Rejected requests are answered with 404 (or a policy-violation close for
    websockets) before reaching the app. Otherwise the request state is bound
    to the context, accessors and callback are applied, and a
    Content-Language header is added to the response.
    """

    def __init__(self, app: ASGIApp, plugin: "LocalePlugin") -> None:
        self.app = app
        self.plugin = plugin

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI interface."""
        if scope["type"] not in ("http", "websocket"):
            await self.app(scope, receive, send)
            return

        view = request_view_from_scope(scope, match_path_params(scope))
        outcome = self.plugin.resolve(view)

        if isinstance(outcome, Rejected):
            error = LocaleNotFoundError(
                outcome.candidates,
                outcome.source.value if outcome.source else None,
            )
            if scope["type"] == "websocket":
                await WebSocketClose(code=1008, reason=error.message)(
                    scope, receive, send
                )
            else:
                response = JSONResponse(error.to_dict(), status_code=error.status_code)
                await response(scope, receive, send)
            return

        locale = outcome.locale

        # Shared dict so sync dependencies in the threadpool see locale updates
        if "state" not in scope:
            scope["state"] = {}
        token = bind_request_state(scope["state"])

        async def send_with_locale(message: Message) -> None:
            """Wrapper to add Content-Language header to response."""
            if message["type"] == "http.response.start":
                current_locale = scope["state"].get(LOCALE_STATE_KEY, locale)
                response_headers = MutableHeaders(raw=list(message.get("headers", [])))
                response_headers["Content-Language"] = current_locale
                message["headers"] = response_headers.raw

            await send(message)

        try:
            self.plugin.apply(scope["state"], locale)
            await self.app(scope, receive, send_with_locale)
        finally:
            unbind_request_state(token)
