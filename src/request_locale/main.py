"""Demo FastAPI application wired with the locale plugin.

Run with ``uvicorn request_locale.main:create_app --factory``; configure
through ``LOCALE_*`` environment variables.
"""

from contextlib import asynccontextmanager
import uuid

from fastapi import FastAPI, Request
from structlog import contextvars

from request_locale.context import get_locale
from request_locale.core.config import LocaleSettings, get_settings
from request_locale.core.logging import get_logger, setup_logging
from request_locale.plugin import register

logger = get_logger(__name__)


def create_app(settings: LocaleSettings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Raises LocaleConfigurationError when no usable locale set can be built.
    """
    settings = settings or get_settings()
    setup_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "application_startup",
            supported=plugin.get_supported_locales(),
            default_locale=plugin.get_default_locale(),
        )
        yield
        logger.info("application_shutdown")

    app = FastAPI(title="request-locale demo", lifespan=lifespan)

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        """Add unique request ID to each request for tracing."""
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        contextvars.clear_contextvars()
        contextvars.bind_contextvars(request_id=request_id)

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    plugin = register(app, settings)

    @app.get("/health", tags=["health"])
    async def health():
        return {"status": "ok"}

    @app.get("/locale", tags=["locale"])
    async def current_locale(request: Request):
        return {
            "locale": request.state.i18n.get_locale(),
            "context_locale": get_locale(),
        }

    @app.get("/{lang}/locale", tags=["locale"])
    async def path_locale(lang: str, request: Request):
        return {
            "locale": request.state.i18n.get_locale(),
            "context_locale": get_locale(),
        }

    return app
