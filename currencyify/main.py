import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from .core.config import get_settings, Settings
from .core.logging import init_logging, request_context_middleware
from .core import errors
from .routers import health, convert, exchange_rate
from .services.container import RateServices, build_services


def create_app(
    settings_override: Settings | None = None,
    services_override: RateServices | None = None,
) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment (e.g., static provider). Falls back to cached get_settings().
    services_override: prebuilt service graph (e.g., with a fake provider).
    """
    settings = settings_override or get_settings()
    settings.init_post_load()
    # Initialize logging early
    init_logging(debug=settings.debug)

    try:
        services = services_override or build_services(settings)
    except Exception:
        # Missing reference codes or a bad provider/cache choice is fatal
        logging.getLogger("currencyify").exception("failed to build services on startup")
        raise

    app = FastAPI(
        title=settings.app_name, debug=settings.debug, version=settings.version
    )
    app.state.settings = settings
    app.state.rate_services = services

    # Middleware (request id / structured logging)
    app.middleware("http")(request_context_middleware)

    # Error handlers
    app.add_exception_handler(StarletteHTTPException, errors.not_found_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(errors.CurrencyifyError, errors.currencyify_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers
    app.include_router(health.router, prefix=settings.api_prefix)
    app.include_router(convert.router, prefix=settings.api_prefix)
    app.include_router(exchange_rate.router, prefix=settings.api_prefix)

    @app.get("/")
    async def root():
        return {"message": "Currencyify API", "version": settings.version}

    return app


app = create_app()
