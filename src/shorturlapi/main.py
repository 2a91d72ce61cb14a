import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from shorturlapi.api.deps import get_resolver
from shorturlapi.api.routes import router as urls_router
from shorturlapi.core.config import Settings, get_settings
from shorturlapi.core.errors import (
    ApiError,
    CapacityError,
    ShortUrlError,
    from_domain_error,
    from_request_errors,
    normalize_http_exception,
)
from shorturlapi.core.link_rules import utcnow
from shorturlapi.core.logging import configure_logging
from shorturlapi.db.base import Base
from shorturlapi.db import models  # noqa: F401  registers tables on Base.metadata
from shorturlapi.db.session import make_engine, make_session_factory
from shorturlapi.schemas.urls import ErrorResponse, HealthResponse, ResolveResponse
from shorturlapi.services.resolver import Resolver
from shorturlapi.services.shortener import ShorteningService
from shorturlapi.services.store import UrlStore

logger = logging.getLogger(__name__)


def _error_response(status_code: int, error: ApiError, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=error.to_body(), headers=headers)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    engine = make_engine(settings.database_url)
    store = UrlStore(make_session_factory(engine))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        Base.metadata.create_all(bind=engine)
        logger.info("URL Shortener API starting (env=%s)", settings.app_env)
        yield
        engine.dispose()

    app = FastAPI(title="URL Shortener API", lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.store = store
    app.state.shortener = ShorteningService(store, max_attempts=settings.max_code_attempts)
    app.state.resolver = Resolver(store)

    @app.exception_handler(ShortUrlError)
    async def short_url_error_handler(request: Request, exc: ShortUrlError):
        if isinstance(exc, CapacityError):
            logger.error("%s %s: %s", request.method, request.url.path, exc.message)
        return _error_response(exc.status_code, from_domain_error(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return _error_response(422, from_request_errors(exc.errors()))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _error_response(exc.status_code, normalize_http_exception(exc), getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error("Unhandled exception: %s", exc, exc_info=exc)
        return _error_response(500, ApiError(code="INTERNAL_SERVER_ERROR", message="Internal server error"))

    app.include_router(urls_router)

    @app.get("/health", response_model=HealthResponse)
    def health():
        return HealthResponse(status="ok", timestamp=utcnow())

    # registered last so it doesn't shadow /urls or /health
    @app.get(
        "/{code}",
        response_model=ResolveResponse,
        responses={
            404: {"model": ErrorResponse, "description": "URL not found"},
            410: {"model": ErrorResponse, "description": "URL has expired"},
        },
    )
    def redirect(code: str, resolver: Resolver = Depends(get_resolver)):
        return ResolveResponse(original_url=resolver.resolve(code))

    return app


app = create_app()
