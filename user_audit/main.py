# user_audit/main.py

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from user_audit.api.errors import error_body, status_for
from user_audit.api.middleware import CorrelationIdMiddleware, RequestLogMiddleware
from user_audit.api.routers import health, users
from user_audit.application.exceptions import ApplicationError
from user_audit.application.failure_classifier import FailureClassifier
from user_audit.config.logging import configure_logging
from user_audit.config.settings import AppSettings, get_settings
from user_audit.core.context import get_correlation_id
from user_audit.domain.exceptions import DomainError
from user_audit.security.exceptions import SecurityError


def _classified_response(exc: Exception) -> JSONResponse:
    reason = FailureClassifier.classify(exc)
    return JSONResponse(
        status_code=status_for(reason),
        content=error_body(reason, exc.message, get_correlation_id()),
    )


def create_app(settings: AppSettings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        version=settings.version,
        debug=settings.debug,
    )

    # Middleware order: last added runs first (outermost). Request flow: CorrelationId -> RequestLog.
    app.add_middleware(RequestLogMiddleware)
    app.add_middleware(CorrelationIdMiddleware)

    @app.exception_handler(SecurityError)
    async def security_error_handler(request, exc: SecurityError):
        return _classified_response(exc)

    @app.exception_handler(DomainError)
    async def domain_error_handler(request, exc: DomainError):
        return _classified_response(exc)

    @app.exception_handler(ApplicationError)
    async def application_error_handler(request, exc: ApplicationError):
        return _classified_response(exc)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request, exc: Exception):
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    # Routers: /health, /users
    app.include_router(health.router)
    app.include_router(users.router, prefix="/users")
    return app
