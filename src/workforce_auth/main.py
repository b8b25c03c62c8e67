"""
ASGI entry point.

    uvicorn workforce_auth.main:app

Routes:
    /health, /health/ready        probes
    /api/auth/...                 login, refresh, logout, session, password
    /api/v1/users/...             profile directory
    /api/v1/organizations/...     organizations and departments
    /api/v1/authorization/...     authorization checks
    /api/v1/audit-logs            audit trail queries
"""

import logging

from fastapi import APIRouter, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from workforce_auth.api.routes import (
    audit_logs,
    auth,
    authorization,
    health,
    organizations,
    users,
)
from workforce_auth.core.config import settings
from workforce_auth.core.handlers import (
    app_exception_handler,
    general_exception_handler,
    rate_limit_handler,
    validation_exception_handler,
)
from workforce_auth.core.lifespan import lifespan
from workforce_auth.core.logging import setup_logging
from workforce_auth.core.rate_limit import limiter
from workforce_auth.exceptions import AppException
from workforce_auth.middleware import (
    RequestIDMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from workforce_auth.schemas.common import ERROR_RESPONSES

logger = logging.getLogger(__name__)


def _build_api_router() -> APIRouter:
    v1 = APIRouter(prefix="/v1")
    for module in (users, organizations, authorization, audit_logs):
        v1.include_router(module.router)

    api = APIRouter(prefix="/api", responses=ERROR_RESPONSES)
    api.include_router(auth.router)
    api.include_router(v1)
    return api


def create_app() -> FastAPI:
    """Assemble the application: handlers, middleware, routers."""
    setup_logging()

    application = FastAPI(
        title=settings.app_name,
        version=settings.version,
        description=settings.description,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )
    application.state.limiter = limiter

    application.add_exception_handler(AppException, app_exception_handler)
    application.add_exception_handler(RequestValidationError, validation_exception_handler)
    application.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    application.add_exception_handler(Exception, general_exception_handler)

    # Added last runs first: CORS, then request id, then logging (which
    # needs the id), then security headers.
    application.add_middleware(SecurityHeadersMiddleware, enable_hsts=settings.is_production)
    application.add_middleware(RequestLoggingMiddleware)
    application.add_middleware(RequestIDMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )

    application.include_router(health.router)
    application.include_router(_build_api_router())

    logger.info(
        "%s %s configured (environment=%s)",
        settings.app_name,
        settings.version,
        settings.environment,
    )
    return application


app = create_app()
