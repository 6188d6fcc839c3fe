"""
Objection Desk API Service

This FastAPI service lets farmers file objections about transactions and
lets admins triage them:
- Farmer accounts (register, login, password reset)
- Objection intake (one active objection per farmer)
- Admin listings (active queue, archive) and status transitions

Endpoints:
- /farmer/* - Farmer accounts
- /objection - Farmer objections
- /objection/admin/login - Admin login
- /admin/* - Admin listings and transitions
- GET /health, /health-pod - Database health
- GET /livez - Process liveness
- GET / - Service description

Run:
    python -m objections.service.api
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from database.connection import Storage
from objections.admin import admin_api
from objections.admin.queries import AdminQueryEngine
from objections.config import Settings
from objections.errors import (
    AuthenticationFailed,
    Conflict,
    Forbidden,
    InvalidTransition,
    NotFound,
    ObjectionDeskError,
    StorageUnavailable,
    ValidationError,
)
from objections.farmers import farmer_api, objection_api
from objections.farmers.accounts import CodeSender, FarmerAccounts
from objections.lifecycle import ObjectionLifecycle
from objections.tokens import TokenService

logger = logging.getLogger(__name__)

SERVICE_NAME = "Objection Desk API"
VERSION = "1.0.0"

# Checked in order, first match wins
ERROR_STATUS_CODES = (
    (ValidationError, 400),
    (AuthenticationFailed, 401),
    (Forbidden, 403),
    (NotFound, 404),
    (Conflict, 409),
    (InvalidTransition, 409),
    (StorageUnavailable, 503),
)

RETRY_AFTER_SECONDS = 5


def status_code_for(exc: ObjectionDeskError) -> int:
    for error_class, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_class):
            return status_code
    return 500


async def handle_domain_error(request: Request, exc: ObjectionDeskError) -> JSONResponse:
    status_code = status_code_for(exc)
    headers = None
    if isinstance(exc, StorageUnavailable):
        headers = {"Retry-After": str(RETRY_AFTER_SECONDS)}
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=status_code, content={"detail": str(exc)}, headers=headers)


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies and parameters are reported like core validation errors."""
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


def create_app(settings: Optional[Settings] = None, storage: Optional[Storage] = None,
               code_sender: Optional[CodeSender] = None) -> FastAPI:
    """
    Build the application and its collaborators.

    Args:
        settings: Service settings (default: from environment)
        storage: Storage collaborator (default: built from settings.database_url)
        code_sender: Delivers password reset codes (default: log them)
    """
    settings = settings or Settings.from_env()
    storage = storage or Storage(settings.database_url)

    app = FastAPI(
        title=SERVICE_NAME,
        description="Farmer objections with admin triage",
        version=VERSION,
    )

    app.state.settings = settings
    app.state.storage = storage
    app.state.lifecycle = ObjectionLifecycle(storage)
    app.state.queries = AdminQueryEngine(storage)
    app.state.accounts = FarmerAccounts(
        storage,
        bcrypt_rounds=settings.bcrypt_rounds,
        reset_window_hours=settings.reset_window_hours,
        code_sender=code_sender,
    )
    if settings.jwt_secret:
        app.state.token_service = TokenService(settings.jwt_secret, settings.jwt_ttl_minutes)
    else:
        logger.warning("JWT_SECRET not set - login and protected endpoints will fail")
        app.state.token_service = None

    app.add_exception_handler(ObjectionDeskError, handle_domain_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)

    app.include_router(farmer_api.router)
    app.include_router(objection_api.router)
    app.include_router(admin_api.login_router)
    app.include_router(admin_api.router)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Tighten in production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/", response_model=dict)
    async def root():
        """Root endpoint with service description."""
        return {
            "service": SERVICE_NAME,
            "status": "operational",
            "version": VERSION,
            "endpoints": [
                "POST /farmer/register",
                "POST /farmer/login",
                "POST /farmer/forgot-password",
                "POST /farmer/verify-code",
                "POST /farmer/reset-password",
                "GET /objection",
                "GET /objection/can-submit",
                "POST /objection",
                "POST /objection/admin/login",
                "GET /admin/objections",
                "GET /admin/archive",
                "POST /admin/resolve-objection",
                "POST /admin/objection/{id}/resolve",
                "POST /admin/objection/{id}/review",
                "GET /health",
                "GET /livez",
            ]
        }

    @app.get("/health", response_class=PlainTextResponse)
    def health_check():
        """Database round trip (SELECT 1)."""
        if storage.ping():
            return PlainTextResponse("OK")
        return PlainTextResponse("DB query failed", status_code=500)

    @app.get("/health-pod", response_class=PlainTextResponse)
    def health_pod():
        """Pool connection check used by the pod probe."""
        if storage.ping():
            return PlainTextResponse("OK")
        return PlainTextResponse("DB connection failed", status_code=500)

    @app.get("/livez", response_class=PlainTextResponse)
    async def livez():
        return PlainTextResponse("Objection backend is up")

    return app


def main() -> None:
    import uvicorn
    from database.bootstrap import init_database

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = Settings.from_env()
    storage = Storage(settings.database_url)
    try:
        init_database(storage, retries=settings.db_init_retries, delay=settings.db_init_retry_delay)
    except StorageUnavailable as e:
        logger.error(f"Giving up on database: {e}")
        raise SystemExit(1)

    logger.info(f"Starting {SERVICE_NAME} on port {settings.port}")
    uvicorn.run(create_app(settings, storage), host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
