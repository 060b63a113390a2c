from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# Core
from core.config import settings
from core.errors import ApiError, ErrorCode, error_code_for_status
from core.logging_config import logger
from database import create_db_and_tables

# -------------------------------------------------
# Routers
# -------------------------------------------------
from routers.auth import router as auth_router
from routers.google_auth import router as google_auth_router

from routers.condominiums import router as condominiums_router
from routers.units import router as units_router
from routers.residents import router as residents_router
from routers.financial_entries import router as financial_entries_router

from routers.health import router as health_router


def _validation_payload(exc: RequestValidationError) -> dict:
    """First failing field decides the code: absent/blank → missing_field, else invalid_value."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    code = ErrorCode.missing_field if first.get("type") == "missing" else ErrorCode.invalid_value

    payload = {"error": code.value, "detail": first.get("msg") or "Invalid request"}
    loc = [part for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    if loc:
        payload["field"] = str(loc[-1])
    return payload


# -------------------------------------------------
# Create the Application
# -------------------------------------------------
def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        description="ADMG API: multi-tenant condominium management",
    )

    # -------------------------------------------------
    # CORS
    # -------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=settings.BACKEND_CORS_ORIGINS != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------
    # Startup: schema + route log
    # -------------------------------------------------
    @app.on_event("startup")
    def on_startup():
        logger.info(f"Starting {settings.PROJECT_NAME} ({settings.ENV})")
        create_db_and_tables()
        for route in app.routes:
            methods = ",".join(sorted(getattr(route, "methods", None) or []))
            logger.debug(f"route {methods:14s} {getattr(route, 'path', '')}")

    # -------------------------------------------------
    # Error handling
    # -------------------------------------------------
    @app.exception_handler(StarletteHTTPException)
    async def handle_http(request: Request, exc: StarletteHTTPException):
        if isinstance(exc, ApiError):
            content = exc.to_payload()
        else:
            content = {"error": error_code_for_status(exc.status_code).value, "detail": exc.detail}

        if exc.status_code in (401, 403, 500):
            logger.warning(
                f"HTTP {exc.status_code} at {request.method} {request.url.path} — {content['error']}"
            )
        return JSONResponse(
            status_code=exc.status_code,
            content=content,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content=_validation_payload(exc))

    @app.exception_handler(Exception)
    async def handle_unhandled(request: Request, exc: Exception):
        logger.error("Unhandled error at %s", request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"error": ErrorCode.internal_error.value, "detail": "Internal server error"},
        )

    # -------------------------------------------------
    # Register Routers
    # -------------------------------------------------

    # Auth
    app.include_router(auth_router)
    app.include_router(google_auth_router)

    # Tenant data
    app.include_router(condominiums_router)
    app.include_router(units_router)
    app.include_router(residents_router)
    app.include_router(financial_entries_router)

    # Health
    app.include_router(health_router)

    @app.get("/", include_in_schema=False)
    def root():
        return {"ok": True, "service": settings.PROJECT_NAME}

    return app


# Create the global FastAPI instance
app = create_app()
