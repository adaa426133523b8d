from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import os
from dotenv import load_dotenv

# Load environment variables before settings are read
load_dotenv()

# Import core components
from app.core.logging_config import setup_logging
from app.core.settings import settings
from app.middleware.logging import LoggingMiddleware
from app.middleware.rate_limit import RateLimitMiddleware
from app.middleware.session import SessionGateMiddleware

# Import configuration
from app.config import init_firebase, firebase_ready
from app.db import create_fallback_schema, USING_FALLBACK_DATABASE

# Import route modules
from app.routes import (
    admin, agendas, auth_session, email, health, manifesto,
    suggestions, testimonials, votes
)
from app.exceptions import (
    UnauthorizedException, ForbiddenException,
    NotFoundException, ValidationException, RateLimitException
)

# Set up logging first
logger = setup_logging()

_docs_enabled = settings.is_development or os.getenv("SHOW_DOCS", "").lower() in ("1", "true", "yes")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup logic
    logger.info("=" * 50)
    logger.info("Reform Agenda API starting up")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"CORS origins: {settings.cors_origins}")
    logger.info(f"Rate limiting: {'enabled' if settings.rate_limit_enabled else 'disabled'}")
    logger.info(f"SQL Debug: {'enabled' if settings.sql_debug else 'disabled'}")

    from app.services.email import get_sendgrid_client
    email_status = "configured" if get_sendgrid_client() else "not configured (logging only)"
    auth_status = "configured" if firebase_ready() else "not configured (anonymous only)"
    logger.info(f"SendGrid Email: {email_status}")
    logger.info(f"Firebase Auth: {auth_status}")

    if USING_FALLBACK_DATABASE:
        logger.warning("Database: not configured (using in-memory fallback)")
        create_fallback_schema()
    logger.info("=" * 50)

    yield
    # Shutdown logic
    logger.info("Reform Agenda API shutting down gracefully")


app = FastAPI(
    title="Reform Agenda API",
    description="Public reform catalog with suggestions, voting and moderation",
    version="1.0.0",
    docs_url="/docs" if _docs_enabled else None,
    redoc_url="/redoc" if _docs_enabled else None,
    lifespan=lifespan,
)

# Add middleware in correct order (last added = first executed)
app.add_middleware(SessionGateMiddleware)

if settings.rate_limit_enabled:
    app.add_middleware(RateLimitMiddleware, calls_per_minute=settings.rate_limit_per_minute)

app.add_middleware(LoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Correlation-ID", "Retry-After"],
)

# Initialize Firebase (skip in test environment)
if os.getenv("ENV") != "test":
    init_firebase()

# Include routers
app.include_router(health.router)
app.include_router(auth_session.router)
app.include_router(agendas.router)
app.include_router(suggestions.router)
app.include_router(votes.router)
app.include_router(testimonials.router)
app.include_router(manifesto.router)
app.include_router(admin.router)
app.include_router(email.router)

# Locale bundles for browsers
try:
    if os.path.isdir(settings.locales_dir):
        app.mount("/locales", StaticFiles(directory=settings.locales_dir), name="locales")
        logger.info(f"Locale bundles mounted at /locales from {settings.locales_dir}")
    else:
        logger.warning(f"Locales directory not found at {settings.locales_dir}; /locales is not served")
except Exception as e:
    logger.error(f"Failed to mount /locales static directory: {e}")


def _error_response(request: Request, status_code: int, detail, headers=None) -> JSONResponse:
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "correlation_id": correlation_id},
        headers=headers,
    )


# Exception handlers
@app.exception_handler(UnauthorizedException)
async def unauthorized_exception_handler(request: Request, exc: UnauthorizedException):
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    logger.warning(f"[{correlation_id}] Unauthorized access attempt on {request.url.path}")
    return _error_response(request, 401, exc.detail)


@app.exception_handler(ForbiddenException)
async def forbidden_exception_handler(request: Request, exc: ForbiddenException):
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    logger.warning(f"[{correlation_id}] Forbidden access attempt on {request.url.path}")
    return _error_response(request, 403, exc.detail)


@app.exception_handler(ValidationException)
async def validation_exception_handler(request: Request, exc: ValidationException):
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    logger.warning(f"[{correlation_id}] Validation error on {request.url.path}: {exc.detail}")
    return _error_response(request, 400, exc.detail)


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    messages = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ())[1:])
        messages.append(f"{field}: {error.get('msg')}" if field else str(error.get("msg")))
    detail = "; ".join(messages) or "Invalid request"
    logger.warning(f"[{correlation_id}] Request validation failed on {request.url.path}: {detail}")
    return _error_response(request, 400, detail)


@app.exception_handler(NotFoundException)
async def not_found_exception_handler(request: Request, exc: NotFoundException):
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    logger.warning(f"[{correlation_id}] Not found error on {request.url.path}: {exc.detail}")
    return _error_response(request, 404, exc.detail)


@app.exception_handler(RateLimitException)
async def rate_limit_exception_handler(request: Request, exc: RateLimitException):
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    logger.warning(f"[{correlation_id}] Rate limited on {request.url.path}")
    return _error_response(request, 429, exc.detail, headers=exc.headers)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    logger.error(f"[{correlation_id}] Unhandled exception on {request.url.path}: {str(exc)}", exc_info=True)

    if settings.is_development:
        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error",
                "error": str(exc),
                "correlation_id": correlation_id,
                "type": type(exc).__name__
            }
        )
    else:
        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error",
                "correlation_id": correlation_id
            }
        )


# Root endpoint
@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "message": "Reform Agenda API",
        "version": "1.0.0",
        "environment": settings.environment,
        "docs_url": "/docs" if _docs_enabled else None,
        "health_check": "/health",
        "status": "running"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        log_level="info" if settings.is_development else "warning"
    )
