"""FastAPI application entry point"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import auth, content, health
from app.cache import CacheGateway
from app.config import settings
from app.database import Database
from app.errors import AppError
from app.middleware.rate_limit import limiter, rate_limit_exceeded_handler
from app.middleware.security_headers import SecurityHeadersMiddleware
from app.services import AuthService, ContentService, HealthService
from app.utils.logger import logger, setup_logging

# Setup logging
setup_logging(settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler

    Builds the store and cache gateways once (unless already provided on
    ``app.state``) and the services that share them.
    """
    owns_database = getattr(app.state, "database", None) is None
    owns_cache = getattr(app.state, "cache", None) is None

    if owns_database:
        app.state.database = Database.from_settings()
    if owns_cache:
        app.state.cache = CacheGateway.from_settings()
        if not app.state.cache.connect():
            logger.warning("Starting without Redis; responses will not be cached")

    database = app.state.database
    cache = app.state.cache
    app.state.auth_service = AuthService(database, cache)
    app.state.content_service = ContentService(database, cache)
    app.state.health_service = HealthService(database, cache)

    logger.info("Content API starting up", extra={
        "version": settings.APP_VERSION,
        "log_level": settings.LOG_LEVEL,
        "rate_limiting": settings.RATE_LIMIT_ENABLED,
        "monitoring": settings.METRICS_ENABLED
    })
    yield
    logger.info("Content API shutting down")

    if owns_cache:
        app.state.cache.close()
        app.state.cache = None
    if owns_database:
        app.state.database.close()
        app.state.database = None


app = FastAPI(
    title=settings.APP_NAME,
    description="Educational content platform: auth, content catalogue, health probes",
    version=settings.APP_VERSION,
    docs_url="/api-docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# ===== Middleware Setup =====

app.add_middleware(SecurityHeadersMiddleware, enable_hsts=settings.ENABLE_HTTPS)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(GZipMiddleware, minimum_size=1000)

# Monitoring middleware
if settings.METRICS_ENABLED:
    from app.middleware.monitoring import MonitoringMiddleware
    app.add_middleware(MonitoringMiddleware)

    instrumentator = Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        should_respect_env_var=True,
        should_instrument_requests_inprogress=True,
        excluded_handlers=["/metrics", "/api/health", "/api/health/ready", "/api/health/live"],
        inprogress_name="edu_content_requests_inprogress",
        inprogress_labels=True
    )
    instrumentator.instrument(app)
    instrumentator.expose(app, endpoint=settings.METRICS_PATH, include_in_schema=False)

# Rate limiting (applied per route by api_rate_limit)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# ===== Route Setup =====

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(content.router)


@app.get("/")
def root():
    """Root endpoint"""
    return {
        "message": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "documentation": "/api-docs",
        "health": "/api/health",
    }


# ===== Error Handlers =====

def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Expected errors: client-safe message, logged by severity"""
    if exc.status_code >= 500:
        logger.error(
            f"{exc.__class__.__name__}: {exc.message}",
            extra={"path": request.url.path, "method": request.method},
            exc_info=exc.__cause__ is not None,
        )
    else:
        logger.debug(
            f"{exc.__class__.__name__}: {exc.message}",
            extra={"path": request.url.path, "method": request.method},
        )

    response = _error_response(exc.status_code, exc.message)
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        response.headers["WWW-Authenticate"] = "Bearer"
    return response


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Report the first failing field as a 400"""
    errors = exc.errors()
    if not errors:
        return _error_response(status.HTTP_400_BAD_REQUEST, "Validation failed")

    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
    message = first.get("msg", "Invalid value")
    return _error_response(status.HTTP_400_BAD_REQUEST, f"{field}: {message}" if field else message)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return _error_response(exc.status_code, f"Cannot {request.method} {request.url.path}")
    return _error_response(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for uncaught errors"""
    logger.error(
        f"Unhandled exception: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method
        },
        exc_info=True
    )
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
