"""Middleware modules for production-ready features"""
from app.middleware.monitoring import (
    MonitoringMiddleware,
    record_auth_failure,
    record_cache_lookup,
    record_content_request,
)
from app.middleware.rate_limit import limiter, rate_limit_exceeded_handler
from app.middleware.security_headers import SecurityHeadersMiddleware

__all__ = [
    "MonitoringMiddleware",
    "record_auth_failure",
    "record_cache_lookup",
    "record_content_request",
    "limiter",
    "rate_limit_exceeded_handler",
    "SecurityHeadersMiddleware",
]
