"""Monitoring and observability middleware"""
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Match

from app.utils.logger import logger

SLOW_REQUEST_SECONDS = 1.0


# ===== Prometheus Metrics =====

# Request metrics, labelled by route template so ids do not create new series
http_requests_total = Counter(
    "edu_content_http_requests_total",
    "Total HTTP requests",
    ["method", "route", "status"]
)

http_request_duration_seconds = Histogram(
    "edu_content_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "route"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0)
)

http_errors_total = Counter(
    "edu_content_http_errors_total",
    "Responses with status >= 400",
    ["method", "route", "status"]
)

# Auth metrics
authentication_failures_total = Counter(
    "edu_content_authentication_failures_total",
    "Total bearer authentication failures",
    ["type"]  # missing, TokenExpiredError, TokenInvalidError, TokenRevokedError
)

# Content metrics
content_requests_total = Counter(
    "edu_content_content_requests_total",
    "Content reads by kind and caller identity",
    ["kind", "authenticated"]  # kind: list, item
)

content_cache_lookups_total = Counter(
    "edu_content_cache_lookups_total",
    "Response cache lookups on the content read path",
    ["kind", "result"]  # result: hit, miss
)


def _route_label(request: Request) -> str:
    for route in request.app.router.routes:
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            return getattr(route, "path", request.url.path)
    return "unmatched"


class MonitoringMiddleware(BaseHTTPMiddleware):
    """Per-request metrics, request ids and slow-request logging"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        request.state.request_id = request_id
        route = _route_label(request)

        try:
            response = await call_next(request)
        except Exception as exc:
            http_errors_total.labels(method=request.method, route=route, status=500).inc()
            logger.error(
                f"Request failed: {request.method} {request.url.path}",
                extra={
                    "request_id": request_id,
                    "method": request.method,
                    "endpoint": route,
                    "duration": time.perf_counter() - started,
                    "error": str(exc),
                },
                exc_info=True
            )
            raise

        duration = time.perf_counter() - started
        status = response.status_code
        http_requests_total.labels(method=request.method, route=route, status=status).inc()
        http_request_duration_seconds.labels(method=request.method, route=route).observe(duration)
        if status >= 400:
            http_errors_total.labels(method=request.method, route=route, status=status).inc()

        if duration > SLOW_REQUEST_SECONDS:
            logger.warning(
                f"Slow request: {request.method} {request.url.path}",
                extra={
                    "request_id": request_id,
                    "method": request.method,
                    "endpoint": route,
                    "duration": duration,
                    "status": status,
                }
            )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration:.3f}s"
        return response


def record_auth_failure(failure_type: str):
    """Record bearer authentication failure"""
    authentication_failures_total.labels(type=failure_type).inc()


def record_content_request(kind: str, authenticated: bool):
    """Record a content read"""
    content_requests_total.labels(kind=kind, authenticated=str(authenticated).lower()).inc()


def record_cache_lookup(kind: str, hit: bool):
    content_cache_lookups_total.labels(kind=kind, result="hit" if hit else "miss").inc()
