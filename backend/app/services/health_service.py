"""Liveness, readiness, and per-dependency health checks"""
import time
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from app.cache import CacheGateway
from app.config import settings
from app.database import Database
from app.errors import AppError
from app.utils.logger import logger

# Track startup time
STARTUP_TIME = time.time()


def _timestamp() -> str:
    return datetime.utcnow().isoformat() + "Z"


class HealthService:
    def __init__(self, database: Database, cache: CacheGateway, version: Optional[str] = None):
        self.database = database
        self.cache = cache
        self.version = version or settings.APP_VERSION

    @staticmethod
    def uptime() -> float:
        return round(time.time() - STARTUP_TIME, 2)

    def liveness(self) -> Dict[str, Any]:
        """Process is up; never looks at dependencies"""
        return {
            "status": "alive",
            "timestamp": _timestamp(),
            "uptime": self.uptime(),
        }

    def readiness(self) -> Tuple[bool, Dict[str, Any]]:
        """Ready only when both the store and the cache answer"""
        try:
            self.database.ping()
            self.cache.ping()
        except AppError as exc:
            logger.error(f"Readiness check failed: {exc.message}")
            return False, {
                "status": "not ready",
                "timestamp": _timestamp(),
                "reason": "Critical services unavailable",
            }
        return True, {"status": "ready", "timestamp": _timestamp()}

    def detailed(self) -> Tuple[bool, Dict[str, Any]]:
        """Check every dependency and report each one, collecting all failures"""
        services: Dict[str, str] = {}
        errors: List[str] = []

        try:
            self.database.ping()
            services["database"] = "connected"
        except AppError as exc:
            logger.error(f"Database health check failed: {exc.message}")
            services["database"] = "disconnected"
            errors.append("Database connection failed")

        try:
            self.cache.ping()
            services["redis"] = "connected"
        except AppError as exc:
            logger.error(f"Redis health check failed: {exc.message}")
            services["redis"] = "disconnected"
            errors.append("Redis connection failed")

        healthy = not errors
        body: Dict[str, Any] = {
            "status": "healthy" if healthy else "unhealthy",
            "timestamp": _timestamp(),
            "uptime": self.uptime(),
            "version": self.version,
            "services": services,
        }
        if errors:
            body["errors"] = errors
        return healthy, body
