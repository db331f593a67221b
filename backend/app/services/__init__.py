"""Domain services, built once at startup around the store and cache gateways"""
from app.services.auth_service import ANONYMOUS, AuthContext, AuthService
from app.services.content_service import ContentService
from app.services.health_service import HealthService

__all__ = ["ANONYMOUS", "AuthContext", "AuthService", "ContentService", "HealthService"]
