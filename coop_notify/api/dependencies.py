"""Dependency injection for FastAPI endpoints"""

from fastapi import Request
from coop_notify.services.notifications import NotificationService


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_notification_service(request: Request) -> NotificationService:
    """Provide the application-wide notification service (it owns the fetch caches)"""
    return request.app.state.notification_service
