"""FastAPI dependency utilities."""

from collections.abc import Generator

from fastapi import Request
from sqlalchemy.orm import Session

from wastetrack.application.notification_manager import NotificationManager
from wastetrack.infrastructure.notifications import (
    ClientConnectionManager,
    ClientPermissionPlatform,
)


def get_notification_manager(request: Request) -> NotificationManager:
    """Return the notification manager built at application start."""

    return request.app.state.notification_manager


def get_permission_platform(request: Request) -> ClientPermissionPlatform:
    """Return the permission platform the manager prompts through."""

    return request.app.state.permission_platform


def get_connection_manager(request: Request) -> ClientConnectionManager:
    """Return the registry of connected client websockets."""

    return request.app.state.connection_manager


def get_db(request: Request) -> Generator[Session, None, None]:
    """Yield a database session bound to the application's engine."""

    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
