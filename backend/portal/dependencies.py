"""
Shared API dependencies.
"""

from fastapi import Depends, Request

from portal.database import Database
from portal.exceptions import AuthorizationError
from portal.services.notification_service import NotificationDispatcher
from portal.services.session_service import session_service


def get_db(request: Request) -> Database:
    """
    Dependency for the persistence adapter created in the app lifespan.
    """
    return request.app.state.db


def get_notifier(request: Request) -> NotificationDispatcher:
    return request.app.state.notifier


async def get_current_user_id(request: Request, db: Database = Depends(get_db)) -> int:
    """Customer id from the server-side session."""
    user_id = session_service.user_id(db, request)
    if not user_id:
        raise AuthorizationError("Authentication required")
    return user_id


async def get_current_admin_id(request: Request, db: Database = Depends(get_db)) -> int:
    """Admin id from the server-side session; independent of the customer scope."""
    admin_id = session_service.admin_id(db, request)
    if not admin_id:
        raise AuthorizationError("Administrator privileges required")
    return admin_id
