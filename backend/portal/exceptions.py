"""
Exception hierarchy shared by services and routers.

Every exception carries the HTTP status the API layer answers with; the
message is shown to the client as-is.
"""

from typing import Optional


class PortalError(Exception):
    """Base exception for the portal."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PortalError):
    """Missing or invalid input the caller can correct."""

    status_code = 400


class AuthorizationError(PortalError):
    """No session, wrong scope or bad credentials."""

    status_code = 401


class NotFoundError(PortalError):
    """A referenced entity does not exist (or is not visible to the caller)."""

    status_code = 404


class PersistenceError(PortalError):
    """A database statement failed."""

    def __init__(self, message: str, sql: Optional[str] = None):
        super().__init__(message)
        self.sql = sql


class ReportingUnavailableError(PortalError):
    """Dashboard data could not be computed."""

    status_code = 503
