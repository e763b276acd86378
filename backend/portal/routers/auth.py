"""
Customer authentication and account endpoints.
"""

import logging

from fastapi import APIRouter, Depends, Request

from portal.config import settings
from portal.core.limiter import limiter
from portal.database import Database
from portal.dependencies import get_current_user_id, get_db, get_notifier
from portal.schemas import (
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    PasswordChange,
    ProfileUpdate,
    RegisterRequest,
    ResetPasswordRequest,
)
from portal.services.auth_service import auth_service
from portal.services.notification_service import NotificationDispatcher
from portal.services.session_service import session_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register")
async def register(request: Request, user_in: RegisterRequest, db: Database = Depends(get_db)):
    """
    Register a new company account and log it in.
    """
    user_id = auth_service.create_user(db, **user_in.model_dump())
    session_service.start(db, request, user_id=user_id)
    return {"success": True, "user_id": user_id, "message": "Registration complete"}


@router.post("/login")
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(request: Request, credentials: LoginRequest, db: Database = Depends(get_db)):
    user = auth_service.authenticate_user(db, credentials.email, credentials.password)
    session_service.start(db, request, user_id=user["id"])
    return {"success": True, "user_id": user["id"]}


@router.post("/logout", response_model=MessageResponse)
async def logout(request: Request, db: Database = Depends(get_db)):
    session_service.destroy(db, request)
    return MessageResponse(message="Logged out")


@router.post("/auth/forgot-password", response_model=MessageResponse)
async def forgot_password(
    data: ForgotPasswordRequest,
    db: Database = Depends(get_db),
    notifier: NotificationDispatcher = Depends(get_notifier),
):
    """Same answer whether or not the email is registered."""
    auth_service.request_password_reset(db, notifier, data.email)
    return MessageResponse(message="A password reset email has been sent")


@router.post("/auth/reset-password", response_model=MessageResponse)
async def reset_password(data: ResetPasswordRequest, db: Database = Depends(get_db)):
    auth_service.reset_password(db, data.token, data.password)
    return MessageResponse(message="Your password has been updated")


@router.get("/me")
async def read_me(db: Database = Depends(get_db), user_id: int = Depends(get_current_user_id)):
    return auth_service.get_user(db, user_id)


@router.put("/profile")
async def update_profile(
    changes: ProfileUpdate,
    db: Database = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    user = auth_service.update_profile(db, user_id, changes.model_dump())
    return {"success": True, "user": user, "message": "Profile updated"}


@router.put("/profile/password", response_model=MessageResponse)
async def change_password(
    data: PasswordChange,
    db: Database = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    auth_service.change_password(db, user_id, data.current_password, data.new_password)
    return MessageResponse(message="Your password has been updated")
