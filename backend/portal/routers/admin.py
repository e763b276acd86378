"""
Administrator endpoints: orders, payments, customers, catalog, dashboard.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request

from portal.config import settings
from portal.core.limiter import limiter
from portal.database import Database
from portal.dependencies import get_current_admin_id, get_db, get_notifier
from portal.routers.orders import pdf_response
from portal.schemas import (
    AdminLoginRequest,
    DashboardResponse,
    MessageResponse,
    PasswordChange,
    PaymentUpdate,
    ProductCreate,
    ProductUpdate,
    StatusUpdate,
)
from portal.services.auth_service import auth_service
from portal.services.document_service import render_invoice, render_receipt
from portal.services.notification_service import NotificationDispatcher
from portal.services.order_service import order_service
from portal.services.product_service import product_service
from portal.services.reporting_service import reporting_service
from portal.services.session_service import session_service

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Session ---

@router.post("/login")
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def admin_login(request: Request, credentials: AdminLoginRequest, db: Database = Depends(get_db)):
    admin = auth_service.authenticate_admin(db, credentials.username, credentials.password)
    session_service.start(db, request, admin_id=admin["id"])
    logger.info(f"Admin '{admin['username']}' logged in")
    return {"success": True}


@router.post("/logout", response_model=MessageResponse)
async def admin_logout(request: Request, db: Database = Depends(get_db)):
    session_service.destroy(db, request)
    return MessageResponse(message="Logged out")


@router.post("/change-password", response_model=MessageResponse)
async def admin_change_password(
    data: PasswordChange,
    db: Database = Depends(get_db),
    admin_id: int = Depends(get_current_admin_id),
):
    auth_service.change_admin_password(db, admin_id, data.current_password, data.new_password)
    return MessageResponse(message="Password changed")


@router.get("/me")
async def admin_me(db: Database = Depends(get_db), admin_id: int = Depends(get_current_admin_id)):
    return auth_service.get_admin(db, admin_id)


# --- Orders ---

@router.get("/orders", response_model=List[dict])
async def list_orders(db: Database = Depends(get_db), admin_id: int = Depends(get_current_admin_id)):
    """All orders, newest first, with customer and product resolved."""
    return order_service.list_all_orders(db)


@router.put("/orders/{order_id}")
async def update_order_status(
    order_id: int,
    data: StatusUpdate,
    db: Database = Depends(get_db),
    notifier: NotificationDispatcher = Depends(get_notifier),
    admin_id: int = Depends(get_current_admin_id),
):
    order = order_service.update_status(db, notifier, order_id, data.status)
    return {"success": True, "order": order, "message": "Status updated"}


@router.put("/orders/{order_id}/payment")
async def update_payment(
    order_id: int,
    data: PaymentUpdate,
    db: Database = Depends(get_db),
    admin_id: int = Depends(get_current_admin_id),
):
    order = order_service.confirm_payment(db, order_id, data.payment_confirmed, data.payment_date)
    return {"success": True, "order": order, "message": "Payment information updated"}


@router.get("/orders/{order_id}/invoice")
async def download_invoice(
    order_id: int, db: Database = Depends(get_db), admin_id: int = Depends(get_current_admin_id)
):
    order = order_service.build_document_order(db, order_id)
    return pdf_response(render_invoice, order, f"invoice_{order_id}.pdf")


@router.get("/orders/{order_id}/receipt")
async def download_receipt(
    order_id: int, db: Database = Depends(get_db), admin_id: int = Depends(get_current_admin_id)
):
    order = order_service.build_document_order(db, order_id)
    return pdf_response(render_receipt, order, f"receipt_{order_id}.pdf")


# --- Customers ---

@router.get("/users", response_model=List[dict])
async def list_users(db: Database = Depends(get_db), admin_id: int = Depends(get_current_admin_id)):
    return auth_service.list_users(db)


# --- Catalog ---

@router.get("/products", response_model=List[dict])
async def list_products(db: Database = Depends(get_db), admin_id: int = Depends(get_current_admin_id)):
    """Every product, including inactive ones."""
    return product_service.list_all(db)


@router.post("/products", status_code=201)
async def create_product(
    data: ProductCreate,
    db: Database = Depends(get_db),
    admin_id: int = Depends(get_current_admin_id),
):
    product = product_service.create_product(db, data.model_dump())
    return {"success": True, "product": product, "message": "Product added"}


@router.put("/products/{product_id}")
async def update_product(
    product_id: int,
    data: ProductUpdate,
    db: Database = Depends(get_db),
    admin_id: int = Depends(get_current_admin_id),
):
    product = product_service.update_product(db, product_id, data.model_dump())
    return {"success": True, "product": product, "message": "Product updated"}


# --- Dashboard ---

@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(
    month: Optional[str] = Query(None, description="Target month, YYYY-MM"),
    db: Database = Depends(get_db),
    admin_id: int = Depends(get_current_admin_id),
):
    """Monthly summary, six-month trend and top products."""
    return reporting_service.build_dashboard(db, month)
