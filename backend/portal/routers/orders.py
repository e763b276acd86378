"""
Customer order endpoints.
"""

import io
import logging
from typing import Any, Callable, Dict

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response

from portal.database import Database
from portal.dependencies import get_current_user_id, get_db, get_notifier
from portal.schemas import OrderCreate, OrderCreated
from portal.services.document_service import render_receipt
from portal.services.notification_service import NotificationDispatcher
from portal.services.order_service import order_service

logger = logging.getLogger(__name__)

router = APIRouter()


def pdf_response(
    render: Callable[[Dict[str, Any], io.BytesIO], None],
    order: Dict[str, Any],
    filename: str,
) -> Response:
    """Render a document for a resolved order into a PDF download."""
    buffer = io.BytesIO()
    try:
        render(order, buffer)
    except Exception as e:
        logger.error(f"PDF generation failed for order #{order['id']}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate the document",
        )
    return Response(
        content=buffer.getvalue(),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("", response_model=OrderCreated, status_code=status.HTTP_201_CREATED)
async def create_order(
    data: OrderCreate,
    db: Database = Depends(get_db),
    notifier: NotificationDispatcher = Depends(get_notifier),
    user_id: int = Depends(get_current_user_id),
):
    """
    Place an order. Confirmation emails are sent in the background.
    """
    order = order_service.create_order(
        db,
        notifier,
        user_id=user_id,
        shipping_address_id=data.shipping_address_id,
        quantity=data.quantity,
        product_id=data.product_id,
    )
    return OrderCreated(order_id=order["id"], total_price=order["total_price"])


@router.get("")
async def list_orders(
    db: Database = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    """Order history, newest first."""
    return order_service.list_orders_for_user(db, user_id)


@router.get("/{order_id}")
async def get_order(
    order_id: int,
    db: Database = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    return order_service.get_order_for_user(db, user_id, order_id)


@router.get("/{order_id}/receipt")
async def download_receipt(
    order_id: int,
    db: Database = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    order = order_service.build_document_order(db, order_id, user_id=user_id)
    return pdf_response(render_receipt, order, f"receipt_{order_id}.pdf")
