"""
API endpoints for the customer's shipping addresses.
"""

from fastapi import APIRouter, Depends

from portal.database import Database
from portal.dependencies import get_current_user_id, get_db
from portal.schemas import ShippingAddressIn
from portal.services.address_service import address_service

router = APIRouter()


@router.get("")
async def list_addresses(
    db: Database = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    return address_service.list_addresses(db, user_id)


@router.post("", status_code=201)
async def create_address(
    data: ShippingAddressIn,
    db: Database = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    address = address_service.create_address(db, user_id, data.model_dump())
    return {
        "success": True,
        "address_id": address["id"],
        "address": address,
        "message": "Shipping address added",
    }


@router.put("/{address_id}")
async def update_address(
    address_id: int,
    data: ShippingAddressIn,
    db: Database = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    address = address_service.update_address(db, user_id, address_id, data.model_dump())
    return {"success": True, "address": address, "message": "Shipping address updated"}


@router.delete("/{address_id}")
async def delete_address(
    address_id: int,
    db: Database = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    address_service.delete_address(db, user_id, address_id)
    return {"success": True, "message": "Shipping address deleted"}
