"""
API endpoints for the public product catalog.
"""

from typing import List

from fastapi import APIRouter, Depends

from portal.database import Database
from portal.dependencies import get_db
from portal.services.product_service import product_service

router = APIRouter()


@router.get("", response_model=List[dict])
async def list_products(db: Database = Depends(get_db)):
    """List active products."""
    return product_service.list_active(db)


@router.get("/{product_id}", response_model=dict)
async def get_product(product_id: int, db: Database = Depends(get_db)):
    """Get a single product."""
    return product_service.get_product(db, product_id)
