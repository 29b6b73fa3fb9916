"""Product lookup endpoint module."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rfidpay.database.database import get_db
from rfidpay.schemas.account import ProductResponse
from rfidpay.services.product_service import get_product_by_barcode

router = APIRouter(tags=["products"])


@router.get("/product/{barcode}", response_model=ProductResponse)
async def get_product(
    barcode: str,
    db: AsyncSession = Depends(get_db),
) -> ProductResponse:
    """Look up a product by scanned barcode."""
    product = await get_product_by_barcode(db, barcode)
    return ProductResponse.model_validate(product)
