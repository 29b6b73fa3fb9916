"""Product lookup service module."""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rfidpay.exceptions.api_exception import ClientInputError, ProductNotFoundError
from rfidpay.models.product import Product


async def get_product_by_barcode(db: AsyncSession, barcode: str) -> Product:
    """Return the product for a scanned barcode."""
    barcode = barcode.strip()
    if not barcode:
        raise ClientInputError("Missing barcode")

    query = select(Product).where(Product.barcode == barcode)
    result = await db.execute(query)
    product = result.scalar_one_or_none()

    if product is None:
        raise ProductNotFoundError(f"Product '{barcode}' not found")
    return product
