"""Product model module."""
import uuid
from decimal import Decimal

from sqlalchemy import String, Numeric, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from rfidpay.database.database import Base


class Product(Base):
    """Catalogue entry looked up by barcode."""

    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    barcode: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
