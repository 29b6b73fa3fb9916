"""User account model module."""
import uuid
from decimal import Decimal

from sqlalchemy import CheckConstraint, String, Integer, Numeric, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from rfidpay.database.database import Base


class User(Base):
    """Account whose RFID tag acts as identity and payment token."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_users_balance_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    # Stored in canonical form, see services.identity_service.normalize_uid
    rfid_uid: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    balance: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    # Bumped on every debit; guards the read-validate-write cycle
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
