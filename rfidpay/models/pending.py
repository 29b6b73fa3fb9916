"""Pending transaction model module."""
import enum
import time
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import BigInteger, String, DateTime, Numeric, JSON, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from rfidpay.database.database import Base


_last_seq = 0


def next_seq() -> int:
    """Nanosecond clock reading, bumped so it never repeats or goes backwards in-process."""
    global _last_seq
    _last_seq = max(time.time_ns(), _last_seq + 1)
    return _last_seq


class PendingStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class PendingTransaction(Base):
    """Staged cart awaiting an RFID scan to be paid."""

    __tablename__ = "pending_transactions"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    rfid_uid: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid(as_uuid=True), nullable=True)
    # [{"name", "barcode", "price", "qty"}], prices as strings
    items: Mapped[list[dict]] = mapped_column(JSON, nullable=False)
    # Cached at staging time, never used for settlement
    total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=PendingStatus.PENDING.value, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, index=True
    )
    # Insertion order, breaks created_at ties
    seq: Mapped[int] = mapped_column(BigInteger, nullable=False, default=next_seq, index=True)
    processed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    transaction_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid(as_uuid=True), nullable=True)
