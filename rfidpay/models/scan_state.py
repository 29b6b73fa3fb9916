"""Scan state model module."""
from datetime import datetime

from sqlalchemy import String, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from rfidpay.database.database import Base

SCAN_STATE_ROW_ID = 1


class CurrentScanState(Base):
    """Singleton row holding the most recent scan."""

    __tablename__ = "current_scan_state"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=SCAN_STATE_ROW_ID)
    rfid_uid: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )
