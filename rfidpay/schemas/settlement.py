"""Settlement and scan schemas module."""
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field


class ScanRequest(BaseModel):
    """Payload posted by the RFID reader."""

    rfid_uid: str = Field(..., min_length=1, description="RFID tag UID")


class ScanResponse(BaseModel):
    message: str
    rfid_uid: str
    status: str


class ScanStateResponse(BaseModel):
    rfid_uid: str
    status: str
    updated_at: datetime


class SettlementResponse(BaseModel):
    message: str = Field("Transaction Success")
    transactionId: UUID
    total: Decimal
    balance: Decimal


class SettlementResult(BaseModel):
    """Outcome of a successful settlement."""

    transaction_id: UUID
    user_id: UUID
    rfid_uid: str
    total: Decimal
    new_balance: Decimal
    pending_ids: list[UUID] = Field(default_factory=list)
