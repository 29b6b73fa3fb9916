"""Checkout and pending ledger schemas module."""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class LineItem(BaseModel):
    """One cart line as sent by the storefront."""

    name: str = Field(..., min_length=1, max_length=256, description="Product name")
    barcode: Optional[str] = Field(None, max_length=64, description="Product barcode")
    price: Decimal = Field(..., ge=0, decimal_places=2, description="Unit price")
    qty: int = Field(1, ge=1, description="Quantity")


class CheckoutRequest(BaseModel):
    """Request schema for staging a cart from the app."""

    userId: UUID = Field(..., description="Account placing the order")
    cartItems: list[LineItem] = Field(..., min_length=1, description="Cart contents")
    rfid_uid: str = Field(..., min_length=1, description="Tag that will pay")


class AddPendingRequest(BaseModel):
    """Request schema for the direct staging entry point."""

    rfid_uid: str = Field(..., min_length=1, description="Tag that will pay")
    items: list[LineItem] = Field(..., min_length=1, description="Cart contents")
    total: Optional[Decimal] = Field(
        None, ge=0, decimal_places=2, description="Client-side total, stored as a cache only"
    )


class StagedResponse(BaseModel):
    message: str
    pendingId: UUID
    total: Decimal


class PendingEntryResponse(BaseModel):
    """Pending entry as listed by the debug endpoint."""

    id: UUID
    rfid_uid: str
    user_id: Optional[UUID] = None
    items: list[dict]
    total: Decimal
    status: str
    created_at: datetime
    processed_at: Optional[datetime] = None
    transaction_id: Optional[UUID] = None

    class Config:
        from_attributes = True


class PendingListResponse(BaseModel):
    pending: list[PendingEntryResponse] = Field(default_factory=list)


class ClearPendingResponse(BaseModel):
    deleted: int
    message: str
