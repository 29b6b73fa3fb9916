"""Account and product schemas module."""
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """App login: the tag UID acts as the password."""

    name: Optional[str] = Field(None, description="Display name, matched when given")
    rfid_uid: str = Field(..., min_length=1, description="RFID tag UID")


class LoginResponse(BaseModel):
    userId: UUID
    name: str
    balance: Decimal


class UserResponse(BaseModel):
    userId: UUID
    name: str
    rfid_uid: str
    balance: Decimal


class ProductResponse(BaseModel):
    barcode: str
    name: str
    price: Decimal

    class Config:
        from_attributes = True
