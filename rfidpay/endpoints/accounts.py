"""Account endpoints module."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rfidpay.database.database import get_db
from rfidpay.schemas.account import LoginRequest, LoginResponse, UserResponse
from rfidpay.services.identity_service import authenticate, resolve_user

router = APIRouter(tags=["accounts"])


@router.post("/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    """
    Log into the storefront app.

    The RFID UID acts as the password; the name is matched as well when sent.
    """
    user = await authenticate(db, rfid_uid=payload.rfid_uid, name=payload.name)
    return LoginResponse(userId=user.id, name=user.name, balance=user.balance)


@router.get("/user/{rfid_uid}", response_model=UserResponse)
async def get_user(
    rfid_uid: str,
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    """Latest account record for a tag, e.g. to refresh the balance."""
    user = await resolve_user(db, rfid_uid)
    return UserResponse(
        userId=user.id,
        name=user.name,
        rfid_uid=user.rfid_uid,
        balance=user.balance,
    )
