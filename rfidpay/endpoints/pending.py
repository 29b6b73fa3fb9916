"""Pending ledger endpoints module.

Provides endpoints for:
- Staging a cart from the app (POST /checkout)
- Staging a cart directly (POST /addPending)
- Administrative reset (DELETE /clearPending/{rfid_uid})
- Debug listing (GET /pendingTest)
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from rfidpay.database.database import get_db
from rfidpay.exceptions.api_exception import ClientInputError, UserNotFoundError
from rfidpay.models.user import User
from rfidpay.schemas.checkout import (
    AddPendingRequest,
    CheckoutRequest,
    ClearPendingResponse,
    PendingEntryResponse,
    PendingListResponse,
    StagedResponse,
)
from rfidpay.services.identity_service import normalize_uid
from rfidpay.services.pending_service import clear_pending, list_pending, stage_pending

router = APIRouter(tags=["pending"])

STAGED_MESSAGE = "Checkout sent to pending. Please scan RFID to complete payment."


@router.post("/checkout", response_model=StagedResponse)
async def checkout(
    request: CheckoutRequest,
    db: AsyncSession = Depends(get_db),
) -> StagedResponse:
    """
    Stage the app's cart until the owner taps their tag.

    The total is computed from the cart lines; the account must own the tag.
    """
    canonical = normalize_uid(request.rfid_uid)
    user = await db.get(User, request.userId)
    if user is None:
        raise UserNotFoundError()
    if user.rfid_uid != canonical:
        raise ClientInputError("RFID UID does not belong to this user")

    entry = await stage_pending(db, canonical, request.cartItems, user_id=user.id)
    return StagedResponse(message=STAGED_MESSAGE, pendingId=entry.id, total=entry.total)


@router.post("/addPending", response_model=StagedResponse)
async def add_pending(
    request: AddPendingRequest,
    db: AsyncSession = Depends(get_db),
) -> StagedResponse:
    """Stage a cart for a tag without an app session."""
    entry = await stage_pending(db, request.rfid_uid, request.items, total=request.total)
    return StagedResponse(message=STAGED_MESSAGE, pendingId=entry.id, total=entry.total)


@router.delete("/clearPending/{rfid_uid}", response_model=ClearPendingResponse)
async def clear_pending_entries(
    rfid_uid: str,
    db: AsyncSession = Depends(get_db),
) -> ClearPendingResponse:
    """Remove every staged entry for a tag. For error recovery only."""
    deleted = await clear_pending(db, rfid_uid)
    return ClearPendingResponse(
        deleted=deleted,
        message=f"Successfully deleted {deleted} pending transaction(s)",
    )


@router.get("/pendingTest", response_model=PendingListResponse)
async def pending_test(
    rfid: str = Query(..., description="RFID UID to list"),
    db: AsyncSession = Depends(get_db),
) -> PendingListResponse:
    """Debug view of every outstanding entry for a tag, oldest first."""
    entries = await list_pending(db, normalize_uid(rfid))
    return PendingListResponse(
        pending=[PendingEntryResponse.model_validate(entry) for entry in entries]
    )
