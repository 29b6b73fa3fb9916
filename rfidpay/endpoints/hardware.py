"""RFID reader endpoints module."""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rfidpay.database.database import get_db
from rfidpay.endpoints.dependencies import get_scan_tracker, require_api_key
from rfidpay.exceptions.api_exception import NotFoundError
from rfidpay.schemas.settlement import (
    ScanRequest,
    ScanResponse,
    ScanStateResponse,
    SettlementResponse,
)
from rfidpay.services.identity_service import normalize_uid
from rfidpay.services.scan_state_service import ScanStateTracker, ScanStatus
from rfidpay.services.settlement_service import settle

logger = logging.getLogger(__name__)

router = APIRouter(tags=["hardware"])


@router.post("/rfidScan", response_model=ScanResponse)
async def rfid_scan(
    request: ScanRequest,
    scan_tracker: ScanStateTracker = Depends(get_scan_tracker),
) -> ScanResponse:
    """Record a tag read for client polling. Moves no money."""
    canonical = normalize_uid(request.rfid_uid)
    state = await scan_tracker.record(canonical, ScanStatus.SCANNED)
    return ScanResponse(message="Scan recorded", rfid_uid=state.rfid_uid, status=state.status.value)


@router.get("/scanState", response_model=ScanStateResponse)
async def scan_state(
    scan_tracker: ScanStateTracker = Depends(get_scan_tracker),
) -> ScanStateResponse:
    """Most recent scan, polled by the app while waiting for payment."""
    state = await scan_tracker.latest()
    if state is None:
        raise NotFoundError("No scan recorded")
    return ScanStateResponse(rfid_uid=state.rfid_uid, status=state.status.value, updated_at=state.updated_at)


@router.post(
    "/transaction",
    response_model=SettlementResponse,
    dependencies=[Depends(require_api_key)],
)
async def transaction(
    request: ScanRequest,
    db: AsyncSession = Depends(get_db),
    scan_tracker: ScanStateTracker = Depends(get_scan_tracker),
) -> SettlementResponse:
    """
    Settle all pending carts for the scanned tag.

    Requires the shared ``x-api-key`` header. Responds with:
    - **200** on success
    - **400** for malformed input or insufficient balance
    - **403** for a missing or wrong key
    - **404** when the user or pending work is missing
    - **500** on store failure
    """
    logger.info("Received RFID UID: %s", request.rfid_uid)
    result = await settle(db, request.rfid_uid, scan_tracker=scan_tracker)
    return SettlementResponse(
        transactionId=result.transaction_id,
        total=result.total,
        balance=result.new_balance,
    )
