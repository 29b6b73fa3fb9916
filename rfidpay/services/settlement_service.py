"""Settlement engine module.

Turns every pending entry for an RFID tag into one balance debit and one
transaction record. A settlement attempt moves through:

    Resolving -> Aggregating -> Validating -> Committing

Resolving happens once. Aggregating, Validating and Committing share one
database transaction so the balance that is checked is the balance that is
debited. Writes are conditional:

- the account row is updated only if its ``version`` is unchanged since the
  re-read inside the transaction
- pending rows are completed only while still in "pending"

A conditional write that touches fewer rows than expected is a write
conflict: the transaction is rolled back and the whole cycle runs again,
up to ``SETTLEMENT_MAX_RETRIES`` attempts.
"""
import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rfidpay.exceptions.api_exception import (
    APIException,
    ErrorKind,
    InfrastructureFailure,
    InsufficientBalanceError,
    NoPendingWorkError,
    UserNotFoundError,
)
from rfidpay.models.pending import PendingTransaction
from rfidpay.models.transaction import Transaction
from rfidpay.models.user import User
from rfidpay.schemas.settlement import SettlementResult
from rfidpay.services.identity_service import normalize_uid, find_user_by_uid
from rfidpay.services.pending_service import entry_subtotal, fetch_pending, mark_completed
from rfidpay.services.scan_state_service import ScanStateTracker, ScanStatus
from rfidpay.settings import settings

logger = logging.getLogger(__name__)


class WriteConflict(Exception):
    """A conditional write lost a race with another settlement."""


def _flatten_items(entries: list[PendingTransaction]) -> list[dict]:
    """All line items in settlement order, tagged with their pending entry."""
    flattened = []
    for entry in entries:
        for item in entry.items:
            flattened.append({**item, "pending_id": str(entry.id)})
    return flattened


async def _read_balance(db: AsyncSession, user_id: UUID) -> Optional[tuple[Decimal, int]]:
    """Current balance and version, read inside the settlement transaction."""
    query = select(User.balance, User.version).where(User.id == user_id).with_for_update()
    result = await db.execute(query)
    row = result.one_or_none()
    if row is None:
        return None
    return Decimal(row.balance), row.version


async def _attempt(
    db: AsyncSession,
    user_id: UUID,
    rfid_uid: str,
    batch_size: int,
) -> SettlementResult:
    """One read-validate-write cycle. Leaves the transaction uncommitted."""
    # Aggregating
    entries = await fetch_pending(db, rfid_uid, limit=batch_size)
    if not entries:
        raise NoPendingWorkError()

    total = sum((entry_subtotal(entry) for entry in entries), Decimal("0.00"))

    # Validating
    current = await _read_balance(db, user_id)
    if current is None:
        raise UserNotFoundError()
    balance, version = current

    if balance < total:
        raise InsufficientBalanceError()

    # Committing
    new_balance = balance - total
    debit = await db.execute(
        update(User)
        .where(User.id == user_id, User.version == version)
        .values(balance=new_balance, version=version + 1)
    )
    if debit.rowcount != 1:
        raise WriteConflict(f"account {user_id} changed during settlement")

    items = _flatten_items(entries)
    record = Transaction(
        user_id=user_id,
        rfid_uid=rfid_uid,
        amount=total,
        items=items,
        item_count=len(items),
        status="completed",
        created_at=datetime.utcnow(),
    )
    db.add(record)
    await db.flush()

    marked = await mark_completed(db, entries, record.id)
    if marked != len(entries):
        raise WriteConflict(f"{len(entries) - marked} pending entr(ies) already consumed")

    return SettlementResult(
        transaction_id=record.id,
        user_id=user_id,
        rfid_uid=rfid_uid,
        total=total,
        new_balance=new_balance,
        pending_ids=[entry.id for entry in entries],
    )


async def settle(
    db: AsyncSession,
    rfid_uid: str,
    scan_tracker: Optional[ScanStateTracker] = None,
    batch_size: Optional[int] = None,
    max_retries: Optional[int] = None,
) -> SettlementResult:
    """
    Pay every pending entry for a tag from the owner's balance.

    Args:
        db: Database session
        rfid_uid: Tag UID as sent by the reader
        scan_tracker: Optional last-scan slot, set to "completed" on success
        batch_size: Maximum pending entries per settlement
        max_retries: Attempts before a write conflict is reported

    Returns:
        SettlementResult with the new transaction id, total and balance

    Raises:
        ClientInputError: UID missing or malformed
        UserNotFoundError: no account for this UID
        NoPendingWorkError: nothing to settle
        InsufficientBalanceError: balance below the recomputed total
        InfrastructureFailure: store error, or conflicts beyond the retry budget
    """
    batch_size = batch_size or settings.PENDING_BATCH_SIZE
    max_retries = max_retries or settings.SETTLEMENT_MAX_RETRIES

    canonical = normalize_uid(rfid_uid)
    logger.info("Settlement requested for %s", canonical)

    # Resolving
    try:
        user = await find_user_by_uid(db, canonical)
    except SQLAlchemyError:
        logger.exception("User lookup failed for %s", canonical)
        raise InfrastructureFailure()
    if user is None:
        logger.info("Settlement rejected for %s: user not found", canonical)
        raise UserNotFoundError()
    user_id = user.id

    for attempt in range(1, max_retries + 1):
        try:
            result = await _attempt(db, user_id, canonical, batch_size)
            await db.commit()
        except WriteConflict as e:
            await db.rollback()
            logger.warning("Settlement conflict for %s (attempt %d/%d): %s", canonical, attempt, max_retries, e)
            continue
        except APIException as e:
            await db.rollback()
            logger.info("Settlement rejected for %s: %s", canonical, e.kind.value)
            raise
        except (SQLAlchemyError, InvalidOperation):
            await db.rollback()
            logger.exception("Settlement failed for %s", canonical)
            raise InfrastructureFailure()

        logger.info(
            "Settled %d pending entr(ies) for %s: transaction %s, total %s",
            len(result.pending_ids), canonical, result.transaction_id, result.total,
        )
        if scan_tracker is not None:
            await _mark_scan_completed(scan_tracker, canonical)
        return result

    logger.error("Settlement for %s gave up after %d conflicting attempts", canonical, max_retries)
    raise InfrastructureFailure(
        "Transaction conflict, please retry", kind=ErrorKind.SETTLEMENT_CONFLICT
    )


async def _mark_scan_completed(scan_tracker: ScanStateTracker, rfid_uid: str) -> None:
    # Runs after commit, so failures are logged only
    try:
        await scan_tracker.record(rfid_uid, ScanStatus.COMPLETED)
    except SQLAlchemyError:
        logger.exception("Could not update scan state for %s", rfid_uid)
