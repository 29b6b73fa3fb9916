"""Pending ledger service module.

Staging store for carts awaiting payment. Entries are created with status
"pending", read oldest-first by the settlement engine and transitioned to
"completed" exactly once, inside the settlement's database transaction.

The stored ``total`` is a cache of what the client saw at checkout. Anything
that moves money recomputes from the line items via ``entry_subtotal``.
"""
import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Sequence
from uuid import UUID

from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from rfidpay.exceptions.api_exception import ClientInputError
from rfidpay.models.pending import PendingStatus, PendingTransaction
from rfidpay.schemas.checkout import LineItem
from rfidpay.services.identity_service import normalize_uid
from rfidpay.settings import settings

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def _to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def compute_total(items: Iterable[dict]) -> Decimal:
    """Sum price x qty over serialized line items."""
    total = Decimal("0")
    for item in items:
        total += Decimal(str(item.get("price", 0))) * int(item.get("qty", 1))
    return _to_money(total)


def entry_subtotal(entry: PendingTransaction) -> Decimal:
    """Recompute a pending entry's amount from its line items."""
    return compute_total(entry.items)


async def stage_pending(
    db: AsyncSession,
    rfid_uid: str,
    items: Sequence[LineItem],
    total: Optional[Decimal] = None,
    user_id: Optional[UUID] = None,
) -> PendingTransaction:
    """
    Create a pending entry for a cart.

    Args:
        db: Database session
        rfid_uid: Tag that will pay, raw or canonical
        items: Non-empty ordered cart lines
        total: Optional caller total, stored as-is when given
        user_id: Account that placed the order, if known

    Returns:
        The committed PendingTransaction
    """
    if not items:
        raise ClientInputError("Cart must contain at least one item")

    serialized = [item.model_dump(mode="json") for item in items]
    computed = compute_total(serialized)
    if total is None:
        total = computed
    elif total < 0:
        raise ClientInputError("Total must not be negative")
    elif _to_money(total) != computed:
        logger.info("Caller total %s differs from line items %s; keeping as cache", total, computed)

    entry = PendingTransaction(
        rfid_uid=normalize_uid(rfid_uid),
        user_id=user_id,
        items=serialized,
        total=_to_money(total),
        status=PendingStatus.PENDING.value,
        created_at=datetime.utcnow(),
    )
    db.add(entry)
    await db.commit()
    await db.refresh(entry)

    logger.info("Staged pending entry %s for %s (%s)", entry.id, entry.rfid_uid, entry.total)
    return entry


def _outstanding(rfid_uid: str):
    # seq breaks created_at ties in insertion order
    return (
        select(PendingTransaction)
        .where(
            PendingTransaction.rfid_uid == rfid_uid,
            PendingTransaction.status == PendingStatus.PENDING.value,
        )
        .order_by(PendingTransaction.created_at.asc(), PendingTransaction.seq.asc())
    )


async def fetch_pending(
    db: AsyncSession,
    rfid_uid: str,
    limit: Optional[int] = None,
) -> list[PendingTransaction]:
    """Return the next settlement batch for a canonical UID, oldest first."""
    limit = limit or settings.PENDING_BATCH_SIZE
    result = await db.execute(_outstanding(rfid_uid).limit(limit))
    return list(result.scalars().all())


async def list_pending(db: AsyncSession, rfid_uid: str) -> list[PendingTransaction]:
    """Every outstanding entry for a canonical UID, oldest first, unbatched."""
    result = await db.execute(_outstanding(rfid_uid))
    return list(result.scalars().all())


async def clear_pending(db: AsyncSession, rfid_uid: str) -> int:
    """Delete every entry for a UID regardless of status. Returns the count."""
    canonical = normalize_uid(rfid_uid)
    result = await db.execute(
        delete(PendingTransaction).where(PendingTransaction.rfid_uid == canonical)
    )
    await db.commit()
    logger.warning("Cleared %d pending entr(ies) for %s", result.rowcount, canonical)
    return result.rowcount


async def mark_completed(
    db: AsyncSession,
    entries: Sequence[PendingTransaction],
    transaction_id: UUID,
    processed_at: Optional[datetime] = None,
) -> int:
    """
    Transition entries from pending to completed.

    Does not commit: must run inside the settlement transaction. Only rows
    still in "pending" are touched, so the returned count is lower than
    ``len(entries)`` when another settlement got there first.
    """
    if not entries:
        return 0

    result = await db.execute(
        update(PendingTransaction)
        .where(
            PendingTransaction.id.in_([entry.id for entry in entries]),
            PendingTransaction.status == PendingStatus.PENDING.value,
        )
        .values(
            status=PendingStatus.COMPLETED.value,
            processed_at=processed_at or datetime.utcnow(),
            transaction_id=transaction_id,
        )
    )
    return result.rowcount
