"""Tests for the pending ledger."""
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import select

from rfidpay.exceptions.api_exception import ClientInputError
from rfidpay.models.pending import PendingStatus, PendingTransaction
from rfidpay.schemas.checkout import LineItem
from rfidpay.services.pending_service import (
    clear_pending,
    compute_total,
    entry_subtotal,
    fetch_pending,
    list_pending,
    mark_completed,
    stage_pending,
)

ALICE_UID = "04:A3:2B:1C"
BOB_UID = "DE:AD:BE:EF"


class TestComputeTotal:
    """Tests for line item arithmetic."""

    def test_price_times_qty(self):
        items = [
            {"name": "Milk", "price": "2.00", "qty": 3},
            {"name": "Chocolate", "price": "3.25", "qty": 2},
        ]
        assert compute_total(items) == Decimal("12.50")

    def test_qty_defaults_to_one(self):
        assert compute_total([{"name": "Pen", "price": "1.50"}]) == Decimal("1.50")

    def test_no_float_drift(self):
        items = [{"name": "Gum", "price": "0.10", "qty": 1}] * 3
        assert compute_total(items) == Decimal("0.30")

    def test_subtotal_ignores_stored_total(self):
        entry = PendingTransaction(
            rfid_uid=ALICE_UID,
            items=[{"name": "Milk", "price": "2.00", "qty": 2}],
            total=Decimal("0.01"),
        )
        assert entry_subtotal(entry) == Decimal("4.00")


@pytest.mark.asyncio
class TestStagePending:
    """Tests for staging carts."""

    async def test_stage_computes_total(self, db_session):
        items = [
            LineItem(name="Milk", barcode="MILK123", price=Decimal("2.00"), qty=2),
            LineItem(name="Chocolate", barcode="CHOCO123", price=Decimal("3.00")),
        ]
        entry = await stage_pending(db_session, "04a32b1c", items)

        assert entry.rfid_uid == ALICE_UID
        assert entry.status == PendingStatus.PENDING.value
        assert entry.total == Decimal("7.00")
        assert entry.created_at is not None
        assert entry.processed_at is None
        assert [i["name"] for i in entry.items] == ["Milk", "Chocolate"]

    async def test_caller_total_is_kept_as_cache(self, db_session):
        items = [LineItem(name="Milk", price=Decimal("2.00"), qty=1)]
        entry = await stage_pending(db_session, ALICE_UID, items, total=Decimal("1.00"))
        assert entry.total == Decimal("1.00")
        assert entry_subtotal(entry) == Decimal("2.00")

    async def test_empty_cart_rejected(self, db_session):
        with pytest.raises(ClientInputError):
            await stage_pending(db_session, ALICE_UID, [])

    async def test_malformed_uid_rejected(self, db_session):
        items = [LineItem(name="Milk", price=Decimal("2.00"))]
        with pytest.raises(ClientInputError):
            await stage_pending(db_session, "not-a-uid", items)


@pytest.mark.asyncio
class TestFetchPending:
    """Tests for reading outstanding entries."""

    async def test_oldest_first(self, db_session, add_pending):
        late = await add_pending(ALICE_UID, [{"name": "B", "price": "1.00"}], minutes=10)
        early = await add_pending(ALICE_UID, [{"name": "A", "price": "1.00"}], minutes=1)

        entries = await fetch_pending(db_session, ALICE_UID)
        assert [e.id for e in entries] == [early.id, late.id]

    async def test_same_timestamp_keeps_insertion_order(self, db_session, add_pending):
        staged = [
            await add_pending(ALICE_UID, [{"name": name, "price": "1.00"}])
            for name in ("A", "B", "C", "D", "E")
        ]

        entries = await fetch_pending(db_session, ALICE_UID)
        assert [e.id for e in entries] == [s.id for s in staged]

    async def test_only_pending_for_uid(self, db_session, add_pending):
        mine = await add_pending(ALICE_UID, [{"name": "A", "price": "1.00"}])
        await add_pending(ALICE_UID, [{"name": "B", "price": "1.00"}], status=PendingStatus.COMPLETED.value)
        await add_pending(BOB_UID, [{"name": "C", "price": "1.00"}])

        entries = await fetch_pending(db_session, ALICE_UID)
        assert [e.id for e in entries] == [mine.id]

    async def test_batch_limit(self, db_session, add_pending):
        for minute in range(5):
            await add_pending(ALICE_UID, [{"name": "A", "price": "1.00"}], minutes=minute)

        entries = await fetch_pending(db_session, ALICE_UID, limit=3)
        assert len(entries) == 3

    async def test_none(self, db_session):
        assert await fetch_pending(db_session, ALICE_UID) == []

    async def test_listing_is_not_batched(self, db_session, add_pending):
        for minute in range(12):
            await add_pending(ALICE_UID, [{"name": "A", "price": "1.00"}], minutes=minute)

        assert len(await fetch_pending(db_session, ALICE_UID)) == 10
        assert len(await list_pending(db_session, ALICE_UID)) == 12


@pytest.mark.asyncio
class TestClearPending:
    """Tests for administrative reset."""

    async def test_deletes_every_status(self, db_session, add_pending):
        await add_pending(ALICE_UID, [{"name": "A", "price": "1.00"}])
        await add_pending(ALICE_UID, [{"name": "B", "price": "1.00"}], status=PendingStatus.COMPLETED.value)
        await add_pending(BOB_UID, [{"name": "C", "price": "1.00"}])

        deleted = await clear_pending(db_session, "04a32b1c")
        assert deleted == 2

        result = await db_session.execute(select(PendingTransaction))
        assert [e.rfid_uid for e in result.scalars().all()] == [BOB_UID]


@pytest.mark.asyncio
class TestMarkCompleted:
    """Tests for the pending -> completed transition."""

    async def test_transition_is_one_way(self, db_session, add_pending):
        entry = await add_pending(ALICE_UID, [{"name": "A", "price": "1.00"}])
        entries = await fetch_pending(db_session, ALICE_UID)
        first_txn, second_txn = uuid4(), uuid4()

        assert await mark_completed(db_session, entries, first_txn) == 1
        assert await mark_completed(db_session, entries, second_txn) == 0
        await db_session.commit()

        stored = await db_session.get(PendingTransaction, entry.id)
        await db_session.refresh(stored)
        assert stored.status == PendingStatus.COMPLETED.value
        assert stored.transaction_id == first_txn
        assert stored.processed_at is not None

    async def test_nothing_to_mark(self, db_session):
        assert await mark_completed(db_session, [], uuid4()) == 0
