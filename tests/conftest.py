"""Pytest fixtures for an async SQLite test database."""
from datetime import datetime, timedelta
from decimal import Decimal

import httpx
import pytest
import pytest_asyncio
from pydantic import SecretStr
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from rfidpay.database.database import Base, get_db
from rfidpay.models.pending import PendingStatus, PendingTransaction
from rfidpay.models.product import Product
from rfidpay.models.scan_state import CurrentScanState  # noqa: F401  (registers table)
from rfidpay.models.transaction import Transaction  # noqa: F401  (registers table)
from rfidpay.models.user import User
from rfidpay.services.scan_state_service import InMemoryScanStateTracker
from rfidpay.settings import settings

TEST_API_KEY = "test-reader-key"

ALICE_UID = "04:A3:2B:1C"
BOB_UID = "DE:AD:BE:EF"


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """
    Session factory bound to a file-backed SQLite database.

    A file (not :memory:) gives every session its own connection, which
    the settlement race tests rely on.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory):
    """A session for the code under test."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def alice(session_factory):
    """Account with 50.00 on tag ALICE_UID."""
    async with session_factory() as session:
        user = User(name="Alice", rfid_uid=ALICE_UID, balance=Decimal("50.00"))
        session.add(user)
        await session.commit()
        return user


@pytest_asyncio.fixture
async def bob(session_factory):
    """Account with 10.00 on tag BOB_UID."""
    async with session_factory() as session:
        user = User(name="Bob", rfid_uid=BOB_UID, balance=Decimal("10.00"))
        session.add(user)
        await session.commit()
        return user


@pytest_asyncio.fixture
async def products(session_factory):
    async with session_factory() as session:
        items = [
            Product(barcode="MILK123", name="Milk", price=Decimal("2.00")),
            Product(barcode="CHOCO123", name="Chocolate", price=Decimal("3.00")),
        ]
        session.add_all(items)
        await session.commit()
        return items


@pytest.fixture
def add_pending(session_factory):
    """
    Insert a pending entry directly, bypassing the ledger service.

    Lets tests control created_at and plant a stored total that disagrees
    with the line items.
    """
    base = datetime(2026, 1, 1, 12, 0, 0)

    async def _add(rfid_uid, items, total=None, minutes=0, status=PendingStatus.PENDING.value):
        if total is None:
            total = sum(Decimal(i["price"]) * i.get("qty", 1) for i in items)
        async with session_factory() as session:
            entry = PendingTransaction(
                rfid_uid=rfid_uid,
                items=items,
                total=Decimal(total),
                status=status,
                created_at=base + timedelta(minutes=minutes),
            )
            session.add(entry)
            await session.commit()
            return entry

    return _add


@pytest.fixture
def scan_tracker():
    return InMemoryScanStateTracker()


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setattr(settings, "API_KEY", SecretStr(TEST_API_KEY))
    return TEST_API_KEY


@pytest_asyncio.fixture
async def client(session_factory, scan_tracker, api_key):
    """HTTP client against the app with the test database wired in."""
    from rfidpay.app import app

    async def _get_test_db():
        async with session_factory() as session:
            yield session

    previous_tracker = app.state.scan_tracker
    app.dependency_overrides[get_db] = _get_test_db
    app.state.scan_tracker = scan_tracker

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client

    app.dependency_overrides.clear()
    app.state.scan_tracker = previous_tracker
