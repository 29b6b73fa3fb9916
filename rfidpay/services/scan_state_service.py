"""Scan state tracker module.

Holds the most recent RFID scan for client polling. One slot per
deployment, overwritten on every scan and again when a settlement
completes. Nothing in the payment path reads it.

Backends:
- memory: process-local slot guarded by an asyncio lock
- database: singleton row in ``current_scan_state``
"""
import asyncio
import enum
import logging
from datetime import datetime
from typing import Optional

from pydantic import BaseModel
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from rfidpay.models.scan_state import CurrentScanState, SCAN_STATE_ROW_ID

logger = logging.getLogger(__name__)


class ScanStatus(str, enum.Enum):
    SCANNED = "scanned"
    COMPLETED = "completed"


class ScanState(BaseModel):
    rfid_uid: str
    status: ScanStatus
    updated_at: datetime


class ScanStateTracker:
    """Last-scan slot interface."""

    async def record(self, rfid_uid: str, status: ScanStatus) -> ScanState:
        raise NotImplementedError

    async def latest(self) -> Optional[ScanState]:
        raise NotImplementedError

    async def close(self) -> None:
        pass


class InMemoryScanStateTracker(ScanStateTracker):
    """Process-local slot, lost on restart."""

    def __init__(self):
        self._state: Optional[ScanState] = None
        self._lock = asyncio.Lock()

    async def record(self, rfid_uid: str, status: ScanStatus) -> ScanState:
        state = ScanState(rfid_uid=rfid_uid, status=status, updated_at=datetime.utcnow())
        async with self._lock:
            self._state = state
        return state

    async def latest(self) -> Optional[ScanState]:
        async with self._lock:
            return self._state

    async def close(self) -> None:
        async with self._lock:
            self._state = None


class DatabaseScanStateTracker(ScanStateTracker):
    """Slot persisted as the singleton ``current_scan_state`` row."""

    def __init__(self, session_factory: Optional[async_sessionmaker[AsyncSession]] = None):
        # Resolved lazily so building the app does not open a connection
        self._session_factory = session_factory

    def _sessions(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is not None:
            return self._session_factory
        from rfidpay.database.database import get_session_factory
        return get_session_factory()

    async def _overwrite(self, session: AsyncSession, rfid_uid: str, status: ScanStatus, now: datetime) -> bool:
        """Update the singleton row in place. False when it does not exist yet."""
        result = await session.execute(
            update(CurrentScanState)
            .where(CurrentScanState.id == SCAN_STATE_ROW_ID)
            .values(rfid_uid=rfid_uid, status=status.value, updated_at=now)
        )
        await session.commit()
        return result.rowcount == 1

    async def record(self, rfid_uid: str, status: ScanStatus) -> ScanState:
        now = datetime.utcnow()
        async with self._sessions()() as session:
            if not await self._overwrite(session, rfid_uid, status, now):
                session.add(
                    CurrentScanState(id=SCAN_STATE_ROW_ID, rfid_uid=rfid_uid, status=status.value, updated_at=now)
                )
                try:
                    await session.commit()
                except IntegrityError:
                    # Another first scan created the row in between
                    await session.rollback()
                    logger.debug("Scan state row created concurrently, overwriting")
                    await self._overwrite(session, rfid_uid, status, now)
        return ScanState(rfid_uid=rfid_uid, status=status, updated_at=now)

    async def latest(self) -> Optional[ScanState]:
        async with self._sessions()() as session:
            row = await session.get(CurrentScanState, SCAN_STATE_ROW_ID)
            if row is None:
                return None
            return ScanState(rfid_uid=row.rfid_uid, status=ScanStatus(row.status), updated_at=row.updated_at)


def build_scan_tracker(backend: str) -> ScanStateTracker:
    """Create the tracker named by SCAN_STATE_BACKEND."""
    if backend == "memory":
        return InMemoryScanStateTracker()
    if backend == "database":
        return DatabaseScanStateTracker()
    raise ValueError(f"Unknown scan state backend: {backend!r}")
