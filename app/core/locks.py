"""Serialisation of the check-then-insert booking sequence."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date
from uuid import UUID
from weakref import WeakValueDictionary

import structlog
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger(__name__)

_local_locks: "WeakValueDictionary[str, asyncio.Lock]" = WeakValueDictionary()


def booking_lock_key(doctor_id: UUID, day: date) -> str:
    """Get the lock key of a doctor's calendar day."""
    return f"booking:{doctor_id}:{day.isoformat()}"


def _local_lock(key: str) -> asyncio.Lock:
    lock = _local_locks.get(key)
    if lock is None:
        lock = asyncio.Lock()
        _local_locks[key] = lock
    return lock


@asynccontextmanager
async def booking_lock(db: AsyncSession, doctor_id: UUID, day: date) -> AsyncIterator[None]:
    """
    Hold exclusive access to a doctor's calendar day.

    Bookings in this process are serialised with an asyncio lock. On
    PostgreSQL a transaction-scoped advisory lock is also taken so that other
    workers are excluded; it is released when the session commits or rolls
    back, so the caller must commit inside the ``async with`` block.

    Args:
        db: Session the conflict check and insert run on
        doctor_id: Doctor whose calendar is locked
        day: Calendar day
    """
    key = booking_lock_key(doctor_id, day)
    lock = _local_lock(key)

    async with lock:
        if db.get_bind().dialect.name == "postgresql":
            await db.execute(text("SELECT pg_advisory_xact_lock(hashtext(:key))"), {"key": key})
        logger.debug("booking_lock_acquired", key=key)
        yield
