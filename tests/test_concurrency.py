"""Tests for serialisation of concurrent bookings."""

import asyncio

import pytest
from conftest import InMemoryPublisher, insert_user, next_weekday
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.exceptions import ConflictException
from app.models import appointments, metadata
from app.schemas.appointments import AppointmentCreate
from app.services.appointment_service import AppointmentService


@pytest.mark.asyncio
async def test_concurrent_double_booking_yields_one_appointment(tmp_path):
    """Two simultaneous bookings of the same slot: exactly one succeeds."""
    # Separate connections need a shared on-disk database
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'race.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    sessions = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with sessions() as setup:
        patient = await insert_user(setup, "user")
        doctor = await insert_user(setup, "doctor")

    day = next_weekday()
    publisher = InMemoryPublisher()

    async def attempt(time: str):
        async with sessions() as session:
            service = AppointmentService(session, publisher)
            data = AppointmentCreate(
                doctor_id=doctor["id"], appointment_date=day, appointment_time=time
            )
            return await service.create_appointment(patient, data)

    results = await asyncio.gather(attempt("09:00"), attempt("09:15"), return_exceptions=True)

    successes = [result for result in results if not isinstance(result, Exception)]
    failures = [result for result in results if isinstance(result, Exception)]
    assert len(successes) == 1
    assert len(failures) == 1
    assert isinstance(failures[0], ConflictException)

    async with sessions() as check:
        count = await check.scalar(
            select(func.count()).select_from(appointments).where(
                appointments.c.doctor_id == doctor["id"]
            )
        )
    assert count == 1

    await engine.dispose()


@pytest.mark.asyncio
async def test_concurrent_bookings_of_different_slots_both_succeed(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'parallel.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    sessions = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with sessions() as setup:
        patient = await insert_user(setup, "user")
        doctor = await insert_user(setup, "doctor")

    day = next_weekday()

    async def attempt(time: str):
        async with sessions() as session:
            service = AppointmentService(session, InMemoryPublisher())
            data = AppointmentCreate(
                doctor_id=doctor["id"], appointment_date=day, appointment_time=time
            )
            return await service.create_appointment(patient, data)

    results = await asyncio.gather(*(attempt(time) for time in ("09:00", "09:30", "10:00")))

    assert sorted(result.appointment_time for result in results) == ["09:00", "09:30", "10:00"]

    await engine.dispose()
