"""Tests for real-time notification publishing."""

import asyncio
import json
import threading
import time
from unittest.mock import MagicMock

import pytest
from conftest import InMemoryPublisher, auth_header
from fastapi import BackgroundTasks
from redis.exceptions import ConnectionError as RedisConnectionError

from app.core import notifications
from app.core.notifications import BackgroundPublisher, RedisPublisher
from app.dependencies import get_event_transport
from app.main import app


class ExplodingPublisher:
    """Publisher whose transport is broken."""

    def publish(self, topic, payload):
        raise RuntimeError("transport unavailable")


class SlowPublisher:
    """Publisher whose transport takes a second per event."""

    def __init__(self):
        self.started = threading.Event()
        self.started_at = None

    def publish(self, topic, payload):
        if self.started_at is None:
            self.started_at = time.monotonic()
        self.started.set()
        time.sleep(1.0)


def test_redis_publisher_channel_naming():
    publisher = RedisPublisher(MagicMock(), "hospital")
    assert publisher.channel_for(notifications.NEW_APPOINTMENT) == "hospital:new-appointment"


def test_redis_publisher_sends_json():
    mock_redis = MagicMock()
    publisher = RedisPublisher(mock_redis, "clinic")

    publisher.publish(notifications.DASHBOARD_UPDATE, {"type": "appointment", "count": 4})

    channel, message = mock_redis.publish.call_args.args
    assert channel == "clinic:dashboard-update"
    assert json.loads(message) == {"type": "appointment", "count": 4}


def test_redis_publisher_swallows_failures():
    mock_redis = MagicMock()
    mock_redis.publish.side_effect = RedisConnectionError("down")
    publisher = RedisPublisher(mock_redis, "hospital")

    publisher.publish(notifications.STATUS_CHANGED, {"appointment_id": "x"})

    mock_redis.publish.assert_called_once()


def test_background_publisher_defers_delivery():
    transport = InMemoryPublisher()
    tasks = BackgroundTasks()
    publisher = BackgroundPublisher(transport, tasks)

    publisher.publish("a", {"n": 1})
    publisher.publish("b", {"n": 2})

    assert transport.events == []
    assert len(tasks.tasks) == 2


@pytest.mark.asyncio
async def test_background_publisher_delivers_in_order():
    transport = InMemoryPublisher()
    tasks = BackgroundTasks()
    publisher = BackgroundPublisher(transport, tasks)
    publisher.publish("a", {"n": 1})
    publisher.publish("b", {"n": 2})

    await tasks()

    assert transport.topics() == ["a", "b"]
    assert transport.events[1] == ("b", {"n": 2})


@pytest.mark.asyncio
async def test_background_publisher_swallows_transport_failures():
    tasks = BackgroundTasks()
    BackgroundPublisher(ExplodingPublisher(), tasks).publish("a", {"n": 1})

    await tasks()


@pytest.mark.asyncio
async def test_booking_succeeds_when_publishing_fails(client, patient, doctor, booking_day):
    app.dependency_overrides[get_event_transport] = lambda: ExplodingPublisher()

    response = await client.post(
        "/api/v1/appointments/",
        json={
            "doctor_id": str(doctor["id"]),
            "appointment_date": booking_day.isoformat(),
            "appointment_time": "09:00",
        },
        headers=auth_header(patient),
    )

    assert response.status_code == 201


@pytest.mark.asyncio
async def test_new_appointment_payload(client, patient, doctor, booking_day, publisher):
    await client.post(
        "/api/v1/appointments/",
        json={
            "doctor_id": str(doctor["id"]),
            "appointment_date": booking_day.isoformat(),
            "appointment_time": "13:30",
        },
        headers=auth_header(patient),
    )

    topic, payload = publisher.events[0]
    assert topic == notifications.NEW_APPOINTMENT
    assert payload["doctor_name"] == f"Dr. {doctor['first_name']} {doctor['last_name']}"
    assert payload["patient_name"] == f"{patient['first_name']} {patient['last_name']}"
    assert payload["date"] == booking_day.isoformat()
    assert payload["time"] == "13:30"

    topic, payload = publisher.events[1]
    assert topic == notifications.DASHBOARD_UPDATE
    assert payload == {"type": "appointment", "count": 0}


@pytest.mark.asyncio
async def test_rejected_booking_publishes_nothing(client, patient, doctor, booking_day, publisher):
    response = await client.post(
        "/api/v1/appointments/",
        json={
            "doctor_id": str(doctor["id"]),
            "appointment_date": booking_day.isoformat(),
            "appointment_time": "31:00",
        },
        headers=auth_header(patient),
    )

    assert response.status_code == 400
    assert publisher.events == []


@pytest.mark.asyncio
async def test_slow_transport_does_not_block_event_loop(client, patient, doctor, booking_day):
    transport = SlowPublisher()
    app.dependency_overrides[get_event_transport] = lambda: transport

    booking = asyncio.create_task(
        client.post(
            "/api/v1/appointments/",
            json={
                "doctor_id": str(doctor["id"]),
                "appointment_date": booking_day.isoformat(),
                "appointment_time": "10:00",
            },
            headers=auth_header(patient),
        )
    )

    async def delivery_started():
        while not transport.started.is_set():
            await asyncio.sleep(0.01)

    await asyncio.wait_for(delivery_started(), timeout=10)
    # Other coroutines keep running while the event is on the wire
    assert time.monotonic() - transport.started_at < 0.5

    response = await booking
    assert response.status_code == 201
