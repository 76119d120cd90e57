"""Tests for Redis caching implementation."""

from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from app.core.redis_client import CacheManager
from app.schemas.doctor_schedules import DoctorScheduleUpdate
from app.services.schedule_service import ScheduleService


def test_cache_manager_get_json():
    """Test CacheManager get_json method."""
    mock_redis = MagicMock()
    cache_manager = CacheManager(redis_client=mock_redis)

    # Test cache miss
    mock_redis.get.return_value = None
    result = cache_manager.get_json("test_key")
    assert result is None
    mock_redis.get.assert_called_once_with("test_key")

    # Test cache hit
    mock_redis.reset_mock()
    mock_redis.get.return_value = '{"work_start": "09:00", "appointment_duration": 30}'
    result = cache_manager.get_json("test_key")
    assert result == {"work_start": "09:00", "appointment_duration": 30}
    mock_redis.get.assert_called_once_with("test_key")


def test_cache_manager_set_json():
    """Test CacheManager set_json method."""
    mock_redis = MagicMock()
    cache_manager = CacheManager(redis_client=mock_redis)

    test_data = {"doctor_id": uuid4(), "working_days": ["monday"]}

    # Test without TTL
    result = cache_manager.set_json("test_key", test_data)
    assert result is True
    mock_redis.set.assert_called_once()

    # Test with TTL
    mock_redis.reset_mock()
    result = cache_manager.set_json("test_key", test_data, ttl=300)
    assert result is True
    key, ttl, _ = mock_redis.setex.call_args.args
    assert key == "test_key"
    assert ttl == 300


def test_cache_manager_delete():
    """Test CacheManager delete method."""
    mock_redis = MagicMock()
    cache_manager = CacheManager(redis_client=mock_redis)

    result = cache_manager.delete("test_key")
    assert result is True
    mock_redis.delete.assert_called_once_with("test_key")


def test_cache_manager_degrades_when_redis_is_down():
    """Redis failures turn into cache misses instead of errors."""
    mock_redis = MagicMock()
    mock_redis.get.side_effect = RedisConnectionError("down")
    mock_redis.setex.side_effect = RedisConnectionError("down")
    mock_redis.delete.side_effect = RedisConnectionError("down")
    cache_manager = CacheManager(redis_client=mock_redis)

    assert cache_manager.get_json("key") is None
    assert cache_manager.set_json("key", {"a": 1}, ttl=10) is False
    assert cache_manager.delete("key") is False


@pytest.mark.asyncio
async def test_schedule_is_cached_after_first_read(db_session, doctor):
    """A schedule read from the database is stored in the cache."""
    cache = MagicMock()
    cache.get_json.return_value = None
    service = ScheduleService(db_session, cache)

    schedule = await service.get_schedule(doctor["id"])

    assert schedule.is_default is True
    key, value = cache.set_json.call_args.args
    assert key == f"doctor_schedule:{doctor['id']}"
    assert value["doctor_id"] == str(doctor["id"])
    assert cache.set_json.call_args.kwargs["ttl"] == ScheduleService.SCHEDULE_CACHE_TTL


@pytest.mark.asyncio
async def test_cached_schedule_is_served_without_database(db_session):
    """A cache hit is returned as-is."""
    doctor_id = uuid4()
    cache = MagicMock()
    cache.get_json.return_value = {
        "doctor_id": str(doctor_id),
        "working_days": ["saturday"],
        "work_start": "10:00",
        "work_end": "12:00",
        "break_start": None,
        "break_end": None,
        "appointment_duration": 60,
        "currently_on_leave": False,
        "leave_days": [],
        "is_default": False,
        "updated_at": None,
    }
    service = ScheduleService(db_session, cache)

    # The doctor does not exist in the database, so only the cache can answer
    schedule = await service.get_schedule(doctor_id)

    assert schedule.work_start == "10:00"
    assert schedule.appointment_duration == 60
    cache.set_json.assert_not_called()


@pytest.mark.asyncio
async def test_schedule_update_invalidates_cache(db_session, doctor):
    """Replacing a schedule drops its cache entry."""
    cache = MagicMock()
    cache.get_json.return_value = None
    service = ScheduleService(db_session, cache)

    await service.update_schedule(doctor["id"], DoctorScheduleUpdate(work_start="08:00"))

    cache.delete.assert_called_once_with(f"doctor_schedule:{doctor['id']}")


def test_cache_manager_namespaces_keys():
    """Keys are prefixed with the configured namespace."""
    mock_redis = MagicMock()
    mock_redis.get.return_value = None
    cache_manager = CacheManager(redis_client=mock_redis, namespace="hospital")

    cache_manager.get_json("doctor_schedule:1")
    cache_manager.delete("doctor_schedule:1")

    mock_redis.get.assert_called_once_with("hospital:doctor_schedule:1")
    mock_redis.delete.assert_called_once_with("hospital:doctor_schedule:1")


def test_cache_manager_treats_corrupt_entries_as_misses():
    mock_redis = MagicMock()
    mock_redis.get.return_value = "{not json"
    cache_manager = CacheManager(redis_client=mock_redis)

    assert cache_manager.get_json("key") is None
