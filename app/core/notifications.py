"""Real-time event publishing for UI subscribers."""

import json
from typing import Any, Protocol

import redis
import structlog
from fastapi import BackgroundTasks

logger = structlog.get_logger(__name__)

# Topics
NEW_APPOINTMENT = "new-appointment"
DASHBOARD_UPDATE = "dashboard-update"
STATUS_CHANGED = "status-changed"
FOLLOW_UP_REQUIRED = "follow-up-required"


class NotificationPublisher(Protocol):
    """Fire-and-forget sink for real-time events."""

    def publish(self, topic: str, payload: dict[str, Any]) -> None:
        """Publish ``payload`` on ``topic``; must never raise."""


class RedisPublisher:
    """Publish events on Redis pub/sub channels named ``{prefix}:{topic}``."""

    def __init__(self, redis_client: redis.Redis, channel_prefix: str):
        """Initialize publisher with Redis client and channel prefix."""
        self.redis = redis_client
        self.channel_prefix = channel_prefix

    def channel_for(self, topic: str) -> str:
        """Get the channel name a topic is published on."""
        return f"{self.channel_prefix}:{topic}"

    def publish(self, topic: str, payload: dict[str, Any]) -> None:
        """
        Publish an event.

        Delivery failures are logged and swallowed so that they never fail
        the request that produced the event.

        Args:
            topic: Event topic
            payload: JSON-serialisable event body
        """
        channel = self.channel_for(topic)
        try:
            receivers = self.redis.publish(channel, json.dumps(payload, default=str))
            logger.debug("notification_published", channel=channel, receivers=receivers)
        except Exception as e:
            logger.warning("notification_publish_failed", channel=channel, error=str(e))


class BackgroundPublisher:
    """
    Defer delivery until the response has been sent.

    Starlette runs synchronous background tasks in its threadpool, so a slow
    or unreachable transport never holds the event loop or the response.
    """

    def __init__(self, transport: NotificationPublisher, background_tasks: BackgroundTasks):
        """Initialize with the publisher that actually delivers and the request's task list."""
        self.transport = transport
        self.background_tasks = background_tasks

    def publish(self, topic: str, payload: dict[str, Any]) -> None:
        """Queue the event for delivery."""
        self.background_tasks.add_task(self._deliver, topic, payload)

    def _deliver(self, topic: str, payload: dict[str, Any]) -> None:
        try:
            self.transport.publish(topic, payload)
        except Exception as e:
            logger.warning("notification_publish_failed", topic=topic, error=str(e))
