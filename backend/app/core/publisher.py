"""
Queue events for live displays and other subscribers.

Each event is a JSON object {"event": <name>, ...fields} sent on a single
pub/sub channel. Publishing is best effort: a failing broker is logged and
the calling operation carries on.
"""
import json
import logging
from typing import Any, Dict, Optional

import redis
from redis import Redis

from app.core.config import settings


logger = logging.getLogger(__name__)


class QueuePublisher:
    """Base publisher. Subclasses implement ``_send``."""

    def publish(self, event: str, **payload: Any) -> bool:
        message = {"event": event, **payload}
        try:
            self._send(message)
        except Exception:
            logger.warning("Failed to publish %s event %s", event, payload, exc_info=True)
            return False
        return True

    def _send(self, message: Dict[str, Any]) -> None:
        raise NotImplementedError

    def close(self) -> None:
        pass


class LoggingQueuePublisher(QueuePublisher):
    """Used when no Redis URL is configured."""

    def _send(self, message: Dict[str, Any]) -> None:
        logger.info("queue event %s", json.dumps(message, default=str))


class RedisQueuePublisher(QueuePublisher):
    def __init__(self, url: str, channel: str):
        self.url = url
        self.channel = channel
        self._client: Optional[Redis] = None

    @property
    def client(self) -> Redis:
        if self._client is None:
            self._client = redis.from_url(
                self.url,
                socket_connect_timeout=5,
                socket_keepalive=True,
            )
            logger.info("Redis publisher ready on channel %s", self.channel)
        return self._client

    def _send(self, message: Dict[str, Any]) -> None:
        self.client.publish(self.channel, json.dumps(message, default=str))

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None


def build_publisher() -> QueuePublisher:
    if settings.redis_url:
        return RedisQueuePublisher(settings.redis_url, settings.queue_channel)
    return LoggingQueuePublisher()


_publisher: Optional[QueuePublisher] = None


def get_publisher() -> QueuePublisher:
    """FastAPI dependency returning the process-wide publisher."""
    global _publisher
    if _publisher is None:
        _publisher = build_publisher()
    return _publisher


def close_publisher() -> None:
    """Release the broker connection; called on application shutdown."""
    global _publisher
    if _publisher is not None:
        _publisher.close()
        _publisher = None
