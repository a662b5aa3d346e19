import json

import redis
from fastapi.testclient import TestClient

from app.core import publisher as publisher_module
from app.core.publisher import LoggingQueuePublisher, RedisQueuePublisher
from app.main import create_app


class FakeRedis:
    def __init__(self, fail=False):
        self.fail = fail
        self.published = []
        self.closed = False

    def publish(self, channel, data):
        if self.fail:
            raise redis.ConnectionError("connection refused")
        self.published.append((channel, data))
        return 1

    def close(self):
        self.closed = True


def test_redis_publisher_sends_json_on_channel(monkeypatch):
    fake = FakeRedis()
    urls = []

    def fake_from_url(url, **kwargs):
        urls.append(url)
        return fake

    monkeypatch.setattr(publisher_module.redis, "from_url", fake_from_url)
    pub = RedisQueuePublisher("redis://cache:6379/0", "queue_updates")

    assert pub.publish("queue_called", counter_id=2, queue_number=7, counter_name="B") is True
    assert pub.publish("all_queues_reset") is True

    assert urls == ["redis://cache:6379/0"]
    channel, data = fake.published[0]
    assert channel == "queue_updates"
    assert json.loads(data) == {"event": "queue_called", "counter_id": 2, "queue_number": 7, "counter_name": "B"}
    assert json.loads(fake.published[1][1]) == {"event": "all_queues_reset"}

    pub.close()
    assert fake.closed


def test_redis_publisher_swallows_broker_errors(monkeypatch, caplog):
    monkeypatch.setattr(publisher_module.redis, "from_url", lambda url, **kwargs: FakeRedis(fail=True))
    pub = RedisQueuePublisher("redis://cache:6379/0", "queue_updates")

    with caplog.at_level("WARNING"):
        assert pub.publish("queue_reset", counter_id=1) is False

    assert "queue_reset" in caplog.text


def test_logging_publisher_logs_event(caplog):
    with caplog.at_level("INFO", logger="app.core.publisher"):
        assert LoggingQueuePublisher().publish("queue_claimed", counter_id=1, queue_number=1) is True

    assert '"event": "queue_claimed"' in caplog.text


def test_build_publisher_follows_settings(monkeypatch):
    monkeypatch.setattr(publisher_module.settings, "redis_url", "")
    assert isinstance(publisher_module.build_publisher(), LoggingQueuePublisher)

    monkeypatch.setattr(publisher_module.settings, "redis_url", "redis://cache:6379/0")
    pub = publisher_module.build_publisher()
    assert isinstance(pub, RedisQueuePublisher)
    assert pub.channel == publisher_module.settings.queue_channel


def test_close_publisher_closes_broker_connection(monkeypatch):
    fake = FakeRedis()
    monkeypatch.setattr(publisher_module.redis, "from_url", lambda url, **kwargs: fake)
    pub = RedisQueuePublisher("redis://cache:6379/0", "queue_updates")
    pub.publish("queue_claimed", counter_id=1, queue_number=1)
    monkeypatch.setattr(publisher_module, "_publisher", pub)

    publisher_module.close_publisher()

    assert fake.closed
    assert publisher_module._publisher is None


def test_app_shutdown_closes_publisher(monkeypatch):
    closed = []
    monkeypatch.setattr(publisher_module, "_publisher", None)
    monkeypatch.setattr("app.main.close_publisher", lambda: closed.append(True))

    with TestClient(create_app()):
        assert closed == []

    assert closed == [True]
