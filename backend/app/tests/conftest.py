import os

# Must be set before the app modules read their settings
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REDIS_URL"] = ""

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import get_db
from app.core.publisher import QueuePublisher, get_publisher
from app.core.queue_status import QueueStatus
from app.main import app
from app.models import Base, Counter, Queue


class RecordingPublisher(QueuePublisher):
    def __init__(self):
        self.messages = []

    def _send(self, message):
        self.messages.append(message)

    @property
    def events(self):
        return [m["event"] for m in self.messages]


class FailingPublisher(QueuePublisher):
    def _send(self, message):
        raise ConnectionError("broker down")


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def client(session_factory, publisher):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_publisher] = lambda: publisher
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_counter(db):
    def _make(name="Counter A", current_queue=0, max_queue=100, is_active=True, deleted=False):
        counter = Counter(
            name=name,
            current_queue=current_queue,
            max_queue=max_queue,
            is_active=is_active,
            deleted_at=datetime.utcnow() if deleted else None,
        )
        db.add(counter)
        db.commit()
        db.refresh(counter)
        return counter
    return _make


@pytest.fixture
def make_queue(db):
    base = datetime(2026, 1, 1, 9, 0, 0)

    def _make(counter, number, status=QueueStatus.CLAIMED, minute=0):
        created = base + timedelta(minutes=minute)
        queue = Queue(
            number=number,
            status=status.value,
            counter_id=counter.id,
            created_at=created,
            updated_at=created,
        )
        db.add(queue)
        db.commit()
        db.refresh(queue)
        return queue
    return _make


@pytest.fixture
def failing_publisher():
    return FailingPublisher()
