from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, StrictInt
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.publisher import QueuePublisher, get_publisher
from app.services import queue_service

router = APIRouter()


class CounterRequest(BaseModel):
    # Optional so a missing value reaches the service and is reported by field;
    # strict so true or "3" are rejected instead of coerced
    counter_id: Optional[StrictInt] = None


class ReleaseRequest(CounterRequest):
    queue_number: Optional[StrictInt] = None


class QueueEnvelope(BaseModel):
    status: bool
    message: str
    data: Any = None


@router.get("", response_model=QueueEnvelope)
def get_all_queues(db: Session = Depends(get_db)) -> Dict[str, Any]:
    """Tickets that are waiting, called, served or skipped, newest first."""
    return queue_service.get_all_queues(db)


@router.post("/claim", response_model=QueueEnvelope, status_code=status.HTTP_201_CREATED)
def claim_queue(
    db: Session = Depends(get_db),
    publisher: QueuePublisher = Depends(get_publisher),
):
    return queue_service.claim_queue(db, publisher)


@router.post("/release", response_model=QueueEnvelope)
def release_queue(
    payload: Optional[ReleaseRequest] = None,
    db: Session = Depends(get_db),
    publisher: QueuePublisher = Depends(get_publisher),
):
    payload = payload or ReleaseRequest()
    return queue_service.release_queue(db, publisher, payload.queue_number, payload.counter_id)


@router.get("/current", response_model=QueueEnvelope)
def get_current_queues(
    include_inactive: bool = Query(False, description="Include inactive counters"),
    db: Session = Depends(get_db),
):
    return queue_service.get_current_queues(db, include_inactive=include_inactive)


@router.post("/next", response_model=QueueEnvelope)
def next_queue(
    payload: Optional[CounterRequest] = None,
    db: Session = Depends(get_db),
    publisher: QueuePublisher = Depends(get_publisher),
):
    counter_id = payload.counter_id if payload else None
    return queue_service.next_queue(db, publisher, counter_id)


@router.post("/skip", response_model=QueueEnvelope)
def skip_queue(
    payload: Optional[CounterRequest] = None,
    db: Session = Depends(get_db),
    publisher: QueuePublisher = Depends(get_publisher),
):
    counter_id = payload.counter_id if payload else None
    return queue_service.skip_queue(db, publisher, counter_id)


@router.post("/reset", response_model=QueueEnvelope)
def reset_queues(
    payload: Optional[CounterRequest] = None,
    db: Session = Depends(get_db),
    publisher: QueuePublisher = Depends(get_publisher),
):
    """Reset one counter when counter_id is sent, every active counter otherwise."""
    counter_id = payload.counter_id if payload else None
    return queue_service.reset_queues(db, publisher, counter_id)


@router.get("/search", response_model=QueueEnvelope)
def search_queue(
    q: Optional[str] = Query(None, description="Queue number or counter name"),
    db: Session = Depends(get_db),
):
    """
    Search by exact ticket number, or by counter name when q is not a number.
    A search without matches answers 200 with status false.
    """
    return queue_service.search_queue(db, q)


@router.get("/metrics", response_model=QueueEnvelope)
def get_metrics(db: Session = Depends(get_db)):
    return queue_service.get_metrics(db)
