"""
Queue ticketing business logic: issue numbers per counter, call the next
ticket, skip, release and reset.

Every operation returns the response envelope {status, message, data} and
raises AppError subclasses on failure. Mutating operations commit once and
publish their event after the commit.
"""
import logging
import re
from typing import Any, Dict, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, contains_eager, joinedload

from app.core.config import settings
from app.core.errors import BadRequestError, ConflictError, NotFoundError
from app.core.publisher import QueuePublisher
from app.core.queue_status import LISTED_STATUSES, PENDING_STATUSES, QueueStatus
from app.core.serialization_helpers import envelope, serialize_queue
from app.models.counter import Counter
from app.models.queue import Queue


logger = logging.getLogger(__name__)

QUEUE_NUMBER_RE = re.compile(r"[+-]?[0-9]+")


def next_queue_number(current_queue: int, max_queue: int) -> int:
    """Number issued after ``current_queue``; wraps to 1 past ``max_queue``."""
    next_number = current_queue + 1
    if next_number > max_queue:
        next_number = 1
    return next_number


def _require_positive_int(value: Any, field: str, message: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise BadRequestError(message, field=field)
    return value


def _get_usable_counter(db: Session, counter_id: Any) -> Counter:
    """
    Validate ``counter_id`` and load the counter it names.

    Raises:
        BadRequestError: invalid id or inactive counter
        NotFoundError: no live counter with that id
    """
    _require_positive_int(counter_id, "counter_id", "Invalid counter ID")
    counter = db.query(Counter).filter(
        Counter.id == counter_id,
        Counter.deleted_at.is_(None),
    ).first()
    if not counter:
        raise NotFoundError("Counter not found")
    if not counter.is_active:
        raise BadRequestError("Counter is not active", field="counter_id")
    return counter


def _active_counters(db: Session):
    return db.query(Counter).filter(
        Counter.is_active == True,
        Counter.deleted_at.is_(None),
    )


def _oldest_ticket(db: Session, counter_id: int, status: QueueStatus) -> Optional[Queue]:
    return db.query(Queue).filter(
        Queue.counter_id == counter_id,
        Queue.status == status.value,
    ).order_by(Queue.created_at.asc(), Queue.id.asc()).first()


def claim_queue(db: Session, publisher: QueuePublisher) -> Dict[str, Any]:
    """
    Issue a ticket at the active counter with the lowest ``current_queue``.

    The counter row is locked where the dialect allows it and its
    ``current_queue`` is moved with a compare-and-swap, so two claims can
    never hand out the same number. A lost swap rolls back and retries.

    Raises:
        NotFoundError: no active counter exists
        ConflictError: every retry lost the swap
    """
    for attempt in range(1, settings.claim_max_retries + 1):
        counter = (
            _active_counters(db)
            .order_by(Counter.current_queue.asc(), Counter.id.asc())
            .with_for_update()
            .first()
        )
        if not counter:
            raise NotFoundError("No active counters found")

        counter_id = counter.id
        counter_name = counter.name
        seen = counter.current_queue
        number = next_queue_number(seen, counter.max_queue)

        swapped = db.query(Counter).filter(
            Counter.id == counter_id,
            Counter.current_queue == seen,
        ).update({Counter.current_queue: number}, synchronize_session=False)
        if not swapped:
            db.rollback()
            logger.info("claim lost race on counter %s (attempt %s)", counter_id, attempt)
            continue

        db.add(Queue(number=number, status=QueueStatus.CLAIMED.value, counter_id=counter_id))
        db.commit()
        break
    else:
        raise ConflictError("Could not claim a queue number, please retry")

    logger.info("claimed queue %s at counter %s", number, counter_id)
    publisher.publish(
        "queue_claimed",
        counter_id=counter_id,
        counter_name=counter_name,
        queue_number=number,
    )
    return envelope(
        "Queue claimed successfully",
        {"queueNumber": number, "counterName": counter_name, "counterId": counter_id},
    )


def release_queue(db: Session, publisher: QueuePublisher, queue_number: Any, counter_id: Any) -> Dict[str, Any]:
    """Give up a ticket that is still waiting (CLAIMED)."""
    _require_positive_int(queue_number, "queue_number", "Invalid queue number")
    _get_usable_counter(db, counter_id)

    queue = db.query(Queue).filter(
        Queue.number == queue_number,
        Queue.counter_id == counter_id,
        Queue.status == QueueStatus.CLAIMED.value,
    ).first()
    if not queue:
        raise NotFoundError("Queue not found or already processed")

    queue.status = QueueStatus.RELEASED.value
    db.commit()

    logger.info("released queue %s at counter %s", queue_number, counter_id)
    publisher.publish("queue_released", counter_id=counter_id, queue_number=queue_number)
    return envelope("Queue released successfully")


def get_current_queues(db: Session, include_inactive: bool = False) -> Dict[str, Any]:
    """Snapshot of each counter plus the status of its own latest ticket."""
    query = db.query(Counter).filter(Counter.deleted_at.is_(None))
    if not include_inactive:
        query = query.filter(Counter.is_active == True)
    counters = query.order_by(Counter.name.asc(), Counter.id.asc()).all()

    data = []
    for counter in counters:
        latest = db.query(Queue.status).filter(
            Queue.counter_id == counter.id,
        ).order_by(Queue.created_at.desc(), Queue.id.desc()).first()
        data.append({
            "id": counter.id,
            "name": counter.name,
            "currentQueue": counter.current_queue,
            "maxQueue": counter.max_queue,
            "isActive": counter.is_active,
            "status": latest.status if latest else None,
        })

    logger.debug("current queues: %s", data)
    return envelope("Current queues retrieved successfully", data)


def next_queue(db: Session, publisher: QueuePublisher, counter_id: Any) -> Dict[str, Any]:
    """Call the oldest waiting ticket of a counter."""
    counter = _get_usable_counter(db, counter_id)

    queue = _oldest_ticket(db, counter.id, QueueStatus.CLAIMED)
    if not queue:
        raise NotFoundError("No claimed queues found for this counter")

    number = queue.number
    counter_name = counter.name
    queue.status = QueueStatus.CALLED.value
    db.commit()

    logger.info("called queue %s at counter %s", number, counter_id)
    publisher.publish(
        "queue_called",
        counter_id=counter_id,
        queue_number=number,
        counter_name=counter_name,
    )
    return envelope(
        "Next queue called successfully",
        {"queueNumber": number, "counterName": counter_name, "counterId": counter_id},
    )


def skip_queue(db: Session, publisher: QueuePublisher, counter_id: Any) -> Dict[str, Any]:
    """
    Mark the called ticket as a no-show, then try to call the next one.

    Running out of waiting tickets is not an error here: the skip alone is
    acknowledged with no data.
    """
    counter = _get_usable_counter(db, counter_id)

    queue = _oldest_ticket(db, counter.id, QueueStatus.CALLED)
    if not queue:
        raise NotFoundError("No called queue found for this counter")

    number = queue.number
    queue.status = QueueStatus.SKIPPED.value
    db.commit()

    logger.info("skipped queue %s at counter %s", number, counter_id)
    publisher.publish("queue_skipped", counter_id=counter_id, queue_number=number)

    try:
        result = next_queue(db, publisher, counter_id)
    except NotFoundError as exc:
        logger.info("No more queues to call after skip at counter %s: %s", counter_id, exc.message)
        return envelope("Queue skipped successfully, no more queues to call")

    return envelope("Queue skipped successfully and next queue called", result["data"])


def reset_queues(db: Session, publisher: QueuePublisher, counter_id: Any = None) -> Dict[str, Any]:
    """
    Invalidate waiting and called tickets and zero the counter progress.

    With ``counter_id`` only that counter is reset; without it every active
    counter is. RELEASED and SKIPPED tickets are left as they are.
    """
    pending = [status.value for status in PENDING_STATUSES]

    if counter_id is not None:
        counter = _get_usable_counter(db, counter_id)
        counter_name = counter.name

        reset_count = db.query(Queue).filter(
            Queue.counter_id == counter.id,
            Queue.status.in_(pending),
        ).update({Queue.status: QueueStatus.RESET.value}, synchronize_session=False)
        counter.current_queue = 0
        db.commit()

        logger.info("reset counter %s (%s tickets)", counter_id, reset_count)
        publisher.publish("queue_reset", counter_id=counter_id)
        return envelope(f"Queue for counter {counter_name} reset successfully")

    active_ids = select(Counter.id).where(
        Counter.is_active == True,
        Counter.deleted_at.is_(None),
    )
    reset_count = db.query(Queue).filter(
        Queue.status.in_(pending),
        Queue.counter_id.in_(active_ids),
    ).update({Queue.status: QueueStatus.RESET.value}, synchronize_session=False)
    _active_counters(db).update({Counter.current_queue: 0}, synchronize_session=False)
    db.commit()

    logger.info("reset all active counters (%s tickets)", reset_count)
    publisher.publish("all_queues_reset")
    return envelope("All active queues reset successfully")


def _parse_queue_number(text: str) -> Optional[int]:
    # ASCII digits only; int() would also take "1_0" or Arabic-Indic digits
    if not QUEUE_NUMBER_RE.fullmatch(text):
        return None
    return int(text)


def search_queue(db: Session, query: Optional[str]) -> Dict[str, Any]:
    """
    Find tickets by exact number, or by counter name when ``query`` is not
    an integer. No match is answered with ``status: False`` and no data.
    """
    text = (query or "").strip()
    if not text:
        raise BadRequestError("Query parameter 'q' is required", field="q")

    number = _parse_queue_number(text)
    if number is not None:
        queues = (
            db.query(Queue)
            .options(joinedload(Queue.counter))
            .filter(Queue.number == number)
            .order_by(Queue.created_at.desc(), Queue.id.desc())
            .all()
        )
    else:
        queues = (
            db.query(Queue)
            .join(Queue.counter)
            .options(contains_eager(Queue.counter))
            .filter(
                Counter.name.icontains(text, autoescape=True),
                Counter.deleted_at.is_(None),
            )
            .order_by(Queue.created_at.desc(), Queue.id.desc())
            .all()
        )

    if not queues:
        return envelope(f"Queue with number or counter '{text}' not found", status=False)

    return envelope("Queue found successfully", [serialize_queue(q) for q in queues])


def get_all_queues(db: Session) -> Dict[str, Any]:
    queues = (
        db.query(Queue)
        .options(joinedload(Queue.counter))
        .filter(Queue.status.in_([status.value for status in LISTED_STATUSES]))
        .order_by(Queue.created_at.desc(), Queue.id.desc())
        .all()
    )
    return envelope("All queues retrieved successfully", [serialize_queue(q) for q in queues])


def get_metrics(db: Session) -> Dict[str, Any]:
    rows = db.query(Queue.status, func.count(Queue.id)).filter(
        Queue.status.in_([
            QueueStatus.CLAIMED.value,
            QueueStatus.CALLED.value,
            QueueStatus.RELEASED.value,
            QueueStatus.SKIPPED.value,
        ])
    ).group_by(Queue.status).all()
    counts = {status: total for status, total in rows}

    return envelope("Metrics retrieved successfully", {
        "waiting": counts.get(QueueStatus.CLAIMED.value, 0),
        "called": counts.get(QueueStatus.CALLED.value, 0),
        "released": counts.get(QueueStatus.RELEASED.value, 0),
        "skipped": counts.get(QueueStatus.SKIPPED.value, 0),
    })
