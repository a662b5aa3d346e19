import logging

from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.counter import Counter


logger = logging.getLogger(__name__)

DEMO_COUNTERS = ["Counter A", "Counter B", "Counter C"]


def seed_demo(db: Session):
    if db.query(Counter).first():
        return
    for name in DEMO_COUNTERS:
        db.add(Counter(name=name, current_queue=0, max_queue=settings.default_max_queue, is_active=True))
    db.commit()
    logger.info("Seeded demo counters: %s", ", ".join(DEMO_COUNTERS))
