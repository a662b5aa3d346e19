from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from datetime import datetime

from app.core.queue_status import QueueStatus
from app.models.base import Base


class Queue(Base):
    __tablename__ = "queues"
    __table_args__ = (
        Index("ix_queues_counter_status_created", "counter_id", "status", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    # Not unique: numbers repeat per counter and after every wrap/reset
    number = Column(Integer, nullable=False, index=True)
    status = Column(String(20), nullable=False, default=QueueStatus.CLAIMED.value, index=True)
    counter_id = Column(Integer, ForeignKey("counters.id"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    counter = relationship("Counter", back_populates="queues")
