from .base import Base
from .counter import Counter
from .queue import Queue

__all__ = ["Base", "Counter", "Queue"]
