from enum import Enum


class QueueStatus(str, Enum):
    CLAIMED = "CLAIMED"
    CALLED = "CALLED"
    RELEASED = "RELEASED"
    SKIPPED = "SKIPPED"
    # Listed by get_all_queues; no operation moves a ticket here
    SERVED = "SERVED"
    RESET = "RESET"


PENDING_STATUSES = {QueueStatus.CLAIMED, QueueStatus.CALLED}
LISTED_STATUSES = {QueueStatus.CLAIMED, QueueStatus.CALLED, QueueStatus.SERVED, QueueStatus.SKIPPED}
