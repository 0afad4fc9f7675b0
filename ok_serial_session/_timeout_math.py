"""Conversions between relative timeouts and monotonic-clock deadlines"""

import threading
import time

TIMEOUT_MAX = threading.TIMEOUT_MAX


def to_deadline(timeout: float | int | None) -> float:
    """Deadline for 'timeout' seconds from now; None waits forever"""

    if timeout is None:
        return TIMEOUT_MAX
    if timeout <= 0:
        return 0.0
    return min(TIMEOUT_MAX, time.monotonic() + timeout)


def from_deadline(deadline: float | int | None) -> float:
    """Seconds left until 'deadline' (never negative)"""

    if deadline is None or deadline >= TIMEOUT_MAX:
        return TIMEOUT_MAX
    return max(0.0, min(TIMEOUT_MAX, deadline - time.monotonic()))
