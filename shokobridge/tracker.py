"""
In-flight operation tracking
"""

import logging
import threading
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, List

logger = logging.getLogger(__name__)


@dataclass
class TrackedOperation:
    """An operation currently in progress"""

    id: str
    message: str
    started_at: float

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.started_at


class UsageTracker:
    """Keeps count of operations that are running right now"""

    def __init__(self, stall_seconds: float = 60.0):
        self.stall_seconds = stall_seconds
        self._lock = threading.Lock()
        self._operations: dict[str, TrackedOperation] = {}

    def add(self, message: str) -> str:
        """Register an operation and return its tracking id"""
        operation = TrackedOperation(
            id=str(uuid.uuid4()), message=message, started_at=time.monotonic()
        )
        with self._lock:
            self._operations[operation.id] = operation
        logger.debug(f"Added tracker {operation.id}: {message}")
        return operation.id

    def remove(self, tracker_id: str) -> bool:
        """Unregister an operation; returns False if it was not tracked"""
        with self._lock:
            operation = self._operations.pop(tracker_id, None)
        if operation is None:
            logger.warning(f"Tried to remove unknown tracker {tracker_id}")
            return False
        logger.debug(
            f"Removed tracker {tracker_id} after {operation.elapsed:.3f}s: "
            f"{operation.message}"
        )
        return True

    @contextmanager
    def track(self, message: str) -> Iterator[str]:
        """Track an operation for the duration of a with block"""
        tracker_id = self.add(message)
        try:
            yield tracker_id
        finally:
            self.remove(tracker_id)

    @property
    def in_flight(self) -> List[TrackedOperation]:
        with self._lock:
            return list(self._operations.values())

    def stalled(self) -> List[TrackedOperation]:
        """Operations running for longer than the stall threshold"""
        stalled = [op for op in self.in_flight if op.elapsed > self.stall_seconds]
        for op in stalled:
            logger.warning(
                f"Operation {op.id} has been running for {op.elapsed:.0f}s: {op.message}"
            )
        return stalled
