"""
Clock Offset - Offset from the local clock to the wall clock reference

The host clock cannot be set accurately enough, so scan timestamps are
corrected by the latest offset received from the wall clock topic instead.
"""
import threading


class ClockOffsetTracker:
    """Holds the current wall clock offset in nanoseconds.

    Written by the wall clock listener, read by the scan path; both may run
    on different threads at the same time.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._offset_ns = 0
        self._updated = False

    def set(self, offset_ns: int) -> None:
        """Replace the stored offset."""
        with self._lock:
            self._offset_ns = int(offset_ns)
            self._updated = True

    def get(self) -> int:
        """Latest offset, 0 if no correction was received yet."""
        with self._lock:
            return self._offset_ns

    @property
    def updated(self) -> bool:
        """Whether at least one correction has been stored"""
        with self._lock:
            return self._updated
