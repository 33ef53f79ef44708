"""
Subscription - Cancellable handle for a registered listener
"""
import threading
from typing import Callable, Optional


class Subscription:
    """Handle returned when a listener is registered.

    cancel() may be called from any thread and more than once; the optional
    on_cancel hook runs exactly once.
    """

    def __init__(self, name: str = "", on_cancel: Optional[Callable[[], None]] = None):
        self.name = name
        self._on_cancel = on_cancel
        self._active = True
        self._lock = threading.Lock()

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        with self._lock:
            if not self._active:
                return
            self._active = False
            on_cancel, self._on_cancel = self._on_cancel, None
        if on_cancel is not None:
            on_cancel()

    def __repr__(self) -> str:
        state = "active" if self._active else "cancelled"
        return f"Subscription({self.name!r}, {state})"
