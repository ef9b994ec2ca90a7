"""Cross-thread wakeup channel between backend callbacks and the event loop."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from threading import Condition

from scenekit.runtime.errors import RECOVERABLE_RUNTIME_ERRORS, log_recoverable

_LOG = logging.getLogger("scenekit.runtime.wakeup")


@dataclass(slots=True)
class WakeupChannel:
    """Coalescing wake flag guarded by a condition variable.

    ``notify`` never blocks on the loop thread: it flips a pending flag, wakes
    any ``wait`` callers and pokes the optional ``wake_hook`` (typically the
    window's empty-event poster) so an OS-level event wait returns too. Any
    number of notifications before the next ``consume`` collapse into one wake.
    """

    wake_hook: Callable[[], None] | None = None
    _condition: Condition = field(default_factory=Condition)
    _pending: bool = False
    _notify_count: int = 0
    _wake_count: int = 0

    def notify(self) -> None:
        with self._condition:
            self._notify_count += 1
            if self._pending:
                return
            self._pending = True
            self._condition.notify_all()
            hook = self.wake_hook
        if hook is None:
            return
        try:
            hook()
        except RECOVERABLE_RUNTIME_ERRORS:
            log_recoverable(_LOG, "wakeup_hook_failed", level=logging.WARNING)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until a wake is pending; return False on timeout."""
        with self._condition:
            return bool(self._condition.wait_for(lambda: self._pending, timeout=timeout))

    def consume(self) -> bool:
        """Clear the pending wake; True when one was pending."""
        with self._condition:
            was_pending = self._pending
            self._pending = False
            if was_pending:
                self._wake_count += 1
            return was_pending

    @property
    def pending(self) -> bool:
        with self._condition:
            return self._pending

    @property
    def notify_count(self) -> int:
        with self._condition:
            return self._notify_count

    @property
    def wake_count(self) -> int:
        with self._condition:
            return self._wake_count


__all__ = ["WakeupChannel"]
