"""Latest-value handoff between the backend worker and the loop thread."""

from __future__ import annotations

from dataclasses import dataclass, field
from threading import Lock
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(slots=True)
class DoubleBufferedSnapshotExchange(Generic[T]):
    """Atomic latest-snapshot exchange; unconsumed snapshots are replaced."""

    _lock: Lock = field(default_factory=Lock)
    _write_slot: T | None = None
    _published: int = 0
    _dropped: int = 0

    def publish(self, snapshot: T | None) -> int:
        """Publish the latest snapshot and return its sequence number. None clears."""
        with self._lock:
            if snapshot is None:
                self._write_slot = None
                return self._published
            if self._write_slot is not None:
                self._dropped += 1
            self._write_slot = snapshot
            self._published += 1
            return self._published

    def consume_latest(self) -> T | None:
        """Consume and clear the latest published snapshot atomically."""
        with self._lock:
            payload = self._write_slot
            self._write_slot = None
            return payload

    @property
    def published(self) -> int:
        with self._lock:
            return self._published

    @property
    def dropped(self) -> int:
        """Snapshots replaced before the loop thread consumed them."""
        with self._lock:
            return self._dropped
