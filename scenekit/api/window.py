"""Window and event-loop contracts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True, slots=True)
class WindowResizeEvent:
    """Resize in logical pixels."""

    width: float
    height: float


@dataclass(frozen=True, slots=True)
class WindowCloseEvent:
    """Normalized close-request event."""

    requested: bool = True


@dataclass(frozen=True, slots=True)
class KeyboardInputEvent:
    """Key press/release; scan_code is None when the backend does not expose it."""

    state: str  # pressed|released
    key: str
    scan_code: int | None = None

    @property
    def pressed(self) -> bool:
        return self.state == "pressed"


WindowEvent = WindowResizeEvent | WindowCloseEvent | KeyboardInputEvent


class WakeupProxy(Protocol):
    """Thread-safe handle able to unblock the window's event wait."""

    def wakeup_event_loop(self) -> None:
        """Unblock a pending wait_events call from any thread."""


class WindowPort(Protocol):
    """Loop-thread window surface used by the frame coordinator and event loop."""

    def inner_size(self) -> tuple[int, int]:
        """Return drawable size in logical pixels."""

    def hidpi_factor(self) -> float:
        """Return physical pixels per logical pixel."""

    def make_current(self) -> None:
        """Bind the window's drawing context to the calling thread."""

    def swap_buffers(self) -> None:
        """Present the frame rendered since the last swap."""

    def wait_events(self) -> None:
        """Block until at least one OS event or wakeup arrives."""

    def poll_events(self) -> tuple[WindowEvent, ...]:
        """Drain normalized events received since the last poll."""

    def create_wakeup_proxy(self) -> WakeupProxy:
        """Return a proxy that can wake wait_events from other threads."""

    def close(self) -> None:
        """Close window and release backend resources."""


__all__ = [
    "KeyboardInputEvent",
    "WakeupProxy",
    "WindowCloseEvent",
    "WindowEvent",
    "WindowPort",
    "WindowResizeEvent",
]
