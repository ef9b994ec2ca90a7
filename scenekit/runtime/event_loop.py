"""Blocking window event loop driving the frame coordinator."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from scenekit.api.window import KeyboardInputEvent, WindowCloseEvent, WindowPort, WindowResizeEvent
from scenekit.runtime.config import DEFAULT_QUIT_SCAN_CODE
from scenekit.runtime.frame_lifecycle import FrameCoordinator
from scenekit.runtime.wakeup import WakeupChannel

_LOG = logging.getLogger("scenekit.runtime.loop")

EXIT_CLOSE = "close"
EXIT_QUIT_KEY = "quit_key"
EXIT_ITERATION_LIMIT = "iteration_limit"


@dataclass(slots=True)
class EventLoop:
    window: WindowPort
    coordinator: FrameCoordinator
    channel: WakeupChannel
    quit_keys: tuple[str, ...] = ("Escape",)
    quit_scan_codes: tuple[int, ...] = (DEFAULT_QUIT_SCAN_CODE,)
    _iterations: int = field(init=False, default=0)

    @property
    def iterations(self) -> int:
        return self._iterations

    def run(self, *, max_iterations: int | None = None) -> str:
        """Wait, dispatch, tick until close or quit key; return the exit reason."""
        while max_iterations is None or self._iterations < max_iterations:
            self.window.wait_events()
            self._iterations += 1
            if self.channel.consume():
                _LOG.debug("loop_woken_by_backend iteration=%d", self._iterations)
            reason = self._dispatch(self.window.poll_events())
            if reason is not None:
                _LOG.info("event_loop_exit reason=%s iterations=%d", reason, self._iterations)
                return reason
            self.coordinator.tick()
        return EXIT_ITERATION_LIMIT

    def _dispatch(self, events: tuple[object, ...]) -> str | None:
        for event in events:
            if isinstance(event, WindowCloseEvent):
                return EXIT_CLOSE
            if isinstance(event, KeyboardInputEvent):
                if self._is_quit_key(event):
                    return EXIT_QUIT_KEY
                continue
            if isinstance(event, WindowResizeEvent):
                _LOG.debug("window_resized width=%s height=%s", event.width, event.height)
                self.coordinator.on_resize(event.width, event.height)
        return None

    def _is_quit_key(self, event: KeyboardInputEvent) -> bool:
        if not event.pressed:
            return False
        if event.scan_code is not None and event.scan_code in self.quit_scan_codes:
            return True
        return event.key in self.quit_keys


__all__ = ["EXIT_CLOSE", "EXIT_ITERATION_LIMIT", "EXIT_QUIT_KEY", "EventLoop"]
