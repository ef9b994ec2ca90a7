"""Rendercanvas/GLFW-backed window layer implementation."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any

from scenekit.api.window import (
    KeyboardInputEvent,
    WindowCloseEvent,
    WindowEvent,
    WindowResizeEvent,
)
from scenekit.runtime.errors import RECOVERABLE_RUNTIME_ERRORS, WindowInitError, log_recoverable

_LOG = logging.getLogger("scenekit.window")


@dataclass(frozen=True, slots=True)
class GlfwWakeupProxy:
    """Posts an empty GLFW event; safe to call from any thread."""

    glfw: Any

    def wakeup_event_loop(self) -> None:
        self.glfw.post_empty_event()


@dataclass(slots=True)
class GlfwWindow:
    """Window adapter over a rendercanvas GLFW canvas driven by a manual loop."""

    canvas: Any
    glfw: Any
    events_trace_enabled: bool = False
    _events: deque[WindowEvent] = field(default_factory=deque)

    def __post_init__(self) -> None:
        self._bind_window_events()

    def inner_size(self) -> tuple[int, int]:
        width, height = self.canvas.get_logical_size()
        return (max(0, int(width)), max(0, int(height)))

    def hidpi_factor(self) -> float:
        ratio = self.canvas.get_pixel_ratio()
        return float(ratio) if isinstance(ratio, (int, float)) and ratio > 0 else 1.0

    def make_current(self) -> None:
        # wgpu surfaces are bound per configure call; there is no current context.
        return

    def swap_buffers(self) -> None:
        context = self.canvas.get_context("wgpu")
        for name in ("present", "_rc_present"):
            present = getattr(context, name, None)
            if callable(present):
                present()
                return

    def wait_events(self) -> None:
        self.glfw.wait_events()
        process_events = getattr(self.canvas, "_process_events", None)
        if callable(process_events):
            process_events()

    def poll_events(self) -> tuple[WindowEvent, ...]:
        drained = tuple(self._events)
        self._events.clear()
        return drained

    def create_wakeup_proxy(self) -> GlfwWakeupProxy:
        return GlfwWakeupProxy(glfw=self.glfw)

    def close(self) -> None:
        closer = getattr(self.canvas, "close", None)
        if callable(closer):
            closer()

    def _bind_window_events(self) -> None:
        add_handler = self.canvas.add_event_handler
        add_handler(self._on_resize, "resize")
        add_handler(self._on_close, "close")
        add_handler(self._on_key, "key_down", "key_up")
        if self.events_trace_enabled:
            add_handler(self._on_any_event, "*")

    def _on_resize(self, event: object) -> None:
        width = _event_value(event, "width")
        height = _event_value(event, "height")
        if not isinstance(width, (int, float)) or not isinstance(height, (int, float)):
            return
        self._events.append(WindowResizeEvent(width=float(width), height=float(height)))

    def _on_close(self, event: object) -> None:
        _ = event
        self._events.append(WindowCloseEvent())

    def _on_key(self, event: object) -> None:
        key = _event_value(event, "key")
        if not isinstance(key, str):
            return
        event_type = str(_event_value(event, "event_type", ""))
        scan_code = _event_value(event, "scan_code")
        self._events.append(
            KeyboardInputEvent(
                state="pressed" if event_type == "key_down" else "released",
                key=key,
                scan_code=int(scan_code) if isinstance(scan_code, int) else None,
            )
        )

    def _on_any_event(self, event: object) -> None:
        event_type = str(_event_value(event, "event_type", ""))
        if event_type in {"before_draw", "animate"}:
            return
        _LOG.debug("window_event type=%s payload=%r", event_type, event)


def create_glfw_window(
    *,
    title: str,
    width: int,
    height: int,
    events_trace_enabled: bool = False,
    vsync: bool = True,
) -> GlfwWindow:
    """Create a GLFW canvas window; any failure is a fatal startup error."""
    try:
        import rendercanvas.glfw as rc_glfw
    except ImportError as exc:
        raise WindowInitError(
            "rendercanvas glfw backend unavailable",
            details={"exception_message": str(exc)},
        ) from exc
    size = (int(width), int(height))
    try:
        try:
            canvas = rc_glfw.RenderCanvas(size=size, title=title, update_mode="ondemand", vsync=bool(vsync))
        except TypeError:
            # Older rendercanvas releases take neither update_mode nor vsync.
            canvas = rc_glfw.RenderCanvas(size=size, title=title)
    except Exception as exc:
        raise WindowInitError(
            "window creation failed",
            details={
                "width": size[0],
                "height": size[1],
                "exception_type": exc.__class__.__name__,
                "exception_message": str(exc),
            },
        ) from exc
    try:
        set_title = getattr(canvas, "set_title", None)
        if callable(set_title):
            set_title(title)
    except RECOVERABLE_RUNTIME_ERRORS:
        log_recoverable(_LOG, "window_set_title_failed")
    return GlfwWindow(canvas=canvas, glfw=rc_glfw.glfw, events_trace_enabled=events_trace_enabled)


def _event_value(event: object, key: str, default: object | None = None) -> object | None:
    if isinstance(event, dict):
        return event.get(key, default)
    return getattr(event, key, default)


__all__ = ["GlfwWakeupProxy", "GlfwWindow", "create_glfw_window"]
