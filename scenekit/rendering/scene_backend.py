"""Scene-consuming render backend with a frame-building worker thread."""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass, field
from typing import Protocol

from scenekit.api.geometry import ColorF, LayoutSize
from scenekit.api.render import RenderNotifierPort
from scenekit.api.scene import Epoch, FontKey, PipelineId, Scene
from scenekit.rendering.frame_builder import BuiltFrame, build_frame
from scenekit.runtime.errors import RECOVERABLE_RUNTIME_ERRORS, SceneBuildError, log_recoverable
from scenekit.runtime.snapshot_exchange import DoubleBufferedSnapshotExchange

_LOG = logging.getLogger("scenekit.rendering.backend")


class FramePresenter(Protocol):
    """GPU side of the backend; only ever called from the loop thread."""

    def register_font(self, key: FontKey, data: bytes) -> None: ...

    def draw(self, frame: BuiltFrame | None, device_size: tuple[int, int]) -> None: ...

    def close(self) -> None: ...


@dataclass(frozen=True, slots=True)
class _SceneMessage:
    background: ColorF | None
    epoch: Epoch
    viewport: LayoutSize
    scene: Scene


@dataclass(frozen=True, slots=True)
class _GenerateMessage:
    pass


@dataclass(frozen=True, slots=True)
class _StopMessage:
    pass


_BackendMessage = _SceneMessage | _GenerateMessage | _StopMessage


@dataclass(slots=True)
class SceneRenderBackend:
    """Builds frames off the loop thread and hands them over on ``update``.

    The first scene ever submitted produces a frame on arrival. Every later
    scene is held until ``generate_frame`` asks for it. After each built frame
    the notifier is called from the worker thread.
    """

    presenter: FramePresenter
    notifier: RenderNotifierPort
    font_namespace: int = 0
    _messages: queue.SimpleQueue[_BackendMessage] = field(init=False, default_factory=queue.SimpleQueue)
    _exchange: DoubleBufferedSnapshotExchange[BuiltFrame] = field(
        init=False, default_factory=DoubleBufferedSnapshotExchange
    )
    _worker: threading.Thread | None = field(init=False, default=None)
    _current_frame: BuiltFrame | None = field(init=False, default=None)
    _root_pipeline: PipelineId | None = field(init=False, default=None)
    _next_font_key: int = field(init=False, default=0)
    _frames_built: int = field(init=False, default=0)
    _first_scene_seen: bool = field(init=False, default=False)
    _last_viewport: LayoutSize | None = field(init=False, default=None)

    def __post_init__(self) -> None:
        self._worker = threading.Thread(
            target=self._run_worker,
            name="scenekit.render-backend",
            daemon=True,
        )
        self._worker.start()

    @property
    def current_frame(self) -> BuiltFrame | None:
        return self._current_frame

    @property
    def frames_built(self) -> int:
        return self._frames_built

    def register_raw_font(self, data: bytes) -> FontKey:
        key = FontKey(self.font_namespace, self._next_font_key)
        self.presenter.register_font(key, bytes(data))
        self._next_font_key += 1
        _LOG.debug("font_registered key=%s bytes=%d", key, len(data))
        return key

    def set_root_pipeline(self, pipeline_id: PipelineId) -> None:
        self._root_pipeline = pipeline_id

    def submit_scene(
        self,
        background: ColorF | None,
        epoch: Epoch,
        viewport: LayoutSize,
        scene: Scene,
    ) -> None:
        if not scene.covers_viewport():
            raise SceneBuildError(
                f"scene root bounds {scene.root.bounds} do not cover viewport {scene.viewport}"
            )
        self._messages.put(
            _SceneMessage(background=background, epoch=epoch, viewport=viewport, scene=scene)
        )

    def generate_frame(self) -> None:
        self._messages.put(_GenerateMessage())

    def update(self) -> None:
        frame = self._exchange.consume_latest()
        if frame is not None:
            self._current_frame = frame

    def render(self, device_size: tuple[int, int]) -> None:
        self.presenter.draw(self._current_frame, device_size)

    def shutdown(self) -> None:
        worker = self._worker
        if worker is not None and worker.is_alive():
            self._messages.put(_StopMessage())
            worker.join(timeout=2.0)
        self._worker = None
        self.presenter.close()

    def _run_worker(self) -> None:
        pending: _SceneMessage | None = None
        while True:
            message = self._messages.get()
            if isinstance(message, _StopMessage):
                return
            if isinstance(message, _SceneMessage):
                pending = message
                if not self._first_scene_seen:
                    self._first_scene_seen = True
                    self._build_and_publish(message)
                continue
            if pending is None:
                _LOG.debug("generate_frame_without_scene")
                continue
            self._build_and_publish(pending)

    def _build_and_publish(self, message: _SceneMessage) -> None:
        scene = message.scene
        root = self._root_pipeline
        if root is not None and scene.pipeline_id != root:
            _LOG.debug("scene_ignored pipeline=%s root=%s", scene.pipeline_id, root)
            return
        try:
            frame = build_frame(scene, background=message.background, epoch=message.epoch)
        except RECOVERABLE_RUNTIME_ERRORS:
            log_recoverable(_LOG, "frame_build_failed", level=logging.ERROR)
            return
        self._exchange.publish(frame)
        self._frames_built += 1
        _LOG.debug(
            "frame_built index=%d rects=%d glyphs=%d viewport=%sx%s",
            self._frames_built,
            len(frame.rects),
            len(frame.glyphs),
            message.viewport.width,
            message.viewport.height,
        )
        if self._last_viewport is not None and self._last_viewport != message.viewport:
            self.notifier.on_pipeline_size_changed(scene.pipeline_id, message.viewport)
        self._last_viewport = message.viewport
        self.notifier.on_frame_ready()


__all__ = ["FramePresenter", "SceneRenderBackend"]
