"""Frame lifecycle coordination between scene building, backend and window."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol

from scenekit.api.geometry import ColorF, LayoutSize
from scenekit.api.render import RenderBackendPort
from scenekit.api.scene import Epoch, FontKey, PipelineId, Scene
from scenekit.api.window import WindowPort
from scenekit.runtime.config import DEFAULT_BACKGROUND_COLOR
from scenekit.runtime.wakeup import WakeupChannel

_LOG = logging.getLogger("scenekit.runtime.frames")

EPOCH_POLICIES = ("static", "increment")


class SceneFactory(Protocol):
    """Builds the scene for one pipeline at a viewport size."""

    def __call__(
        self,
        pipeline_id: PipelineId,
        font_key: FontKey,
        viewport_width: float,
        viewport_height: float,
    ) -> Scene: ...


@dataclass(slots=True)
class FrameNotifier:
    """Backend notifier that only ever signals the wakeup channel."""

    channel: WakeupChannel

    def on_frame_ready(self) -> None:
        self.channel.notify()

    def on_scroll_frame_ready(self, composite_needed: bool) -> None:
        _ = composite_needed
        self.channel.notify()

    def on_pipeline_size_changed(self, pipeline_id: PipelineId, size: LayoutSize | None) -> None:
        # Viewport changes arrive through the window's resize events.
        _ = (pipeline_id, size)


@dataclass(slots=True)
class FrameCoordinator:
    """Owns pipeline identity, epoch, font key and background for one window.

    The first submission is not followed by ``generate_frame`` because the
    backend builds its first frame on arrival; every later submission is.
    """

    backend: RenderBackendPort
    window: WindowPort
    scene_factory: SceneFactory
    pipeline_id: PipelineId = field(default_factory=lambda: PipelineId(0, 0))
    background_color: ColorF = field(default_factory=lambda: ColorF(*DEFAULT_BACKGROUND_COLOR))
    epoch_policy: str = "static"
    _epoch: Epoch = field(init=False, default_factory=Epoch)
    _font_key: FontKey | None = field(init=False, default=None)
    _submissions: int = field(init=False, default=0)
    _ticks: int = field(init=False, default=0)

    def __post_init__(self) -> None:
        if self.epoch_policy not in EPOCH_POLICIES:
            raise ValueError(f"unknown epoch policy: {self.epoch_policy!r}")

    @property
    def epoch(self) -> Epoch:
        return self._epoch

    @property
    def font_key(self) -> FontKey | None:
        return self._font_key

    @property
    def submissions(self) -> int:
        return self._submissions

    def start(self, font_bytes: bytes) -> Scene:
        """Register the font, select the root pipeline and submit the initial scene."""
        if self._font_key is not None:
            raise RuntimeError("frame coordinator already started")
        self._font_key = self.backend.register_raw_font(font_bytes)
        self.backend.set_root_pipeline(self.pipeline_id)
        width, height = self.window.inner_size()
        scene = self._build(width, height)
        self.submit(scene, LayoutSize(float(width), float(height)))
        return scene

    def submit(self, scene: Scene, viewport: LayoutSize) -> None:
        if self._submissions > 0 and self.epoch_policy == "increment":
            self._epoch = self._epoch.next()
        self.backend.submit_scene(self.background_color, self._epoch, viewport, scene)
        self._submissions += 1
        if self._submissions > 1:
            self.backend.generate_frame()
        _LOG.debug(
            "scene_submitted count=%d epoch=%d viewport=%sx%s",
            self._submissions,
            self._epoch.value,
            viewport.width,
            viewport.height,
        )

    def on_resize(self, width: float, height: float) -> Scene:
        scene = self._build(width, height)
        self.submit(scene, LayoutSize(float(width), float(height)))
        return scene

    def tick(self) -> None:
        """Update, render at device-pixel size and present; runs every loop iteration."""
        width, height = self.window.inner_size()
        device = LayoutSize(float(width), float(height)).scaled(self.window.hidpi_factor())
        self.backend.update()
        self.backend.render((int(device.width), int(device.height)))
        self.window.swap_buffers()
        self._ticks += 1

    def _build(self, width: float, height: float) -> Scene:
        if self._font_key is None:
            raise RuntimeError("frame coordinator not started; font key missing")
        return self.scene_factory(self.pipeline_id, self._font_key, float(width), float(height))


__all__ = ["EPOCH_POLICIES", "FrameCoordinator", "FrameNotifier", "SceneFactory"]
