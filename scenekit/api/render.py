"""Rendering backend contracts consumed by the frame coordinator."""

from __future__ import annotations

from typing import Protocol

from scenekit.api.geometry import ColorF, LayoutSize
from scenekit.api.scene import Epoch, FontKey, PipelineId, Scene


class RenderNotifierPort(Protocol):
    """Callbacks a backend may invoke from any of its threads."""

    def on_frame_ready(self) -> None:
        """A new frame is ready to be rendered."""

    def on_scroll_frame_ready(self, composite_needed: bool) -> None:
        """A scroll-only frame is ready."""

    def on_pipeline_size_changed(self, pipeline_id: PipelineId, size: LayoutSize | None) -> None:
        """The backend observed a pipeline viewport change."""


class RenderBackendPort(Protocol):
    """Scene-consuming GPU backend owned by the loop thread."""

    def register_raw_font(self, data: bytes) -> FontKey:
        """Register raw font file bytes and return the handle text runs refer to."""

    def set_root_pipeline(self, pipeline_id: PipelineId) -> None:
        """Select the pipeline rendered at the root of the window."""

    def submit_scene(
        self,
        background: ColorF | None,
        epoch: Epoch,
        viewport: LayoutSize,
        scene: Scene,
    ) -> None:
        """Transfer ownership of a finalized scene to the backend."""

    def generate_frame(self) -> None:
        """Ask the backend to build a frame from the latest submitted scene."""

    def update(self) -> None:
        """Pull backend-side results into the renderer on the loop thread."""

    def render(self, device_size: tuple[int, int]) -> None:
        """Draw the current frame at the given device-pixel size."""

    def shutdown(self) -> None:
        """Stop worker threads and release GPU resources."""


__all__ = ["RenderBackendPort", "RenderNotifierPort"]
