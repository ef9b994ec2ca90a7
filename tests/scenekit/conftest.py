from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import dataclass, field

from scenekit.api.fonts import HMetrics, PixelBox, PositionedGlyph, VMetrics
from scenekit.api.geometry import ColorF, LayoutPoint, LayoutRect, LayoutSize
from scenekit.api.scene import Epoch, FontKey, PipelineId, Scene, ScrollPolicy
from scenekit.api.window import WindowEvent
from scenekit.rendering.display_list import DisplayListBuilder


@dataclass(frozen=True, slots=True)
class FakeFont:
    """Monospaced font; at scale 13 ascent, descent and line gap are 10, -2 and 1."""

    advance: float = 6.0

    def vertical_metrics(self, scale: float) -> VMetrics:
        return VMetrics(
            ascent=scale * 10.0 / 13.0,
            descent=-scale * 2.0 / 13.0,
            line_gap=scale * 1.0 / 13.0,
        )

    def layout(self, text: str, scale: float, origin: LayoutPoint) -> Iterator[PositionedGlyph]:
        ascent = self.vertical_metrics(scale).ascent
        caret = origin.x
        for ch in text:
            position = LayoutPoint(caret, origin.y)
            box = None
            if not ch.isspace():
                box = PixelBox(
                    min_x=math.floor(caret),
                    min_y=math.floor(origin.y - ascent),
                    max_x=math.ceil(caret + self.advance - 1.0),
                    max_y=math.ceil(origin.y),
                )
            yield PositionedGlyph(
                id=ord(ch),
                position=position,
                h_metrics=HMetrics(advance_width=self.advance, left_side_bearing=0.0),
                pixel_bounding_box=box,
            )
            caret += self.advance


@dataclass(slots=True)
class FakeBackend:
    calls: list[tuple[str, tuple]] = field(default_factory=list)
    scenes: list[Scene] = field(default_factory=list)
    epochs: list[Epoch] = field(default_factory=list)

    def register_raw_font(self, data: bytes) -> FontKey:
        self.calls.append(("register_raw_font", (len(data),)))
        return FontKey(0, 0)

    def set_root_pipeline(self, pipeline_id: PipelineId) -> None:
        self.calls.append(("set_root_pipeline", (pipeline_id,)))

    def submit_scene(
        self,
        background: ColorF | None,
        epoch: Epoch,
        viewport: LayoutSize,
        scene: Scene,
    ) -> None:
        self.calls.append(("submit_scene", (background, epoch, viewport)))
        self.scenes.append(scene)
        self.epochs.append(epoch)

    def generate_frame(self) -> None:
        self.calls.append(("generate_frame", ()))

    def update(self) -> None:
        self.calls.append(("update", ()))

    def render(self, device_size: tuple[int, int]) -> None:
        self.calls.append(("render", (device_size,)))

    def shutdown(self) -> None:
        self.calls.append(("shutdown", ()))

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]


@dataclass(slots=True)
class FakeWindow:
    width: int = 800
    height: int = 600
    dpi: float = 1.0
    batches: list[tuple[WindowEvent, ...]] = field(default_factory=list)
    swaps: int = 0
    waits: int = 0
    closed: int = 0

    def inner_size(self) -> tuple[int, int]:
        return (self.width, self.height)

    def hidpi_factor(self) -> float:
        return self.dpi

    def make_current(self) -> None:
        return

    def swap_buffers(self) -> None:
        self.swaps += 1

    def wait_events(self) -> None:
        self.waits += 1

    def poll_events(self) -> tuple[WindowEvent, ...]:
        if not self.batches:
            return ()
        return self.batches.pop(0)

    def create_wakeup_proxy(self) -> object:
        return object()

    def close(self) -> None:
        self.closed += 1


def simple_scene(width: float = 100.0, height: float = 80.0, *, pipeline_id: PipelineId | None = None) -> Scene:
    viewport = LayoutSize(width, height)
    bounds = LayoutRect.from_size(viewport)
    builder = DisplayListBuilder(pipeline_id=pipeline_id or PipelineId(0, 0), viewport=viewport)
    clip = builder.new_clip_region(bounds)
    builder.push_stacking_context(ScrollPolicy.SCROLLABLE, bounds, clip)
    builder.push_rect(bounds, clip, ColorF(1.0, 1.0, 0.0, 1.0))
    builder.pop_stacking_context()
    return builder.finalize()
