"""Flatten a scene tree into clipped rects and glyph draws for the GPU presenter."""

from __future__ import annotations

from dataclasses import dataclass

from scenekit.api.geometry import ColorF, LayoutRect, LayoutSize
from scenekit.api.scene import (
    BorderItem,
    BorderSide,
    BorderStyle,
    ClipId,
    Epoch,
    FontKey,
    PipelineId,
    RectItem,
    Scene,
    TextItem,
)

_DASH_WIDTH_FACTOR = 3.0
_INVISIBLE_STYLES = frozenset({BorderStyle.NONE, BorderStyle.HIDDEN})


@dataclass(frozen=True, slots=True)
class DrawRect:
    x: float
    y: float
    w: float
    h: float
    color: tuple[float, float, float, float]


@dataclass(frozen=True, slots=True)
class GlyphDraw:
    font_key: FontKey
    glyph_index: int
    x: float
    y: float
    size_px: float
    color: tuple[float, float, float, float]
    clip: LayoutRect


@dataclass(frozen=True, slots=True)
class BuiltFrame:
    pipeline_id: PipelineId
    epoch: Epoch
    viewport: LayoutSize
    background: tuple[float, float, float, float] | None
    rects: tuple[DrawRect, ...]
    glyphs: tuple[GlyphDraw, ...]


def build_frame(scene: Scene, *, background: ColorF | None, epoch: Epoch) -> BuiltFrame:
    """Resolve clips and expand borders; paint order follows display order."""
    root = scene.root
    root_clip = _resolve_clip(scene, root.clip).intersection(root.bounds)
    rects: list[DrawRect] = []
    glyphs: list[GlyphDraw] = []
    for item in scene.primitives():
        clip = _resolve_clip(scene, item.clip).intersection(root_clip)
        if isinstance(item, RectItem):
            _append_clipped(rects, item.bounds, item.color, clip)
        elif isinstance(item, BorderItem):
            for strip, side in border_strips(item):
                for segment in _style_segments(strip, side):
                    _append_clipped(rects, segment, side.color, clip)
        elif isinstance(item, TextItem):
            color = item.color.as_tuple()
            glyphs.extend(
                GlyphDraw(
                    font_key=item.font_key,
                    glyph_index=glyph.index,
                    x=glyph.x,
                    y=glyph.y,
                    size_px=item.size,
                    color=color,
                    clip=clip,
                )
                for glyph in item.glyphs
            )
    return BuiltFrame(
        pipeline_id=scene.pipeline_id,
        epoch=epoch,
        viewport=scene.viewport,
        background=background.as_tuple() if background is not None else None,
        rects=tuple(rects),
        glyphs=tuple(glyphs),
    )


def border_strips(item: BorderItem) -> tuple[tuple[LayoutRect, BorderSide], ...]:
    """Split a border into edge strips; top/bottom span corners, left/right fill between."""
    b = item.bounds
    top_w = _visible_width(item.top)
    bottom_w = _visible_width(item.bottom)
    left_w = _visible_width(item.left)
    right_w = _visible_width(item.right)
    inner_h = max(0.0, b.height - top_w - bottom_w)
    strips: list[tuple[LayoutRect, BorderSide]] = []
    if top_w > 0.0:
        strips.append((LayoutRect(b.x, b.y, b.width, top_w), item.top))
    if bottom_w > 0.0:
        strips.append((LayoutRect(b.x, b.max_y - bottom_w, b.width, bottom_w), item.bottom))
    if left_w > 0.0:
        strips.append((LayoutRect(b.x, b.y + top_w, left_w, inner_h), item.left))
    if right_w > 0.0:
        strips.append((LayoutRect(b.max_x - right_w, b.y + top_w, right_w, inner_h), item.right))
    return tuple(strips)


def _visible_width(side: BorderSide) -> float:
    if side.style in _INVISIBLE_STYLES:
        return 0.0
    return max(0.0, float(side.width))


def _style_segments(strip: LayoutRect, side: BorderSide) -> tuple[LayoutRect, ...]:
    if side.style is BorderStyle.DASHED:
        dash = max(1.0, side.width * _DASH_WIDTH_FACTOR)
        return _dash_segments(strip, dash=dash, gap=dash)
    if side.style is BorderStyle.DOTTED:
        dot = max(1.0, side.width)
        return _dash_segments(strip, dash=dot, gap=dot)
    return (strip,)


def _dash_segments(strip: LayoutRect, *, dash: float, gap: float) -> tuple[LayoutRect, ...]:
    horizontal = strip.width >= strip.height
    length = strip.width if horizontal else strip.height
    segments: list[LayoutRect] = []
    offset = 0.0
    while offset < length:
        run = min(dash, length - offset)
        if horizontal:
            segments.append(LayoutRect(strip.x + offset, strip.y, run, strip.height))
        else:
            segments.append(LayoutRect(strip.x, strip.y + offset, strip.width, run))
        offset += dash + gap
    return tuple(segments)


def _resolve_clip(scene: Scene, clip_id: ClipId) -> LayoutRect:
    region = scene.clip_region(clip_id)
    rect = region.main
    for complex_region in region.complex:
        rect = rect.intersection(complex_region.rect)
    return rect


def _append_clipped(out: list[DrawRect], bounds: LayoutRect, color: ColorF, clip: LayoutRect) -> None:
    visible = bounds.intersection(clip)
    if visible.is_empty():
        return
    out.append(DrawRect(visible.x, visible.y, visible.width, visible.height, color.as_tuple()))


__all__ = ["BuiltFrame", "DrawRect", "GlyphDraw", "border_strips", "build_frame"]
