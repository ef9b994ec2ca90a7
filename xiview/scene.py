"""Demo scene: background, a bordered box, and laid-out sample text."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from scenekit.api.fonts import ShapingFont
from scenekit.api.geometry import BLUE, GREEN, MAGENTA, RED, YELLOW, BorderRadius, LayoutPoint, LayoutRect, LayoutSize
from scenekit.api.scene import (
    BorderSide,
    BorderStyle,
    ClipId,
    ComplexClipRegion,
    FontKey,
    GlyphInstance,
    PipelineId,
    Scene,
    ScrollPolicy,
)
from scenekit.rendering.display_list import DisplayListBuilder
from scenekit.text.line_layout import layout_lines
from xiview.content import (
    DASHED_BORDER_WIDTH,
    DEFAULT_LINES,
    FONT_SCALE,
    GLYPH_BORDER_WIDTH,
    GREEN_BOX,
    TEXT_ORIGIN,
    TEXT_SIZE,
)

_LOG = logging.getLogger("xiview.scene")


def build(
    pipeline_id: PipelineId,
    font_key: FontKey,
    font: ShapingFont,
    viewport_width: float,
    viewport_height: float,
    *,
    lines: Sequence[str] = DEFAULT_LINES,
    origin: LayoutPoint = TEXT_ORIGIN,
    scale: float = FONT_SCALE,
    debug_glyph_boxes: bool = False,
) -> Scene:
    viewport = LayoutSize(float(viewport_width), float(viewport_height))
    bounds = LayoutRect.from_size(viewport)
    builder = DisplayListBuilder(pipeline_id=pipeline_id, viewport=viewport)

    clip = builder.new_clip_region(bounds, (ComplexClipRegion(bounds, BorderRadius.uniform(0.0)),))
    builder.push_stacking_context(ScrollPolicy.SCROLLABLE, bounds, clip)

    builder.push_rect(bounds, clip, YELLOW)
    builder.push_rect(GREEN_BOX, clip, GREEN)
    _push_uniform_border(builder, GREEN_BOX, clip, BorderSide(DASHED_BORDER_WIDTH, BLUE, BorderStyle.DASHED))

    v_metrics = font.vertical_metrics(scale)
    glyph_count = 0
    for line in layout_lines(font, lines, scale, origin, v_metrics=v_metrics):
        glyphs: list[GlyphInstance] = []
        for glyph in line.glyphs:
            glyphs.append(GlyphInstance(index=glyph.id, x=glyph.position.x, y=glyph.position.y))
            if not debug_glyph_boxes:
                continue
            em_side = BorderSide(GLYPH_BORDER_WIDTH, MAGENTA, BorderStyle.SOLID)
            _push_uniform_border(builder, glyph.em_box(v_metrics), clip, em_side)
            if glyph.pixel_bounding_box is not None:
                pixel_side = BorderSide(GLYPH_BORDER_WIDTH, RED, BorderStyle.SOLID)
                _push_uniform_border(builder, glyph.pixel_bounding_box.to_rect(), clip, pixel_side)

        builder.push_text(bounds, clip, glyphs, font_key, BLUE, TEXT_SIZE, blur_radius=0.0)
        glyph_count += len(glyphs)

    builder.pop_stacking_context()
    scene = builder.finalize()
    _LOG.debug(
        "scene_built viewport=%sx%s glyphs=%d debug_boxes=%s",
        viewport.width,
        viewport.height,
        glyph_count,
        debug_glyph_boxes,
    )
    return scene


def _push_uniform_border(builder: DisplayListBuilder, rect: LayoutRect, clip: ClipId, side: BorderSide) -> None:
    builder.push_border(rect, clip, side, side, side, side, BorderRadius.uniform(0.0))


__all__ = ["build"]
