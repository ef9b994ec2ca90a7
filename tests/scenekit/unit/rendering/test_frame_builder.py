from __future__ import annotations

from scenekit.api.geometry import BLUE, GREEN, RED, YELLOW, ColorF, LayoutRect, LayoutSize
from scenekit.api.scene import (
    BorderItem,
    BorderSide,
    BorderStyle,
    ClipId,
    ComplexClipRegion,
    Epoch,
    FontKey,
    GlyphInstance,
    PipelineId,
    ScrollPolicy,
)
from scenekit.rendering.display_list import DisplayListBuilder
from scenekit.rendering.frame_builder import DrawRect, border_strips, build_frame


def _side(width: float, style: BorderStyle = BorderStyle.SOLID, color: ColorF = RED) -> BorderSide:
    return BorderSide(width, color, style)


def test_build_frame_keeps_paint_order_and_background() -> None:
    viewport = LayoutSize(800.0, 600.0)
    bounds = LayoutRect.from_size(viewport)
    builder = DisplayListBuilder(pipeline_id=PipelineId(0, 0), viewport=viewport)
    clip = builder.new_clip_region(bounds, (ComplexClipRegion(bounds),))
    builder.push_stacking_context(ScrollPolicy.SCROLLABLE, bounds, clip)
    builder.push_rect(bounds, clip, YELLOW)
    builder.push_rect(LayoutRect(250.0, 250.0, 100.0, 100.0), clip, GREEN)
    builder.push_text(bounds, clip, [GlyphInstance(42, 10.0, 13.0)], FontKey(0, 3), BLUE, 90.88)
    builder.pop_stacking_context()
    scene = builder.finalize()

    frame = build_frame(scene, background=ColorF(0.3, 0.1, 0.1, 1.0), epoch=Epoch(0))

    assert frame.background == (0.3, 0.1, 0.1, 1.0)
    assert frame.epoch == Epoch(0)
    assert frame.rects == (
        DrawRect(0.0, 0.0, 800.0, 600.0, YELLOW.as_tuple()),
        DrawRect(250.0, 250.0, 100.0, 100.0, GREEN.as_tuple()),
    )
    assert len(frame.glyphs) == 1
    glyph = frame.glyphs[0]
    assert (glyph.glyph_index, glyph.x, glyph.y, glyph.size_px) == (42, 10.0, 13.0, 90.88)
    assert glyph.font_key == FontKey(0, 3)
    assert glyph.clip == bounds


def test_build_frame_clips_to_root_and_complex_regions() -> None:
    viewport = LayoutSize(100.0, 100.0)
    bounds = LayoutRect.from_size(viewport)
    builder = DisplayListBuilder(pipeline_id=PipelineId(0, 0), viewport=viewport)
    root_clip = builder.new_clip_region(bounds)
    narrow = builder.new_clip_region(bounds, (ComplexClipRegion(LayoutRect(0.0, 0.0, 50.0, 100.0)),))
    builder.push_stacking_context(ScrollPolicy.SCROLLABLE, bounds, root_clip)
    builder.push_rect(LayoutRect(80.0, 80.0, 50.0, 50.0), root_clip, GREEN)
    builder.push_rect(LayoutRect(0.0, 0.0, 100.0, 10.0), narrow, BLUE)
    builder.push_rect(LayoutRect(200.0, 200.0, 5.0, 5.0), root_clip, RED)
    builder.pop_stacking_context()

    frame = build_frame(builder.finalize(), background=None, epoch=Epoch())

    assert frame.background is None
    assert frame.rects == (
        DrawRect(80.0, 80.0, 20.0, 20.0, GREEN.as_tuple()),
        DrawRect(0.0, 0.0, 50.0, 10.0, BLUE.as_tuple()),
    )


def test_solid_border_strips_cover_edges_without_overlap() -> None:
    side = _side(1.0)
    item = BorderItem(LayoutRect(0.0, 0.0, 10.0, 10.0), ClipId(0), side, side, side, side)

    strips = [rect for rect, _ in border_strips(item)]

    assert strips == [
        LayoutRect(0.0, 0.0, 10.0, 1.0),
        LayoutRect(0.0, 9.0, 10.0, 1.0),
        LayoutRect(0.0, 1.0, 1.0, 8.0),
        LayoutRect(9.0, 1.0, 1.0, 8.0),
    ]
    assert sum(r.width * r.height for r in strips) == 10 * 10 - 8 * 8


def test_hidden_and_none_sides_are_skipped() -> None:
    solid = _side(2.0)
    item = BorderItem(
        LayoutRect(0.0, 0.0, 10.0, 10.0),
        ClipId(0),
        left=_side(2.0, BorderStyle.NONE),
        top=solid,
        right=_side(2.0, BorderStyle.HIDDEN),
        bottom=solid,
    )
    strips = border_strips(item)
    assert [rect for rect, _ in strips] == [
        LayoutRect(0.0, 0.0, 10.0, 2.0),
        LayoutRect(0.0, 8.0, 10.0, 2.0),
    ]


def test_dashed_border_is_split_into_dashes() -> None:
    viewport = LayoutSize(800.0, 600.0)
    bounds = LayoutRect.from_size(viewport)
    builder = DisplayListBuilder(pipeline_id=PipelineId(0, 0), viewport=viewport)
    clip = builder.new_clip_region(bounds)
    dashed = _side(3.0, BorderStyle.DASHED, BLUE)
    builder.push_stacking_context(ScrollPolicy.SCROLLABLE, bounds, clip)
    builder.push_border(LayoutRect(250.0, 250.0, 100.0, 100.0), clip, dashed, dashed, dashed, dashed)
    builder.pop_stacking_context()

    frame = build_frame(builder.finalize(), background=None, epoch=Epoch())

    top = [r for r in frame.rects if r.y == 250.0 and r.h == 3.0]
    assert [r.x for r in top] == [250.0, 268.0, 286.0, 304.0, 322.0, 340.0]
    assert all(r.w == 9.0 for r in top)
    left = [r for r in frame.rects if r.x == 250.0 and r.w == 3.0]
    assert [r.y for r in left] == [253.0, 271.0, 289.0, 307.0, 325.0, 343.0]
    assert left[-1].h == 4.0
    assert len(frame.rects) == 24
    assert all(r.color == BLUE.as_tuple() for r in frame.rects)


def test_dotted_border_uses_width_sized_dots() -> None:
    dotted = _side(2.0, BorderStyle.DOTTED)
    viewport = LayoutSize(20.0, 20.0)
    bounds = LayoutRect.from_size(viewport)
    builder = DisplayListBuilder(pipeline_id=PipelineId(0, 0), viewport=viewport)
    clip = builder.new_clip_region(bounds)
    none = _side(0.0, BorderStyle.NONE)
    builder.push_stacking_context(ScrollPolicy.SCROLLABLE, bounds, clip)
    builder.push_border(LayoutRect(0.0, 0.0, 10.0, 4.0), clip, none, dotted, none, none)
    builder.pop_stacking_context()

    frame = build_frame(builder.finalize(), background=None, epoch=Epoch())

    assert [(r.x, r.w) for r in frame.rects] == [(0.0, 2.0), (4.0, 2.0), (8.0, 2.0)]
