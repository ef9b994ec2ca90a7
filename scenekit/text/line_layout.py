"""Multi-line layout over a shaping font."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from scenekit.api.fonts import PositionedGlyph, ShapingFont, VMetrics
from scenekit.api.geometry import LayoutPoint


@dataclass(frozen=True, slots=True)
class ShapedLine:
    index: int
    text: str
    origin: LayoutPoint
    glyphs: tuple[PositionedGlyph, ...]


def layout_lines(
    font: ShapingFont,
    lines: Iterable[str],
    scale: float,
    origin: LayoutPoint,
    *,
    v_metrics: VMetrics | None = None,
) -> Iterator[ShapedLine]:
    """Shape each line one line pitch below the previous one.

    The origin advances before a line is shaped, so line ``k`` sits at
    ``origin.y + (k + 1) * pitch``.
    """
    metrics = v_metrics if v_metrics is not None else font.vertical_metrics(scale)
    pitch = metrics.line_pitch
    line_origin = origin
    for index, text in enumerate(lines):
        line_origin = line_origin.offset(dy=pitch)
        glyphs = tuple(font.layout(text, scale, line_origin))
        yield ShapedLine(index=index, text=text, origin=line_origin, glyphs=glyphs)


__all__ = ["ShapedLine", "layout_lines"]
