"""Font shaping contracts consumed by the scene builder."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Protocol

from scenekit.api.geometry import LayoutPoint, LayoutRect


@dataclass(frozen=True, slots=True)
class VMetrics:
    """Vertical metrics at one scale; descent is negative below the baseline."""

    ascent: float
    descent: float
    line_gap: float

    @property
    def line_pitch(self) -> float:
        return self.ascent - self.descent + self.line_gap


@dataclass(frozen=True, slots=True)
class HMetrics:
    advance_width: float
    left_side_bearing: float


@dataclass(frozen=True, slots=True)
class PixelBox:
    min_x: int
    min_y: int
    max_x: int
    max_y: int

    def to_rect(self) -> LayoutRect:
        return LayoutRect.from_points(
            float(self.min_x), float(self.min_y), float(self.max_x), float(self.max_y)
        )


@dataclass(frozen=True, slots=True)
class PositionedGlyph:
    id: int
    position: LayoutPoint
    h_metrics: HMetrics
    pixel_bounding_box: PixelBox | None = None

    def em_box(self, v_metrics: VMetrics) -> LayoutRect:
        """Em-box spanning ascent..descent, as wide as advance plus side bearing."""
        x0 = self.position.x
        y0 = self.position.y - v_metrics.ascent
        x1 = self.position.x + self.h_metrics.advance_width + self.h_metrics.left_side_bearing
        y1 = self.position.y - v_metrics.descent
        return LayoutRect.from_points(x0, y0, x1, y1)


class ShapingFont(Protocol):
    """Parsed font able to report metrics and lay out a single line."""

    def vertical_metrics(self, scale: float) -> VMetrics: ...

    def layout(self, text: str, scale: float, origin: LayoutPoint) -> Iterator[PositionedGlyph]: ...


__all__ = ["HMetrics", "PixelBox", "PositionedGlyph", "ShapingFont", "VMetrics"]
