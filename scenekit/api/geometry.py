"""Layout-space geometry and color value types."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class LayoutPoint:
    x: float
    y: float

    def offset(self, dx: float = 0.0, dy: float = 0.0) -> LayoutPoint:
        return LayoutPoint(self.x + dx, self.y + dy)


@dataclass(frozen=True, slots=True)
class LayoutSize:
    width: float
    height: float

    def scaled(self, factor: float) -> LayoutSize:
        return LayoutSize(self.width * factor, self.height * factor)


@dataclass(frozen=True, slots=True)
class LayoutRect:
    """Axis-aligned rectangle in layout pixels, origin at top-left."""

    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_points(cls, x0: float, y0: float, x1: float, y1: float) -> LayoutRect:
        return cls(x0, y0, x1 - x0, y1 - y0)

    @classmethod
    def from_size(cls, size: LayoutSize) -> LayoutRect:
        return cls(0.0, 0.0, size.width, size.height)

    @property
    def max_x(self) -> float:
        return self.x + self.width

    @property
    def max_y(self) -> float:
        return self.y + self.height

    @property
    def size(self) -> LayoutSize:
        return LayoutSize(self.width, self.height)

    def is_empty(self) -> bool:
        return self.width <= 0.0 or self.height <= 0.0

    def intersection(self, other: LayoutRect) -> LayoutRect:
        """Return the overlap; disjoint inputs give an empty rect at the clamp point."""
        x0 = max(self.x, other.x)
        y0 = max(self.y, other.y)
        x1 = min(self.max_x, other.max_x)
        y1 = min(self.max_y, other.max_y)
        return LayoutRect(x0, y0, max(0.0, x1 - x0), max(0.0, y1 - y0))

    def contains_rect(self, other: LayoutRect) -> bool:
        return (
            self.x <= other.x
            and self.y <= other.y
            and other.max_x <= self.max_x
            and other.max_y <= self.max_y
        )


@dataclass(frozen=True, slots=True)
class ColorF:
    """Linear RGBA color with float channels in 0..1."""

    r: float
    g: float
    b: float
    a: float = 1.0

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.r, self.g, self.b, self.a)


YELLOW = ColorF(1.0, 1.0, 0.0, 1.0)
GREEN = ColorF(0.0, 1.0, 0.0, 1.0)
BLUE = ColorF(0.0, 0.0, 1.0, 1.0)
RED = ColorF(1.0, 0.0, 0.0, 1.0)
MAGENTA = ColorF(1.0, 0.0, 1.0, 1.0)


@dataclass(frozen=True, slots=True)
class BorderRadius:
    top_left: float = 0.0
    top_right: float = 0.0
    bottom_left: float = 0.0
    bottom_right: float = 0.0

    @classmethod
    def uniform(cls, radius: float) -> BorderRadius:
        return cls(radius, radius, radius, radius)

    @classmethod
    def zero(cls) -> BorderRadius:
        return cls()

    def is_zero(self) -> bool:
        return not any((self.top_left, self.top_right, self.bottom_left, self.bottom_right))


@dataclass(frozen=True, slots=True)
class LayoutTransform:
    """Row-major 4x4 matrix."""

    m: tuple[float, ...]

    @classmethod
    def identity(cls) -> LayoutTransform:
        return cls(
            (
                1.0, 0.0, 0.0, 0.0,
                0.0, 1.0, 0.0, 0.0,
                0.0, 0.0, 1.0, 0.0,
                0.0, 0.0, 0.0, 1.0,
            )
        )

    def is_identity(self) -> bool:
        return self.m == LayoutTransform.identity().m


__all__ = [
    "BLUE",
    "BorderRadius",
    "ColorF",
    "GREEN",
    "LayoutPoint",
    "LayoutRect",
    "LayoutSize",
    "LayoutTransform",
    "MAGENTA",
    "RED",
    "YELLOW",
]
