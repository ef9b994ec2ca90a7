"""Retained scene description handed from the builder to a render backend."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum

from scenekit.api.geometry import BorderRadius, ColorF, LayoutRect, LayoutSize, LayoutTransform


@dataclass(frozen=True, slots=True)
class PipelineId:
    namespace: int
    index: int


@dataclass(frozen=True, slots=True, order=True)
class Epoch:
    value: int = 0

    def next(self) -> Epoch:
        return Epoch(self.value + 1)


@dataclass(frozen=True, slots=True)
class FontKey:
    """Opaque font handle issued by a backend after raw font bytes are registered."""

    namespace: int
    key: int


@dataclass(frozen=True, slots=True)
class ClipId:
    index: int


class ScrollPolicy(Enum):
    SCROLLABLE = "scrollable"
    FIXED = "fixed"


class MixBlendMode(Enum):
    NORMAL = "normal"
    MULTIPLY = "multiply"
    SCREEN = "screen"
    OVERLAY = "overlay"
    DARKEN = "darken"
    LIGHTEN = "lighten"


class BorderStyle(Enum):
    NONE = "none"
    SOLID = "solid"
    DOUBLE = "double"
    DOTTED = "dotted"
    DASHED = "dashed"
    HIDDEN = "hidden"
    GROOVE = "groove"
    RIDGE = "ridge"
    INSET = "inset"
    OUTSET = "outset"


@dataclass(frozen=True, slots=True)
class ComplexClipRegion:
    rect: LayoutRect
    radii: BorderRadius = field(default_factory=BorderRadius.zero)


@dataclass(frozen=True, slots=True)
class ClipRegion:
    main: LayoutRect
    complex: tuple[ComplexClipRegion, ...] = ()


@dataclass(frozen=True, slots=True)
class BorderSide:
    width: float
    color: ColorF
    style: BorderStyle


@dataclass(frozen=True, slots=True)
class GlyphInstance:
    index: int
    x: float
    y: float


@dataclass(frozen=True, slots=True)
class RectItem:
    bounds: LayoutRect
    clip: ClipId
    color: ColorF


@dataclass(frozen=True, slots=True)
class BorderItem:
    bounds: LayoutRect
    clip: ClipId
    left: BorderSide
    top: BorderSide
    right: BorderSide
    bottom: BorderSide
    radius: BorderRadius = field(default_factory=BorderRadius.zero)

    def sides(self) -> tuple[BorderSide, BorderSide, BorderSide, BorderSide]:
        return (self.left, self.top, self.right, self.bottom)


@dataclass(frozen=True, slots=True)
class TextItem:
    bounds: LayoutRect
    clip: ClipId
    glyphs: tuple[GlyphInstance, ...]
    font_key: FontKey
    color: ColorF
    size: float
    blur_radius: float = 0.0


DisplayItem = RectItem | BorderItem | TextItem


@dataclass(frozen=True, slots=True)
class StackingContext:
    scroll_policy: ScrollPolicy
    bounds: LayoutRect
    clip: ClipId
    z_index: int
    transform: LayoutTransform
    perspective: LayoutTransform
    mix_blend_mode: MixBlendMode
    filters: tuple[str, ...] = ()
    items: tuple[DisplayItem, ...] = ()


@dataclass(frozen=True, slots=True)
class Scene:
    """Finalized display list for one pipeline."""

    pipeline_id: PipelineId
    viewport: LayoutSize
    root: StackingContext
    clip_regions: tuple[ClipRegion, ...]

    def primitives(self) -> Iterator[DisplayItem]:
        yield from self.root.items

    def clip_region(self, clip: ClipId) -> ClipRegion:
        return self.clip_regions[clip.index]

    def covers_viewport(self) -> bool:
        return self.root.bounds.contains_rect(LayoutRect.from_size(self.viewport))


__all__ = [
    "BorderItem",
    "BorderSide",
    "BorderStyle",
    "ClipId",
    "ClipRegion",
    "ComplexClipRegion",
    "DisplayItem",
    "Epoch",
    "FontKey",
    "GlyphInstance",
    "MixBlendMode",
    "PipelineId",
    "RectItem",
    "Scene",
    "ScrollPolicy",
    "StackingContext",
    "TextItem",
]
