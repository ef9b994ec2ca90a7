"""freetype-py backed implementation of the shaping font contract."""

from __future__ import annotations

import io
import logging
import math
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import freetype

from scenekit.api.fonts import HMetrics, PixelBox, PositionedGlyph, VMetrics
from scenekit.api.geometry import LayoutPoint
from scenekit.runtime.errors import FontLoadError

_LOG = logging.getLogger("scenekit.text.freetype")


@dataclass(frozen=True, slots=True)
class _GlyphUnits:
    """Unscaled glyph metrics in font design units."""

    advance: float
    left_side_bearing: float
    bbox: tuple[float, float, float, float] | None  # x_min, y_min, x_max, y_max


@dataclass(slots=True)
class FreetypeFont:
    """Parsed face laid out in pixel scale units.

    ``scale`` is the pixel height spanned by ``ascender - descender``, so a
    scale of 128 maps the face's full vertical extent onto 128 pixels.
    """

    face: Any
    _units_cache: dict[int, _GlyphUnits] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        if self._design_height() <= 0:
            raise FontLoadError(
                "font has no usable vertical extent",
                details={"ascender": self.face.ascender, "descender": self.face.descender},
            )

    @classmethod
    def parse(cls, data: bytes) -> FreetypeFont:
        if not data:
            raise FontLoadError("font data is empty")
        try:
            face = freetype.Face(io.BytesIO(bytes(data)))
        except (freetype.FT_Exception, OSError, ValueError) as exc:
            raise FontLoadError(
                "font parse failed",
                details={"byte_length": len(data), "exception_message": str(exc)},
            ) from exc
        font = cls(face=face)
        _LOG.debug(
            "font_parsed family=%s units_per_em=%s glyphs=%s kerning=%s",
            font.family_name,
            face.units_per_EM,
            face.num_glyphs,
            bool(face.has_kerning),
        )
        return font

    @property
    def family_name(self) -> str:
        raw = getattr(self.face, "family_name", b"")
        if isinstance(raw, bytes):
            return raw.decode("utf-8", errors="replace")
        return str(raw or "")

    def scale_factor(self, scale: float) -> float:
        return float(scale) / self._design_height()

    def vertical_metrics(self, scale: float) -> VMetrics:
        factor = self.scale_factor(scale)
        ascender = float(self.face.ascender)
        descender = float(self.face.descender)
        line_gap = max(0.0, float(self.face.height) - (ascender - descender))
        return VMetrics(
            ascent=ascender * factor,
            descent=descender * factor,
            line_gap=line_gap * factor,
        )

    def glyph_id(self, ch: str) -> int:
        return int(self.face.get_char_index(ch))

    def layout(self, text: str, scale: float, origin: LayoutPoint) -> Iterator[PositionedGlyph]:
        factor = self.scale_factor(scale)
        use_kerning = bool(getattr(self.face, "has_kerning", False))
        caret = float(origin.x)
        previous: int | None = None
        for ch in text:
            glyph_id = self.glyph_id(ch)
            if use_kerning and previous is not None:
                kerning = self.face.get_kerning(previous, glyph_id, freetype.FT_KERNING_UNSCALED)
                caret += float(kerning.x) * factor
            units = self._glyph_units(glyph_id)
            position = LayoutPoint(caret, float(origin.y))
            yield PositionedGlyph(
                id=glyph_id,
                position=position,
                h_metrics=HMetrics(
                    advance_width=units.advance * factor,
                    left_side_bearing=units.left_side_bearing * factor,
                ),
                pixel_bounding_box=_pixel_box(units, position, factor),
            )
            caret += units.advance * factor
            previous = glyph_id

    def _design_height(self) -> float:
        return float(self.face.ascender) - float(self.face.descender)

    def _glyph_units(self, glyph_id: int) -> _GlyphUnits:
        cached = self._units_cache.get(glyph_id)
        if cached is not None:
            return cached
        self.face.load_glyph(glyph_id, freetype.FT_LOAD_NO_SCALE)
        glyph = self.face.glyph
        metrics = glyph.metrics
        outline = glyph.outline
        bbox: tuple[float, float, float, float] | None = None
        if int(getattr(outline, "n_points", 0)) > 0:
            box = outline.get_bbox()
            bbox = (float(box.xMin), float(box.yMin), float(box.xMax), float(box.yMax))
        units = _GlyphUnits(
            advance=float(metrics.horiAdvance),
            left_side_bearing=float(metrics.horiBearingX),
            bbox=bbox,
        )
        self._units_cache[glyph_id] = units
        return units


def _pixel_box(units: _GlyphUnits, position: LayoutPoint, factor: float) -> PixelBox | None:
    if units.bbox is None:
        return None
    x_min, y_min, x_max, y_max = units.bbox
    # Font units grow upward; layout space grows downward from the baseline.
    return PixelBox(
        min_x=math.floor(position.x + x_min * factor),
        min_y=math.floor(position.y - y_max * factor),
        max_x=math.ceil(position.x + x_max * factor),
        max_y=math.ceil(position.y - y_min * factor),
    )


def load_font_file(path: str | Path) -> tuple[bytes, FreetypeFont]:
    """Read and parse a font file, returning the raw bytes alongside the parsed font."""
    font_path = Path(path)
    try:
        data = font_path.read_bytes()
    except OSError as exc:
        raise FontLoadError(
            "font file unreadable",
            details={"font_path": str(font_path), "exception_message": str(exc)},
        ) from exc
    try:
        font = FreetypeFont.parse(data)
    except FontLoadError as exc:
        exc.details.setdefault("font_path", str(font_path))
        raise
    return data, font


__all__ = ["FreetypeFont", "load_font_file"]
