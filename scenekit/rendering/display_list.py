"""Display-list builder producing a finalized scene tree."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from scenekit.api.geometry import BorderRadius, ColorF, LayoutRect, LayoutSize, LayoutTransform
from scenekit.api.scene import (
    BorderItem,
    BorderSide,
    ClipId,
    ClipRegion,
    ComplexClipRegion,
    DisplayItem,
    FontKey,
    GlyphInstance,
    MixBlendMode,
    PipelineId,
    RectItem,
    Scene,
    ScrollPolicy,
    StackingContext,
    TextItem,
)
from scenekit.runtime.errors import SceneBuildError


@dataclass(slots=True)
class _OpenContext:
    scroll_policy: ScrollPolicy
    bounds: LayoutRect
    clip: ClipId
    z_index: int
    transform: LayoutTransform
    perspective: LayoutTransform
    mix_blend_mode: MixBlendMode
    filters: tuple[str, ...]
    items: list[DisplayItem] = field(default_factory=list)

    def close(self) -> StackingContext:
        return StackingContext(
            scroll_policy=self.scroll_policy,
            bounds=self.bounds,
            clip=self.clip,
            z_index=self.z_index,
            transform=self.transform,
            perspective=self.perspective,
            mix_blend_mode=self.mix_blend_mode,
            filters=self.filters,
            items=tuple(self.items),
        )


@dataclass(slots=True)
class DisplayListBuilder:
    """Single-use builder for one pipeline's scene.

    A scene holds exactly one stacking context; it must be pushed, filled
    and popped before ``finalize``. Clip regions are registered up front and
    referenced by id.
    """

    pipeline_id: PipelineId
    viewport: LayoutSize
    _clip_regions: list[ClipRegion] = field(init=False, default_factory=list)
    _open: _OpenContext | None = field(init=False, default=None)
    _root: StackingContext | None = field(init=False, default=None)
    _finalized: bool = field(init=False, default=False)

    @property
    def depth(self) -> int:
        return 1 if self._open is not None else 0

    def new_clip_region(
        self,
        main: LayoutRect,
        complex_regions: Iterable[ComplexClipRegion] = (),
    ) -> ClipId:
        self._require_building()
        self._clip_regions.append(ClipRegion(main=main, complex=tuple(complex_regions)))
        return ClipId(len(self._clip_regions) - 1)

    def push_stacking_context(
        self,
        scroll_policy: ScrollPolicy,
        bounds: LayoutRect,
        clip: ClipId,
        *,
        z_index: int = 0,
        transform: LayoutTransform | None = None,
        perspective: LayoutTransform | None = None,
        mix_blend_mode: MixBlendMode = MixBlendMode.NORMAL,
        filters: Iterable[str] = (),
    ) -> None:
        self._require_building()
        if self._open is not None:
            raise SceneBuildError("a stacking context is already open")
        if self._root is not None:
            raise SceneBuildError("scene already has a root stacking context")
        self._require_clip(clip)
        self._open = _OpenContext(
            scroll_policy=scroll_policy,
            bounds=bounds,
            clip=clip,
            z_index=int(z_index),
            transform=transform if transform is not None else LayoutTransform.identity(),
            perspective=perspective if perspective is not None else LayoutTransform.identity(),
            mix_blend_mode=mix_blend_mode,
            filters=tuple(filters),
        )

    def pop_stacking_context(self) -> None:
        self._require_building()
        if self._open is None:
            raise SceneBuildError("pop without an open stacking context")
        self._root = self._open.close()
        self._open = None

    def push_rect(self, bounds: LayoutRect, clip: ClipId, color: ColorF) -> None:
        self._push(RectItem(bounds=bounds, clip=clip, color=color))

    def push_border(
        self,
        bounds: LayoutRect,
        clip: ClipId,
        left: BorderSide,
        top: BorderSide,
        right: BorderSide,
        bottom: BorderSide,
        radius: BorderRadius | None = None,
    ) -> None:
        self._push(
            BorderItem(
                bounds=bounds,
                clip=clip,
                left=left,
                top=top,
                right=right,
                bottom=bottom,
                radius=radius if radius is not None else BorderRadius.zero(),
            )
        )

    def push_text(
        self,
        bounds: LayoutRect,
        clip: ClipId,
        glyphs: Iterable[GlyphInstance],
        font_key: FontKey,
        color: ColorF,
        size: float,
        blur_radius: float = 0.0,
    ) -> None:
        self._push(
            TextItem(
                bounds=bounds,
                clip=clip,
                glyphs=tuple(glyphs),
                font_key=font_key,
                color=color,
                size=float(size),
                blur_radius=float(blur_radius),
            )
        )

    def finalize(self) -> Scene:
        self._require_building()
        if self._open is not None:
            raise SceneBuildError("finalize with an unbalanced stacking context")
        if self._root is None:
            raise SceneBuildError("scene has no root stacking context")
        self._finalized = True
        return Scene(
            pipeline_id=self.pipeline_id,
            viewport=self.viewport,
            root=self._root,
            clip_regions=tuple(self._clip_regions),
        )

    def _push(self, item: DisplayItem) -> None:
        self._require_building()
        if self._open is None:
            raise SceneBuildError(f"{type(item).__name__} pushed outside a stacking context")
        self._require_clip(item.clip)
        self._open.items.append(item)

    def _require_clip(self, clip: ClipId) -> None:
        if not 0 <= clip.index < len(self._clip_regions):
            raise SceneBuildError(f"clip region {clip.index} is not registered")

    def _require_building(self) -> None:
        if self._finalized:
            raise SceneBuildError("builder already finalized")


__all__ = ["DisplayListBuilder"]
