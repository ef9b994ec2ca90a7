"""Public scenekit API contracts."""

from scenekit.api.fonts import HMetrics, PixelBox, PositionedGlyph, ShapingFont, VMetrics
from scenekit.api.geometry import (
    BorderRadius,
    ColorF,
    LayoutPoint,
    LayoutRect,
    LayoutSize,
    LayoutTransform,
)
from scenekit.api.logging import EngineLoggingConfig, JsonFormatter, configure_logging, get_logger
from scenekit.api.render import RenderBackendPort, RenderNotifierPort
from scenekit.api.scene import (
    BorderItem,
    BorderSide,
    BorderStyle,
    ClipId,
    ClipRegion,
    ComplexClipRegion,
    Epoch,
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
from scenekit.api.window import (
    KeyboardInputEvent,
    WakeupProxy,
    WindowCloseEvent,
    WindowEvent,
    WindowPort,
    WindowResizeEvent,
)

__all__ = [
    "BorderItem",
    "BorderRadius",
    "BorderSide",
    "BorderStyle",
    "ClipId",
    "ClipRegion",
    "ColorF",
    "ComplexClipRegion",
    "EngineLoggingConfig",
    "Epoch",
    "FontKey",
    "GlyphInstance",
    "HMetrics",
    "JsonFormatter",
    "KeyboardInputEvent",
    "LayoutPoint",
    "LayoutRect",
    "LayoutSize",
    "LayoutTransform",
    "MixBlendMode",
    "PipelineId",
    "PixelBox",
    "PositionedGlyph",
    "RectItem",
    "RenderBackendPort",
    "RenderNotifierPort",
    "Scene",
    "ScrollPolicy",
    "ShapingFont",
    "StackingContext",
    "TextItem",
    "VMetrics",
    "WakeupProxy",
    "WindowCloseEvent",
    "WindowEvent",
    "WindowPort",
    "WindowResizeEvent",
    "configure_logging",
    "get_logger",
]
