"""Static demo content."""

from __future__ import annotations

from scenekit.api.geometry import LayoutPoint, LayoutRect

WINDOW_TITLE = "WebRender Sample"
DEFAULT_FONT_PATH = "res/FreeSans.ttf"

TEST_STRING = "Mammon slept. And the beast reborn spread over the earth and its numbers grew legion."
FONT_SCALE = 128.0
PIXEL_TO_POINT = 0.71
TEXT_SIZE = FONT_SCALE * PIXEL_TO_POINT

DEFAULT_LINES: tuple[str, ...] = (
    "Mammon slept. And the beast",
    "reborn spread over the earth",
    "and its numbers grew legion.",
)
SINGLE_LINE: tuple[str, ...] = (TEST_STRING,)
TEXT_ORIGIN = LayoutPoint(10.0, 0.0)

GREEN_BOX = LayoutRect(250.0, 250.0, 100.0, 100.0)
DASHED_BORDER_WIDTH = 3.0
GLYPH_BORDER_WIDTH = 1.0
