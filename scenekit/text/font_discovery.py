"""Font file discovery across configured and platform locations."""

from __future__ import annotations

import os
import sys
from collections.abc import Iterable

from scenekit.runtime.errors import FontLoadError


def resolve_font_path(configured: str | None = None, *, extra_candidates: Iterable[str] = ()) -> str:
    """Return the first existing font file, configured path first."""
    checked: list[str] = []
    for candidate in _iter_font_candidates(configured, extra_candidates):
        normalized = os.path.normpath(candidate)
        checked.append(normalized)
        if os.path.isfile(normalized):
            return normalized
    raise FontLoadError(
        "font discovery failed",
        details={"font_candidates_checked": tuple(checked[:64])},
    )


def _iter_font_candidates(configured: str | None, extra_candidates: Iterable[str]) -> tuple[str, ...]:
    candidates: list[str] = []
    if configured:
        candidates.append(configured)
    candidates.extend(item for item in extra_candidates if item)
    env_value = os.getenv("SCENEKIT_FONT_PATHS", "").strip()
    if env_value:
        candidates.extend(item.strip() for item in env_value.split(os.pathsep) if item.strip())
    candidates.extend(_platform_font_file_candidates())
    for directory in _platform_font_directories():
        if not os.path.isdir(directory):
            continue
        for root, dirs, files in os.walk(directory):
            dirs.sort()
            for name in sorted(files, key=str.lower):
                if name.lower().endswith((".ttf", ".otf")):
                    candidates.append(os.path.join(root, name))
    return tuple(candidates)


def _platform_font_file_candidates() -> tuple[str, ...]:
    if os.name == "nt":
        return (
            r"C:\Windows\Fonts\arial.ttf",
            r"C:\Windows\Fonts\segoeui.ttf",
            r"C:\Windows\Fonts\tahoma.ttf",
        )
    if sys.platform == "darwin":
        return (
            "/System/Library/Fonts/Supplemental/Arial.ttf",
            "/Library/Fonts/Arial.ttf",
        )
    return (
        "/usr/share/fonts/truetype/freefont/FreeSans.ttf",
        "/usr/share/fonts/gnu-free/FreeSans.ttf",
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
        "/usr/share/fonts/TTF/DejaVuSans.ttf",
    )


def _platform_font_directories() -> tuple[str, ...]:
    if os.name == "nt":
        return (r"C:\Windows\Fonts",)
    if sys.platform == "darwin":
        return ("/System/Library/Fonts", "/System/Library/Fonts/Supplemental", "/Library/Fonts")
    return ("/usr/share/fonts", "/usr/local/share/fonts", os.path.expanduser("~/.fonts"))


__all__ = ["resolve_font_path"]
