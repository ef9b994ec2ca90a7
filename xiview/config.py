"""Application configuration and env loading."""

from __future__ import annotations

import os
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from xiview.content import DEFAULT_FONT_PATH, DEFAULT_LINES, SINGLE_LINE


@dataclass(frozen=True, slots=True)
class AppConfig:
    font_path: str
    lines: tuple[str, ...]
    debug_glyph_boxes: bool
    core_enabled: bool
    core_executable: str
    core_args: tuple[str, ...]
    core_file: str


def load_app_config(*, env: Mapping[str, str] | None = None) -> AppConfig:
    source: Mapping[str, str] = os.environ if env is None else env

    def read(name: str, default: str) -> str:
        value = str(source.get(name, "")).strip()
        return value if value else default

    def flag(name: str, default: bool) -> bool:
        value = read(name, "").lower()
        if value in {"1", "true", "yes", "on"}:
            return True
        if value in {"0", "false", "no", "off"}:
            return False
        return default

    custom_lines = tuple(item for item in read("XIVIEW_TEXT_LINES", "").split("|") if item.strip())
    if custom_lines:
        lines = custom_lines
    elif read("XIVIEW_TEXT_MODE", "multi").lower() == "single":
        lines = SINGLE_LINE
    else:
        lines = DEFAULT_LINES

    return AppConfig(
        font_path=read("XIVIEW_FONT_PATH", DEFAULT_FONT_PATH),
        lines=lines,
        debug_glyph_boxes=flag("XIVIEW_DEBUG_GLYPH_BOXES", False),
        core_enabled=flag("XIVIEW_CORE_ENABLED", False),
        core_executable=read("XIVIEW_CORE_EXECUTABLE", "xi-core"),
        core_args=tuple(item.strip() for item in read("XIVIEW_CORE_ARGS", "").split(",") if item.strip()),
        core_file=read("XIVIEW_CORE_FILE", "README.md"),
    )


DEFAULT_ENV_FILES = (".env.scenekit", ".env.scenekit.local", ".env.xiview", ".env.xiview.local")


def load_env_file(path: str = ".env", *, override_existing: bool = True) -> None:
    """Copy KEY=VALUE pairs from an env file into ``os.environ``; missing files are skipped."""
    env_path = _locate_env_file(path)
    if env_path is None:
        return
    for key, value in _parse_env_text(env_path.read_text(encoding="utf-8")):
        if override_existing or key not in os.environ:
            os.environ[key] = value


def load_default_env_files(
    *, override_existing: bool = True, paths: Sequence[str] | None = None
) -> None:
    """Load toolkit then viewer env files in order, so later files win."""
    for path in DEFAULT_ENV_FILES if paths is None else tuple(paths):
        load_env_file(path, override_existing=override_existing)


def _parse_env_text(text: str) -> Iterator[tuple[str, str]]:
    for line in text.splitlines():
        stripped = line.strip()
        if stripped.startswith("#"):
            continue
        key, sep, value = stripped.partition("=")
        key = key.strip()
        if not sep or not key:
            continue
        value = value.strip()
        if len(value) > 1 and value[0] in "'\"" and value[-1] == value[0]:
            value = value[1:-1]
        yield key, value


def _locate_env_file(path: str) -> Path | None:
    # cwd first, then the project root holding the xiview package.
    for candidate in (Path(path), Path(__file__).resolve().parents[1] / path):
        if candidate.is_file():
            return candidate
    return None


__all__ = [
    "AppConfig",
    "DEFAULT_ENV_FILES",
    "load_app_config",
    "load_default_env_files",
    "load_env_file",
]
