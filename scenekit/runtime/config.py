"""Centralized runtime configuration ownership."""

from __future__ import annotations

import os
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Mapping

from scenekit.api.logging import EngineLoggingConfig
from scenekit.api.scene import PipelineId

DEFAULT_BACKGROUND_COLOR: tuple[float, float, float, float] = (0.3, 0.1, 0.1, 1.0)
# X11 keycode of Escape.
DEFAULT_QUIT_SCAN_CODE = 9


@dataclass(frozen=True, slots=True)
class RuntimeWindowConfig:
    title: str
    width: int
    height: int
    events_trace_enabled: bool
    quit_keys: tuple[str, ...]
    quit_scan_codes: tuple[int, ...]


@dataclass(frozen=True, slots=True)
class RuntimeRenderConfig:
    wgpu_backends: tuple[str, ...]
    vsync: bool
    background_color: tuple[float, float, float, float]
    epoch_policy: str  # static|increment
    pipeline_id: PipelineId
    atlas_size: int


@dataclass(frozen=True, slots=True)
class RuntimeConfig:
    window: RuntimeWindowConfig
    render: RuntimeRenderConfig
    logging: EngineLoggingConfig


_RUNTIME_CONFIG: ContextVar[RuntimeConfig | None] = ContextVar("scenekit_runtime_config", default=None)


def _raw(name: str, *, env: Mapping[str, str] | None = None) -> str | None:
    value = os.getenv(name) if env is None else env.get(name)
    return None if value is None else str(value)


def _flag(name: str, default: bool, *, env: Mapping[str, str] | None = None) -> bool:
    raw = _raw(name, env=env)
    if raw is None:
        return bool(default)
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    return bool(default)


def _int(
    name: str,
    default: int,
    *,
    minimum: int | None = None,
    env: Mapping[str, str] | None = None,
) -> int:
    raw = _raw(name, env=env)
    if raw is None:
        value = int(default)
    else:
        try:
            value = int(raw.strip())
        except ValueError:
            value = int(default)
    if minimum is None:
        return value
    return max(int(minimum), value)


def _text(name: str, default: str, *, env: Mapping[str, str] | None = None) -> str:
    raw = _raw(name, env=env)
    if raw is None:
        return str(default)
    value = raw.strip()
    return value if value else str(default)


def _csv(name: str, *, env: Mapping[str, str] | None = None) -> tuple[str, ...]:
    raw = _text(name, "", env=env)
    if not raw:
        return ()
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def _color(
    name: str,
    default: tuple[float, float, float, float],
    *,
    env: Mapping[str, str] | None = None,
) -> tuple[float, float, float, float]:
    items = _csv(name, env=env)
    if len(items) not in {3, 4}:
        return default
    try:
        channels = [min(1.0, max(0.0, float(item))) for item in items]
    except ValueError:
        return default
    if len(channels) == 3:
        channels.append(1.0)
    return (channels[0], channels[1], channels[2], channels[3])


def _normalize_epoch_policy(raw: str) -> str:
    value = str(raw).strip().lower()
    if value in {"increment", "incrementing", "monotonic"}:
        return "increment"
    return "static"


def _scan_codes(name: str, *, env: Mapping[str, str] | None = None) -> tuple[int, ...]:
    values: list[int] = []
    for item in _csv(name, env=env):
        try:
            values.append(int(item))
        except ValueError:
            continue
    return tuple(values) if values else (DEFAULT_QUIT_SCAN_CODE,)


def load_runtime_config(*, env: Mapping[str, str] | None = None) -> RuntimeConfig:
    scope_env = env

    wgpu_backends_csv = _csv("SCENEKIT_WGPU_BACKENDS", env=scope_env)
    wgpu_backends = (
        tuple(item.lower() for item in wgpu_backends_csv)
        if wgpu_backends_csv
        else ("vulkan", "metal", "dx12")
    )
    quit_keys = _csv("SCENEKIT_QUIT_KEYS", env=scope_env) or ("Escape",)
    log_file = _text("SCENEKIT_LOG_FILE", "", env=scope_env)

    return RuntimeConfig(
        window=RuntimeWindowConfig(
            title=_text("SCENEKIT_WINDOW_TITLE", "scenekit", env=scope_env),
            width=_int("SCENEKIT_WINDOW_WIDTH", 800, minimum=1, env=scope_env),
            height=_int("SCENEKIT_WINDOW_HEIGHT", 600, minimum=1, env=scope_env),
            events_trace_enabled=_flag("SCENEKIT_WINDOW_EVENTS_TRACE_ENABLED", False, env=scope_env),
            quit_keys=quit_keys,
            quit_scan_codes=_scan_codes("SCENEKIT_QUIT_SCAN_CODES", env=scope_env),
        ),
        render=RuntimeRenderConfig(
            wgpu_backends=wgpu_backends,
            vsync=_flag("SCENEKIT_RENDER_VSYNC", True, env=scope_env),
            background_color=_color(
                "SCENEKIT_BACKGROUND_COLOR", DEFAULT_BACKGROUND_COLOR, env=scope_env
            ),
            epoch_policy=_normalize_epoch_policy(
                _text("SCENEKIT_FRAME_EPOCH_POLICY", "static", env=scope_env)
            ),
            pipeline_id=PipelineId(
                _int("SCENEKIT_PIPELINE_NAMESPACE", 0, minimum=0, env=scope_env),
                _int("SCENEKIT_PIPELINE_INDEX", 0, minimum=0, env=scope_env),
            ),
            atlas_size=_int("SCENEKIT_WGPU_GLYPH_ATLAS_SIZE", 2048, minimum=256, env=scope_env),
        ),
        logging=EngineLoggingConfig(
            level_name=_text(
                "SCENEKIT_LOG_LEVEL", _text("LOG_LEVEL", "INFO", env=scope_env), env=scope_env
            ).upper(),
            console_format=_text("SCENEKIT_LOG_FORMAT", "text", env=scope_env).lower(),
            file_path=log_file or None,
            file_format=_text("SCENEKIT_LOG_FILE_FORMAT", "json", env=scope_env).lower(),
        ),
    )


def initialize_runtime_config(*, env: Mapping[str, str] | None = None) -> RuntimeConfig:
    """Load configuration once and cache it for the current context."""
    config = load_runtime_config(env=env)
    _RUNTIME_CONFIG.set(config)
    return config


def get_runtime_config() -> RuntimeConfig:
    config = _RUNTIME_CONFIG.get()
    if config is None:
        return initialize_runtime_config()
    return config


__all__ = [
    "DEFAULT_BACKGROUND_COLOR",
    "DEFAULT_QUIT_SCAN_CODE",
    "RuntimeConfig",
    "RuntimeRenderConfig",
    "RuntimeWindowConfig",
    "get_runtime_config",
    "initialize_runtime_config",
    "load_runtime_config",
]
