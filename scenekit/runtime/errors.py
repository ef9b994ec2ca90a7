"""Shared exception taxonomy and runtime exception policy helpers."""

from __future__ import annotations

import logging
from typing import TypeAlias

# Explicitly bounded fallback set for window/backend compatibility paths.
RecoverableRuntimeErrors: TypeAlias = tuple[type[BaseException], ...]
RECOVERABLE_RUNTIME_ERRORS: RecoverableRuntimeErrors = (
    RuntimeError,
    OSError,
    ValueError,
    TypeError,
    AttributeError,
)


class FatalStartupError(RuntimeError):
    """Unrecoverable failure before the event loop becomes interactive."""

    def __init__(self, message: str, *, details: dict[str, object] | None = None) -> None:
        super().__init__(message)
        self.details = dict(details or {})


class FontLoadError(FatalStartupError):
    """Font file unreadable, missing or not parseable."""


class WindowInitError(FatalStartupError):
    """Window or drawing surface could not be created."""


class BackendInitError(FatalStartupError):
    """GPU adapter, device or pipeline setup failed."""


class BridgeError(FatalStartupError):
    """Editing-engine child could not be spawned or the handshake failed."""


class SceneBuildError(ValueError):
    """Display list constructed out of order (unbalanced or unregistered state)."""


def log_recoverable(
    logger: logging.Logger,
    message: str,
    *,
    level: int = logging.DEBUG,
) -> None:
    """Emit structured observability for tolerated recoverable exceptions."""
    logger.log(level, message, exc_info=True)


__all__ = [
    "BackendInitError",
    "BridgeError",
    "FatalStartupError",
    "FontLoadError",
    "RECOVERABLE_RUNTIME_ERRORS",
    "SceneBuildError",
    "WindowInitError",
    "log_recoverable",
]
