"""Logging pipeline implementation."""

from __future__ import annotations

import logging
import os
import queue
from logging.handlers import QueueHandler, QueueListener
from pathlib import Path

from scenekit.api.logging import EngineLoggingConfig, JsonFormatter

_QUEUE_LISTENER: QueueListener | None = None
_TEXT_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s"


def resolve_log_level_name(default: str = "INFO") -> str:
    """Resolve log level with package-prefixed override."""
    value = os.getenv("SCENEKIT_LOG_LEVEL")
    if value is None:
        value = os.getenv("LOG_LEVEL", default)
    return value.strip().upper() or default


def configure_engine_logging(config: EngineLoggingConfig) -> None:
    """Install console logging, streaming file records through a queue listener."""
    global _QUEUE_LISTENER

    shutdown_engine_logging()
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(getattr(logging, config.level_name.upper(), logging.INFO))

    sinks = _build_sinks(config)
    if len(sinks) == 1:
        root.addHandler(sinks[0])
        return

    records: queue.SimpleQueue[logging.LogRecord] = queue.SimpleQueue()
    root.addHandler(QueueHandler(records))
    _QUEUE_LISTENER = QueueListener(records, *sinks, respect_handler_level=True)
    _QUEUE_LISTENER.start()


def shutdown_engine_logging() -> None:
    """Stop the file streaming listener, flushing queued records."""
    global _QUEUE_LISTENER

    if _QUEUE_LISTENER is not None:
        _QUEUE_LISTENER.stop()
        _QUEUE_LISTENER = None


def setup_engine_logging() -> None:
    """Configure console logging only when the root logger has no handlers yet."""
    if logging.getLogger().handlers:
        return
    configure_engine_logging(EngineLoggingConfig(level_name=resolve_log_level_name(default="INFO")))


def _build_sinks(config: EngineLoggingConfig) -> list[logging.Handler]:
    console = logging.StreamHandler()
    console.set_name("scenekit.console")
    console.setFormatter(_resolve_formatter(config.console_format))
    sinks: list[logging.Handler] = [console]
    if not config.file_path:
        return sinks
    log_path = Path(config.file_path)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    file_sink = logging.FileHandler(log_path, mode="a", encoding="utf-8", delay=True)
    file_sink.set_name("scenekit.file")
    file_sink.setFormatter(_resolve_formatter(config.file_format))
    sinks.append(file_sink)
    return sinks


def _resolve_formatter(kind: str) -> logging.Formatter:
    if kind.strip().lower() == "json":
        return JsonFormatter()
    return logging.Formatter(_TEXT_FORMAT)


__all__ = [
    "configure_engine_logging",
    "resolve_log_level_name",
    "setup_engine_logging",
    "shutdown_engine_logging",
]
