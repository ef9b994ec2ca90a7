"""Fast JSON codec helpers for log records and the line protocol."""

from __future__ import annotations

from typing import Any

import orjson


def dumps_bytes(
    payload: Any,
    *,
    pretty: bool = False,
    sort_keys: bool = False,
    append_newline: bool = False,
) -> bytes:
    """Serialize payload to UTF-8 JSON bytes."""
    options = 0
    if pretty:
        options |= orjson.OPT_INDENT_2
    if sort_keys:
        options |= orjson.OPT_SORT_KEYS
    if append_newline:
        # Line-oriented writers rely on exactly one trailing newline.
        options |= orjson.OPT_APPEND_NEWLINE
    return bytes(orjson.dumps(payload, option=options))


def dumps_text(
    payload: Any,
    *,
    pretty: bool = False,
    sort_keys: bool = False,
) -> str:
    return dumps_bytes(payload, pretty=pretty, sort_keys=sort_keys).decode("utf-8")


def loads(raw: bytes | str) -> Any:
    """Parse one JSON document."""
    return orjson.loads(raw)


__all__ = ["dumps_bytes", "dumps_text", "loads"]
