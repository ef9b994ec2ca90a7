"""Newline-delimited JSON request/response bridge to an editing-engine child process.

Requests are single JSON objects ``{"id", "method", "params"}`` terminated by
one ``\\n``. Responses are read as whole lines, strictly in FIFO order; the
bridge performs no correlation by id. Every failure is a ``BridgeError`` and
is fatal at startup.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import BinaryIO

from scenekit.diagnostics.json_codec import dumps_bytes
from scenekit.runtime.errors import BridgeError

_LOG = logging.getLogger("scenekit.bridge")

NEW_TAB_METHOD = "new_tab"
EDIT_METHOD = "edit"
OPEN_METHOD = "open"


@dataclass(frozen=True, slots=True)
class CoreProcess:
    """Spawned child with its unbuffered stdin writer and stdout reader."""

    writer: BinaryIO
    reader: BinaryIO
    process: subprocess.Popen[bytes]

    @property
    def pid(self) -> int:
        return int(self.process.pid)


def start(executable: str, *args: str) -> CoreProcess:
    """Spawn the child with piped stdin/stdout; stderr is inherited."""
    command = [executable, *args]
    try:
        process = subprocess.Popen(
            command,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=None,
            bufsize=0,
        )
    except OSError as exc:
        raise BridgeError(
            "editing engine spawn failed",
            details={
                "command": command,
                "exception_type": exc.__class__.__name__,
                "exception_message": str(exc),
            },
        ) from exc
    if process.stdin is None or process.stdout is None:
        process.kill()
        raise BridgeError("editing engine pipes unavailable", details={"command": command})
    _LOG.info("core_spawned command=%s pid=%d", " ".join(command), process.pid)
    return CoreProcess(writer=process.stdin, reader=process.stdout, process=process)


def encode_request(request_id: int, method: str, params: object) -> bytes:
    """Serialize one request as a single newline-terminated JSON line."""
    return dumps_bytes({"id": int(request_id), "method": str(method), "params": params}, append_newline=True)


def send_request(writer: BinaryIO, request_id: int, method: str, params: object) -> None:
    line = encode_request(request_id, method, params)
    view = memoryview(line)
    written = 0
    try:
        while written < len(view):
            count = writer.write(view[written:])
            if count is None:
                raise BlockingIOError("pipe write would block")
            written += int(count)
        writer.flush()
    except (OSError, ValueError) as exc:
        raise BridgeError(
            "request write failed",
            details={
                "id": int(request_id),
                "method": method,
                "written": written,
                "exception_message": str(exc),
            },
        ) from exc
    _LOG.debug("request_sent id=%d method=%s bytes=%d", request_id, method, len(line))


def read_response(reader: BinaryIO) -> str:
    """Block until one full line arrives; return it without the newline.

    Readers opened unbuffered consume the pipe byte by byte here, so nothing
    after the newline is taken from the child's output.
    """
    try:
        raw = reader.readline()
    except (OSError, ValueError) as exc:
        raise BridgeError("response read failed", details={"exception_message": str(exc)}) from exc
    if not raw:
        raise BridgeError("editing engine closed its output", details={})
    if not raw.endswith(b"\n"):
        raise BridgeError(
            "editing engine output ended mid-line",
            details={"partial_bytes": len(raw)},
        )
    try:
        return raw[:-1].decode("utf-8")
    except UnicodeDecodeError as exc:
        raise BridgeError("response is not valid UTF-8", details={"bytes": len(raw)}) from exc


def run_handshake(core: CoreProcess, file_path: str, *, tab: str = "0") -> tuple[str, str]:
    """Open a tab, open a file in it, then read the two responses in order."""
    send_request(core.writer, 0, NEW_TAB_METHOD, [])
    send_request(
        core.writer,
        1,
        EDIT_METHOD,
        {"method": OPEN_METHOD, "tab": tab, "params": {"filename": file_path}},
    )
    first = read_response(core.reader)
    _LOG.info("core_response index=0 line=%s", first)
    second = read_response(core.reader)
    _LOG.info("core_response index=1 line=%s", second)
    return (first, second)


__all__ = [
    "CoreProcess",
    "EDIT_METHOD",
    "NEW_TAB_METHOD",
    "OPEN_METHOD",
    "encode_request",
    "read_response",
    "run_handshake",
    "send_request",
    "start",
]
