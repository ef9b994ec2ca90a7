"""Editing-engine subprocess transport."""

from scenekit.bridge.subprocess_bridge import (
    CoreProcess,
    read_response,
    run_handshake,
    send_request,
    start,
)

__all__ = ["CoreProcess", "read_response", "run_handshake", "send_request", "start"]
