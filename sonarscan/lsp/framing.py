"""Content-Length framing for JSON-RPC messages (LSP base protocol)."""

from __future__ import annotations

import json
import re
from collections.abc import Callable
from typing import Any

from .errors import TransportParseError

HEADER_PATTERN = re.compile(rb"Content-Length: (\d+)\r\n\r\n")


def encode_body(message: dict[str, Any]) -> bytes:
    """Serialize a message to its UTF-8 JSON body."""
    return json.dumps(message, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def encode_frame(message: dict[str, Any]) -> bytes:
    """Encode a message as one frame; the header counts body bytes, not characters."""
    body = encode_body(message)
    return b"Content-Length: %d\r\n\r\n" % len(body) + body


def decode_body(body: bytes) -> dict[str, Any]:
    """Decode one frame body, raising TransportParseError when it is not a JSON object."""
    try:
        message = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise TransportParseError(f"invalid frame body: {exc}", body) from exc
    if not isinstance(message, dict):
        raise TransportParseError(f"frame body is {type(message).__name__}, expected object", body)
    return message


class FrameDecoder:
    """Incremental decoder that tolerates frames split across reads.

    Bytes are buffered until a header and its full body are present; an
    incomplete frame stays in the buffer for the next ``feed`` call.
    """

    def __init__(self, on_error: Callable[[TransportParseError], None] | None = None):
        self._buffer = bytearray()
        self._on_error = on_error

    @property
    def pending_bytes(self) -> int:
        return len(self._buffer)

    def feed(self, chunk: bytes) -> list[dict[str, Any]]:
        """Append a chunk and return every message completed by it."""
        self._buffer.extend(chunk)
        messages: list[dict[str, Any]] = []
        while True:
            match = HEADER_PATTERN.search(self._buffer)
            if match is None:
                break
            length = int(match.group(1))
            start = match.end()
            if len(self._buffer) < start + length:
                break
            body = bytes(self._buffer[start:start + length])
            del self._buffer[:start + length]
            try:
                messages.append(decode_body(body))
            except TransportParseError as exc:
                if self._on_error is not None:
                    self._on_error(exc)
        return messages

    def reset(self) -> None:
        self._buffer.clear()
