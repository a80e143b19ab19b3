"""HTTP request parsing and the WebSocket opening handshake."""

from __future__ import annotations

import base64
import hashlib

WEBSOCKET_GUID = "258EAFA5-E914-47DA-95CA-C5AB0DC85B11"

_BLANKS = " \t"


def _as_text(data: bytes | bytearray | memoryview | str) -> str:
    if isinstance(data, str):
        text = data
    else:
        text = bytes(data).decode("latin-1")
    # The request is read as a C string: anything after a NUL is ignored.
    return text.split("\0", 1)[0]


def parse_http_request(data: bytes | bytearray | memoryview | str) -> dict[str, str]:
    """Parse an HTTP request head into a dict of headers.

    The request line is stored under ``Method``, ``Path`` and ``Version``.
    Header lines are read up to the first blank line; keys and values are
    trimmed of spaces and tabs, and a later header overrides an earlier one.
    Lines without a colon are ignored.
    """
    lines = iter(_as_text(data).split("\n"))
    headers: dict[str, str] = {}

    request_line = next(lines, "")
    if request_line:
        parts = request_line.split()
        method, path, version = (parts + ["", "", ""])[:3]
        headers["Method"] = method
        headers["Path"] = path
        headers["Version"] = version

    for line in lines:
        if not line or line == "\r":
            break
        line = line.removesuffix("\r")
        key, colon, value = line.partition(":")
        if not colon:
            continue
        headers[key.strip(_BLANKS)] = value.strip(_BLANKS)

    return headers


def websocket_accept(client_key: str) -> str:
    """Return the ``Sec-WebSocket-Accept`` value for a client key."""
    digest = hashlib.sha1((client_key + WEBSOCKET_GUID).encode("latin-1")).digest()
    return base64.b64encode(digest).decode("ascii")


def upgrade_response(client_key: str) -> bytes:
    """Build the ``101 Switching Protocols`` reply for a client key."""
    if not client_key:
        raise ValueError("missing Sec-WebSocket-Key")
    return (
        "HTTP/1.1 101 Switching Protocols\r\n"
        "Upgrade: websocket\r\n"
        "Connection: Upgrade\r\n"
        f"Sec-WebSocket-Accept: {websocket_accept(client_key)}\r\n\r\n"
    ).encode("ascii")