"""Per-connection player state: WebSocket upgrade and packet dispatch."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Protocol as _Proto

from .frames import IncompleteFrame, Protocol, make_binary_frame, parse_frame, unpack_packet
from .handshake import parse_http_request, upgrade_response

log = logging.getLogger(__name__)

Reply = tuple[int, bytes]
Handler = Callable[[bytes], "Reply | None"]


class _Sink(_Proto):
    def queue(self, data: bytes) -> None: ...


def _echo_login(body: bytes) -> Reply:
    """Answer a login request with the same credentials."""
    return Protocol.LOGIN_RESPONSE, body


DEFAULT_HANDLERS: Mapping[int, Handler] = {Protocol.LOGIN_REQUEST: _echo_login}


class Player:
    """A player created for each connection.

    The first data must be a WebSocket upgrade request; after the upgrade,
    binary frames are buffered, split into packets and handed to the
    handler registered for their protocol id. A handler returns a
    ``(protocol_id, body)`` reply or None.
    """

    def __init__(self, handlers: Mapping[int, Handler] | None = None) -> None:
        self._handlers = dict(DEFAULT_HANDLERS if handlers is None else handlers)
        self._buffer = bytearray()
        self.upgraded = False

    def receive(self, session: _Sink, data: bytes | bytearray | memoryview) -> None:
        """Handle bytes received from the player's connection."""
        self._buffer += data

        if not self.upgraded:
            key = parse_http_request(data).get("Sec-WebSocket-Key", "")
            if not key:
                return
            session.queue(upgrade_response(key))
            self.upgraded = True
            self._buffer.clear()
            return

        while self._buffer:
            try:
                frame, size = parse_frame(self._buffer)
            except IncompleteFrame:
                log.debug("waiting for the rest of a frame")
                return
            del self._buffer[:size]

            try:
                protocol_id, body = unpack_packet(frame.payload)
            except ValueError as exc:
                log.error("bad packet: %s", exc)
                return

            handler = self._handlers.get(protocol_id)
            if handler is None:
                log.error("unknown protocol: %d", protocol_id)
                continue

            reply = handler(body)
            if reply is not None:
                reply_id, reply_body = reply
                session.queue(make_binary_frame(reply_id, reply_body))