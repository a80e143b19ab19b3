"""A connected client socket with its outgoing buffer."""

from __future__ import annotations

import logging
import socket

RECV_CHUNK_SIZE = 1024

log = logging.getLogger(__name__)


class ClientSession:
    """One client connection: reads what arrived and queues what to send."""

    def __init__(self, sock: socket.socket) -> None:
        self._sock = sock
        self._outgoing = bytearray()
        self.needs_close = False

    @property
    def socket(self) -> socket.socket:
        """The underlying socket."""
        return self._sock

    @property
    def pending(self) -> bytes:
        """Bytes queued and not yet sent."""
        return bytes(self._outgoing)

    def fileno(self) -> int:
        """Return the socket's file descriptor."""
        return self._sock.fileno()

    def queue(self, data: bytes | bytearray | memoryview) -> None:
        """Append data to the outgoing buffer."""
        self._outgoing += data

    def clear(self) -> None:
        """Drop everything in the outgoing buffer."""
        self._outgoing.clear()

    def receive(self) -> bytes:
        """Read everything the socket has ready.

        Reads in chunks until one comes back short. Returns ``b""`` when
        the peer has closed the connection. Socket errors are raised,
        except that a would-block after some data has arrived ends the read.
        """
        received = bytearray()
        while True:
            try:
                chunk = self._sock.recv(RECV_CHUNK_SIZE)
            except BlockingIOError:
                if received:
                    break
                raise
            if not chunk:
                return b""
            received += chunk
            if len(chunk) < RECV_CHUNK_SIZE:
                break
        return bytes(received)

    def flush(self) -> int:
        """Send the outgoing buffer and clear it; return the bytes sent."""
        if not self._outgoing:
            return 0
        sent = self._sock.send(self._outgoing)
        log.debug("sent %d bytes", sent)
        self.clear()
        return sent

    def close(self) -> None:
        """Close the socket."""
        self._sock.close()