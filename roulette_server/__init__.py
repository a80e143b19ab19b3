"""WebSocket game server: handshake, frames, sessions, players and the TCP server."""

__version__ = "0.1.0"