"""The roulette server: one player per connection on top of FlameServer."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable

from .player import Player
from .server import FlameServer
from .session import ClientSession

DEFAULT_PORT = 8888

log = logging.getLogger(__name__)


class PlayerRegistry:
    """Keeps a player for every connected session and routes data to it."""

    def __init__(self, player_factory: Callable[[], Player] = Player) -> None:
        self._player_factory = player_factory
        self._players: dict[object, Player] = {}

    def __len__(self) -> int:
        return len(self._players)

    def __contains__(self, session: object) -> bool:
        return session in self._players

    def connect(self, session: ClientSession) -> None:
        """Create a player for a new session; an existing one is kept."""
        if session not in self._players:
            self._players[session] = self._player_factory()

    def receive(self, session: ClientSession, data: bytes) -> None:
        """Hand received data to the session's player, if it has one."""
        player = self._players.get(session)
        if player is None:
            return
        log.debug("received %r", bytes(data))
        player.receive(session, data)

    def disconnect(self, session: ClientSession) -> None:
        """Forget the session's player."""
        self._players.pop(session, None)


def _wait_for_exit(stream) -> None:
    for line in stream:
        if "0" in line.split():
            return


def main(argv: list[str] | None = None) -> int:
    """Run the server until ``0`` is entered on standard input."""
    parser = argparse.ArgumentParser(prog="roulette-server", description="Run the roulette server.")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="port to listen on")
    parser.add_argument("--block", action="store_true", help="serve each client on its own thread")
    args = parser.parse_args(argv)

    registry = PlayerRegistry()
    server = FlameServer(
        on_connect=registry.connect,
        on_receive=registry.receive,
        on_disconnect=registry.disconnect,
        blocking=args.block,
    )
    server.start(args.port)
    print("Enter 0 to exit.", flush=True)
    try:
        _wait_for_exit(sys.stdin)
    finally:
        server.wait_shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(main())