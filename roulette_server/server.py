"""A small TCP server that hands client data to callbacks."""

from __future__ import annotations

import logging
import select
import socket
import threading
from collections.abc import Callable

from .session import ClientSession

SELECT_TIMEOUT = 0.01

log = logging.getLogger(__name__)

SessionCallback = Callable[[ClientSession], None]
ReceiveCallback = Callable[[ClientSession, bytes], None]


class FlameServer:
    """Accepts TCP clients and services them from background threads.

    In the default mode one thread multiplexes the listening socket and every
    client with ``select``. With ``blocking=True`` one thread accepts clients
    and each client gets its own thread. Received data goes to ``on_receive``;
    anything a callback queues on the session is sent afterwards. A session
    whose ``needs_close`` is set is closed and reported to ``on_disconnect``.
    """

    def __init__(
        self,
        *,
        family: int = socket.AF_INET,
        socktype: int = socket.SOCK_STREAM,
        proto: int = 0,
        on_connect: SessionCallback | None = None,
        on_receive: ReceiveCallback | None = None,
        on_disconnect: SessionCallback | None = None,
        blocking: bool = False,
        select_timeout: float = SELECT_TIMEOUT,
    ) -> None:
        self.family = family
        self.socktype = socktype
        self.proto = proto
        self.on_connect = on_connect
        self.on_receive = on_receive
        self.on_disconnect = on_disconnect
        self.blocking = blocking
        self.select_timeout = select_timeout
        self.address: tuple | None = None
        self._sock: socket.socket | None = None
        self._stop = threading.Event()
        self._listener: threading.Thread | None = None
        self._session_threads: list[threading.Thread] = []
        self._sessions: list[ClientSession] = []

    def __enter__(self) -> FlameServer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.wait_shutdown()

    def start(self, port: int) -> None:
        """Bind to ``port`` on all interfaces and start serving.

        Raises OSError if the socket cannot be created or bound, and
        RuntimeError if the server is already running.
        """
        if self._sock is not None:
            raise RuntimeError("server already started")
        sock = socket.socket(self.family, self.socktype, self.proto)
        try:
            sock.bind(("", port))
            sock.listen()
            sock.setblocking(False)
        except OSError:
            sock.close()
            raise
        self._sock = sock
        self.address = sock.getsockname()
        self._stop.clear()
        target = self._accept_loop if self.blocking else self._select_loop
        self._listener = threading.Thread(target=target, name="flame-listener", daemon=True)
        self._listener.start()

    def wait_shutdown(self) -> None:
        """Stop serving, wait for the worker threads and close every socket."""
        if self._sock is None:
            return
        self._stop.set()
        if self._listener is not None:
            self._listener.join()
            self._listener = None
        for thread in self._session_threads:
            thread.join()
        self._session_threads.clear()
        for session in self._sessions:
            self._drop(session)
        self._sessions.clear()
        self._sock.close()
        self._sock = None

    def make_session(self, sock: socket.socket) -> ClientSession:
        """Wrap an accepted socket; override to use another session type."""
        return ClientSession(sock)

    def _handle_connect(self, session: ClientSession) -> None:
        if self.on_connect is not None:
            self.on_connect(session)

    def _handle_receive(self, session: ClientSession, data: bytes) -> None:
        if self.on_receive is not None:
            self.on_receive(session, data)

    def _handle_disconnect(self, session: ClientSession) -> None:
        if self.on_disconnect is not None:
            self.on_disconnect(session)

    def _drop(self, session: ClientSession) -> None:
        session.close()
        self._handle_disconnect(session)

    def _accept(self) -> ClientSession | None:
        assert self._sock is not None
        try:
            conn, _ = self._sock.accept()
        except BlockingIOError:
            return None
        conn.setblocking(False)
        log.info("accepted a connection")
        session = self.make_session(conn)
        self._handle_connect(session)
        return session

    def _read(self, session: ClientSession) -> bool:
        """Read from a session; return False once the peer is gone."""
        try:
            data = session.receive()
        except BlockingIOError:
            return True
        except OSError as exc:
            log.error("socket receive error: %s", exc)
            return False
        if not data:
            return False
        self._handle_receive(session, data)
        return True

    def _write(self, session: ClientSession) -> bool:
        if not session.pending:
            return True
        try:
            session.flush()
        except BlockingIOError:
            pass
        except OSError as exc:
            log.error("socket send error: %s", exc)
            return False
        return True

    def _select_loop(self) -> None:
        while not self._stop.is_set():
            writers = [s for s in self._sessions if s.pending]
            try:
                readable, writable, _ = select.select(
                    [self._sock, *self._sessions], writers, [], self.select_timeout
                )
            except (OSError, ValueError) as exc:
                log.error("select failed: %s", exc)
                return
            if not readable and not writable:
                continue
            if self._sock in readable:
                try:
                    session = self._accept()
                except OSError as exc:
                    log.error("accept failed: %s", exc)
                    return
                if session is not None:
                    self._sessions.append(session)
                continue
            for session in list(self._sessions):
                alive = True
                if session in readable:
                    alive = self._read(session)
                if alive:
                    alive = self._write(session)
                if not alive or session.needs_close:
                    self._sessions.remove(session)
                    self._drop(session)

    def _accept_loop(self) -> None:
        while not self._stop.is_set():
            try:
                readable, _, _ = select.select([self._sock], [], [], self.select_timeout)
            except (OSError, ValueError) as exc:
                log.error("select failed: %s", exc)
                return
            if not readable:
                continue
            try:
                session = self._accept()
            except OSError as exc:
                log.error("accept failed: %s", exc)
                return
            if session is None:
                continue
            thread = threading.Thread(
                target=self._session_loop, args=(session,), name="flame-session", daemon=True
            )
            self._session_threads.append(thread)
            thread.start()

    def _session_loop(self, session: ClientSession) -> None:
        try:
            while not self._stop.is_set():
                writers = [session] if session.pending else []
                readable, _, _ = select.select([session], writers, [], self.select_timeout)
                if readable and not self._read(session):
                    break
                if not self._write(session) or session.needs_close:
                    break
        finally:
            self._drop(session)