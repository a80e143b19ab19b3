import socket
import struct

import pytest

from roulette_server.frames import Protocol, make_binary_frame
from roulette_server.handshake import upgrade_response
from roulette_server.player import Player
from roulette_server.session import ClientSession

KEY = "dGhlIHNhbXBsZSBub25jZQ=="
REQUEST = (
    "GET /chat HTTP/1.1\r\n"
    "Host: localhost\r\n"
    "Upgrade: websocket\r\n"
    "Connection: Upgrade\r\n"
    f"Sec-WebSocket-Key: {KEY}\r\n"
    "\r\n"
).encode("ascii")
MASK = b"\x01\x02\x03\x04"


@pytest.fixture
def session():
    left, right = socket.socketpair()
    yield ClientSession(left)
    left.close()
    right.close()


def client_frame(protocol_id, body):
    payload = struct.pack("<II", len(body) + 4, protocol_id) + body
    masked = bytes(b ^ MASK[i % 4] for i, b in enumerate(payload))
    return bytes([0x82, 0x80 | len(payload)]) + MASK + masked


def upgraded(session, handlers=None):
    player = Player(handlers)
    player.receive(session, REQUEST)
    session.clear()
    return player


def test_handshake_queues_upgrade_response(session):
    player = Player()
    player.receive(session, REQUEST)
    assert player.upgraded
    assert session.pending == upgrade_response(KEY)
    assert b"s3pPLMBiTxaQ9kYGzzhZRbK+xOo=" in session.pending


def test_request_without_key_is_ignored(session):
    player = Player()
    player.receive(session, b"GET / HTTP/1.1\r\nHost: localhost\r\n\r\n")
    assert not player.upgraded
    assert session.pending == b""
    player.receive(session, REQUEST)
    assert player.upgraded


def test_login_request_is_echoed(session):
    player = upgraded(session)
    body = b"\x0a\x04user\x12\x08password"
    player.receive(session, client_frame(Protocol.LOGIN_REQUEST, body))
    assert session.pending == make_binary_frame(Protocol.LOGIN_RESPONSE, body)


def test_frame_split_across_reads(session):
    player = upgraded(session)
    frame = client_frame(Protocol.LOGIN_REQUEST, b"abc")
    player.receive(session, frame[:5])
    assert session.pending == b""
    player.receive(session, frame[5:])
    assert session.pending == make_binary_frame(Protocol.LOGIN_RESPONSE, b"abc")


def test_two_frames_in_one_read(session):
    player = upgraded(session)
    data = client_frame(Protocol.LOGIN_REQUEST, b"a") + client_frame(Protocol.LOGIN_REQUEST, b"b")
    player.receive(session, data)
    expected = make_binary_frame(Protocol.LOGIN_RESPONSE, b"a") + make_binary_frame(
        Protocol.LOGIN_RESPONSE, b"b"
    )
    assert session.pending == expected


def test_unknown_protocol_sends_nothing(session):
    player = upgraded(session)
    player.receive(session, client_frame(Protocol.BET_REQUEST, b"x"))
    assert session.pending == b""


def test_length_mismatch_sends_nothing(session):
    player = upgraded(session)
    payload = struct.pack("<II", 99, Protocol.LOGIN_REQUEST) + b"x"
    frame = bytes([0x82, len(payload)]) + payload
    player.receive(session, frame)
    assert session.pending == b""


def test_custom_handler(session):
    seen = []

    def on_bet(body):
        seen.append(body)
        return Protocol.LOGIN_RESPONSE, body[::-1]

    player = upgraded(session, {Protocol.BET_REQUEST: on_bet})
    player.receive(session, client_frame(Protocol.BET_REQUEST, b"red"))
    assert seen == [b"red"]
    assert session.pending == make_binary_frame(Protocol.LOGIN_RESPONSE, b"der")


def test_handler_returning_none_sends_nothing(session):
    player = upgraded(session, {Protocol.BET_REQUEST: lambda body: None})
    player.receive(session, client_frame(Protocol.BET_REQUEST, b"red"))
    assert session.pending == b""