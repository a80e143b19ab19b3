import socket

import pytest

from roulette_server.session import RECV_CHUNK_SIZE, ClientSession


@pytest.fixture
def pair():
    left, right = socket.socketpair()
    yield left, right
    left.close()
    right.close()


def test_fileno_matches_socket(pair):
    left, _ = pair
    assert ClientSession(left).fileno() == left.fileno()


def test_queue_accumulates(pair):
    session = ClientSession(pair[0])
    session.queue(b"abc")
    session.queue(bytearray(b"def"))
    assert session.pending == b"abcdef"


def test_clear_empties_buffer(pair):
    session = ClientSession(pair[0])
    session.queue(b"abc")
    session.clear()
    assert session.pending == b""


def test_flush_sends_and_clears(pair):
    left, right = pair
    session = ClientSession(left)
    session.queue(b"hello")
    assert session.flush() == 5
    assert session.pending == b""
    assert right.recv(100) == b"hello"


def test_flush_with_nothing_queued(pair):
    session = ClientSession(pair[0])
    assert session.flush() == 0


def test_receive_small_message(pair):
    left, right = pair
    right.sendall(b"ping")
    assert ClientSession(left).receive() == b"ping"


def test_receive_spans_several_chunks(pair):
    left, right = pair
    data = bytes(range(256)) * 6
    right.sendall(data)
    left.setblocking(False)
    assert ClientSession(left).receive() == data


def test_receive_exact_chunk_multiple_nonblocking(pair):
    left, right = pair
    data = b"x" * (RECV_CHUNK_SIZE * 2)
    right.sendall(data)
    left.setblocking(False)
    assert ClientSession(left).receive() == data


def test_receive_nothing_ready_raises(pair):
    left, _ = pair
    left.setblocking(False)
    with pytest.raises(BlockingIOError):
        ClientSession(left).receive()


def test_receive_after_peer_closed(pair):
    left, right = pair
    right.close()
    assert ClientSession(left).receive() == b""


def test_close_closes_socket(pair):
    left, _ = pair
    session = ClientSession(left)
    session.close()
    assert left.fileno() == -1


def test_needs_close_starts_false(pair):
    session = ClientSession(pair[0])
    assert session.needs_close is False