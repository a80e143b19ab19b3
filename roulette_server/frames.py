"""WebSocket frame parsing and the game's binary packet format."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass

_HEADER = struct.Struct("<II")


class Protocol(enum.IntEnum):
    """Packet identifiers carried inside binary frames."""

    LOGIN_REQUEST = 1
    BET_REQUEST = 2
    LOGIN_RESPONSE = 1001


class IncompleteFrame(ValueError):
    """Raised when the buffer does not yet hold a whole frame."""


@dataclass(frozen=True)
class WSFrame:
    """A decoded WebSocket frame with its payload already unmasked."""

    fin: bool
    opcode: int
    payload: bytes


def parse_frame(data: bytes | bytearray | memoryview) -> tuple[WSFrame, int]:
    """Decode the frame at the start of ``data``.

    Returns the frame and the number of bytes it occupies. Raises
    :class:`IncompleteFrame` if more data is needed.
    """
    data = bytes(data)
    if len(data) < 2:
        raise IncompleteFrame("frame header needs 2 bytes")

    b0, b1 = data[0], data[1]
    fin = bool(b0 & 0x80)
    opcode = b0 & 0x0F
    masked = bool(b1 & 0x80)
    length = b1 & 0x7F
    pos = 2

    if length == 126:
        if len(data) < pos + 2:
            raise IncompleteFrame("extended length needs 2 bytes")
        length = int.from_bytes(data[pos:pos + 2], "big")
        pos += 2
    elif length == 127:
        if len(data) < pos + 8:
            raise IncompleteFrame("extended length needs 8 bytes")
        length = int.from_bytes(data[pos:pos + 8], "big")
        pos += 8

    mask_key = b""
    if masked:
        if len(data) < pos + 4:
            raise IncompleteFrame("mask key needs 4 bytes")
        mask_key = data[pos:pos + 4]
        pos += 4

    if len(data) < pos + length:
        raise IncompleteFrame("payload is not complete")

    payload = data[pos:pos + length]
    if masked:
        payload = bytes(b ^ mask_key[i % 4] for i, b in enumerate(payload))

    return WSFrame(fin=fin, opcode=opcode, payload=payload), pos + length


def make_binary_frame(protocol_id: int, proto_data: bytes) -> bytes:
    """Wrap a packet in an unmasked, final binary WebSocket frame.

    The packet is a little-endian length (id plus body), the
    little-endian protocol id, and the body.
    """
    packet = _HEADER.pack(len(proto_data) + 4, int(protocol_id)) + bytes(proto_data)
    size = len(packet)

    header = bytearray([0x82])
    if size <= 125:
        header.append(size)
    elif size <= 0xFFFF:
        header.append(126)
        header += size.to_bytes(2, "big")
    else:
        header.append(127)
        header += size.to_bytes(8, "big")

    return bytes(header) + packet


def unpack_packet(payload: bytes | bytearray | memoryview) -> tuple[int, bytes]:
    """Split a frame payload into its protocol id and body.

    Raises ValueError if the payload is too short or its length field
    does not match.
    """
    payload = bytes(payload)
    if len(payload) < _HEADER.size:
        raise ValueError("packet is shorter than its header")
    packet_len, protocol_id = _HEADER.unpack_from(payload)
    if packet_len + 4 != len(payload):
        raise ValueError("packet length mismatch")
    return protocol_id, payload[_HEADER.size:]