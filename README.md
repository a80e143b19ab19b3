# roulette-server

A small game server that roulette clients reach over WebSocket.

A client opens a TCP connection and sends an HTTP upgrade request. The
server answers with `101 Switching Protocols`. After that, the client sends
binary WebSocket frames. The payload of each frame is a packet made of:

- a 4-byte little-endian length, which counts the protocol id and the body,
- a 4-byte little-endian protocol id,
- the message body.

By default the server answers login requests (`Protocol.LOGIN_REQUEST`,
id 1). The reply is a `Protocol.LOGIN_RESPONSE` (id 1001) that holds the
request body, returned unchanged. The server logs a packet with an unknown
protocol id and goes on to the next one. A packet whose length field does
not match its frame ends processing of the current data.

## Installing

```
pip install .
```

The package uses only the Python standard library. It needs Python 3.10 or
later.

## Running the server

```
roulette-server
```

Options:

- `--port PORT`: the port to listen on, on all interfaces. The default is
  8888.
- `--block`: give each client its own thread. Without this option, one
  thread serves all clients with `select`.

The server prints `Enter 0 to exit.` and runs until a line that contains
`0` is read from standard input. It also stops when standard input ends.

## Using the pieces

- `roulette_server.handshake`
  - `parse_http_request(data)` returns a dict with the keys `Method`,
    `Path` and `Version`, and one key for each header line before the
    first blank line.
  - `websocket_accept(client_key)` computes the `Sec-WebSocket-Accept`
    value for a `Sec-WebSocket-Key`.
  - `upgrade_response(client_key)` builds the whole `101` reply as bytes.
    It raises `ValueError` if the key is empty.
- `roulette_server.frames`
  - `parse_frame(data)` decodes the frame at the start of `data` and
    returns a `(WSFrame, size)` pair. The payload comes back unmasked. It
    raises `IncompleteFrame` (a `ValueError`) while the frame is not yet
    complete.
  - `make_binary_frame(protocol_id, proto_data)` wraps a body in a packet
    and in a final, unmasked binary frame.
  - `unpack_packet(payload)` splits a payload into `(protocol_id, body)`.
    It raises `ValueError` if the payload is too short or its length field
    is wrong.
  - `Protocol` is an `IntEnum` with `LOGIN_REQUEST`, `BET_REQUEST` and
    `LOGIN_RESPONSE`.
- `roulette_server.session.ClientSession` wraps one client socket.
  - `receive()` reads what has arrived.
  - `queue(data)` adds bytes to the outgoing buffer. `pending` shows what
    is buffered, and `clear()` empties the buffer.
  - `flush()` sends the buffer.
  - `close()` closes the socket.
  - Setting `needs_close` makes the server drop the session.
- `roulette_server.player.Player(handlers=None)` holds the state of one
  connection: first the handshake, then the buffered frames. `handlers`
  maps protocol ids to functions. Each function takes the body and returns
  a `(protocol_id, body)` reply, or `None`.
- `roulette_server.server.FlameServer` accepts TCP clients. It passes
  events to the callbacks `on_connect`, `on_receive` and `on_disconnect`,
  and sends whatever the callbacks queue. `start(port)` begins serving.
  `wait_shutdown()` stops the server and closes every socket. The server
  can also be used as a context manager. Override `make_session(sock)` to
  use your own session class.
- `roulette_server.app.PlayerRegistry` keeps one `Player` for each
  connected session and passes received data to it.

## What it does not do

- There is no roulette game logic. Bet requests (id 2) have no handler, so
  the server logs them as unknown.
- Message bodies are not decoded. A login reply returns the request bytes
  as they arrived.
- Every frame after the handshake is treated as a packet. Close, ping and
  pong frames get no special handling.
- Nothing is stored between runs.

## Tests

```
pip install ".[test]"
pytest
```