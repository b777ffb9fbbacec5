"""Tests for the one-shot TCP transport."""

import socket
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock, patch

import pytest

from fake_device import FakeDevice
from hs100_mcp.client import execute
from hs100_mcp.errors import FrameError, ProtocolError, TransportError
from hs100_mcp.protocol.cipher import encrypt
from hs100_mcp.protocol.framing import build_frame
from hs100_mcp.transport.tcp_connection import DEFAULT_PORT, TCPConnection, round_trip

REQUEST = b'{"system":{"get_sysinfo":{}}}'
REPLY = '{"system":{"get_sysinfo":{"err_code":0,"alias":"Desk"}}}'


def _unused_port() -> int:
    s = socket.socket()
    s.bind(("127.0.0.1", 0))
    port = s.getsockname()[1]
    s.close()
    return port


def test_default_port():
    """Devices listen on port 9999."""
    assert DEFAULT_PORT == 9999


def test_round_trip():
    """The device sees the plaintext request and we get the plaintext reply."""
    with FakeDevice(REPLY) as device:
        reply = round_trip("127.0.0.1", REQUEST, timeout=5, port=device.port)
    assert reply == REPLY.encode("utf-8")
    assert device.request == REQUEST


def test_unreachable_raises_transport_error():
    """A refused connection is reported as a connect-phase TransportError."""
    with pytest.raises(TransportError) as excinfo:
        round_trip("127.0.0.1", REQUEST, timeout=2, port=_unused_port())
    assert excinfo.value.phase == "connect"


def test_peer_closes_without_reply():
    """A peer that hangs up mid-exchange yields a FrameError."""
    with FakeDevice(None) as device:
        with pytest.raises(FrameError):
            round_trip("127.0.0.1", REQUEST, timeout=5, port=device.port)


def test_truncated_reply():
    """A reply shorter than its declared length is a protocol error."""
    truncated = build_frame(encrypt(REPLY.encode()))[:-5]
    with FakeDevice(truncated) as device:
        with pytest.raises(ProtocolError):
            round_trip("127.0.0.1", REQUEST, timeout=5, port=device.port)


def test_oversized_reply_rejected():
    """A declared length above the limit fails before reading the payload."""
    header = (64).to_bytes(4, "big") + b"x" * 64
    with FakeDevice(header) as device:
        with pytest.raises(FrameError):
            round_trip("127.0.0.1", REQUEST, timeout=5, port=device.port, max_frame_size=32)


def test_read_timeout():
    """A silent device times out in the read phase."""
    with FakeDevice(b"") as device:
        with pytest.raises(TransportError) as excinfo:
            round_trip("127.0.0.1", REQUEST, timeout=0.3, port=device.port)
    assert excinfo.value.phase == "read"


def test_connection_closed_on_error():
    """The socket is closed even when the exchange fails."""
    sock = MagicMock()
    sock.recv.return_value = b""
    with patch("socket.create_connection", return_value=sock):
        with pytest.raises(FrameError):
            round_trip("10.0.0.2", REQUEST)
    sock.sendall.assert_called_once_with(build_frame(encrypt(REQUEST)))
    sock.close.assert_called_once()


def test_short_write_raises():
    """A failed write is reported as a write-phase TransportError."""
    sock = MagicMock()
    sock.sendall.side_effect = BrokenPipeError("peer gone")
    with patch("socket.create_connection", return_value=sock):
        with pytest.raises(TransportError) as excinfo:
            round_trip("10.0.0.2", REQUEST)
    assert excinfo.value.phase == "write"
    sock.close.assert_called_once()


def test_connect_timeout():
    """A connect timeout is reported as a TransportError."""
    with patch("socket.create_connection", side_effect=socket.timeout("timed out")):
        with pytest.raises(TransportError, match="Timed out"):
            round_trip("10.0.0.2", REQUEST, timeout=0.1)


def test_context_manager_closes():
    """Leaving the with block closes the connection."""
    sock = MagicMock()
    with patch("socket.create_connection", return_value=sock):
        with TCPConnection("10.0.0.2") as conn:
            assert conn.connected
        assert not conn.connected
    sock.close.assert_called_once()


def test_write_without_open():
    """Writing before opening is refused."""
    conn = TCPConnection("10.0.0.2")
    with pytest.raises(TransportError):
        conn.write(b"x")


def test_transport_error_is_connection_error():
    """TransportError can be caught as the builtin ConnectionError."""
    assert issubclass(TransportError, ConnectionError)


def test_slow_peer_bounded_by_timeout():
    """The timeout caps the whole read even when bytes keep arriving."""
    reply = '{"system":{"get_sysinfo":{"err_code":0,"alias":"' + "x" * 100 + '"}}}'
    with FakeDevice(reply, trickle=0.1) as device:
        start = time.monotonic()
        with pytest.raises(TransportError) as excinfo:
            round_trip("127.0.0.1", REQUEST, timeout=0.5, port=device.port)
        elapsed = time.monotonic() - start
    assert excinfo.value.phase == "read"
    assert elapsed < 2


def test_slow_peer_within_timeout():
    """A reply that trickles in before the deadline still succeeds."""
    reply = '{"system":{"reboot":{"err_code":0}}}'
    with FakeDevice(reply, trickle=0.01) as device:
        assert round_trip("127.0.0.1", REQUEST, timeout=5, port=device.port) == reply.encode()


def test_read_timeout_closes_connection():
    """A read timeout still releases the socket."""
    sock = MagicMock()
    sock.recv.side_effect = socket.timeout("timed out")
    with patch("socket.create_connection", return_value=sock):
        with pytest.raises(TransportError) as excinfo:
            round_trip("10.0.0.2", REQUEST, timeout=1)
    assert excinfo.value.phase == "read"
    sock.close.assert_called_once()


def test_concurrent_calls_are_independent():
    """Parallel calls to different devices each get their own socket and reply."""
    real_create_connection = socket.create_connection
    opened = []
    lock = threading.Lock()

    def tracking_create_connection(*args, **kwargs):
        sock = real_create_connection(*args, **kwargs)
        with lock:
            opened.append(sock)
        return sock

    replies = {
        "a": '{"system":{"set_dev_alias":{"err_code":0,"who":"a"}}}',
        "b": '{"system":{"set_dev_alias":{"err_code":0,"who":"b"}}}',
    }
    with FakeDevice(replies["a"]) as dev_a, FakeDevice(replies["b"]) as dev_b:
        ports = {"a": dev_a.port, "b": dev_b.port}
        with patch("socket.create_connection", side_effect=tracking_create_connection):
            with ThreadPoolExecutor(max_workers=2) as pool:
                futures = {
                    name: pool.submit(
                        execute, "127.0.0.1", "system", "set_dev_alias",
                        {"alias": name}, 5, ports[name],
                    )
                    for name in ("a", "b")
                }
                docs = {name: f.result() for name, f in futures.items()}

    for name in ("a", "b"):
        assert docs[name].system.set_dev_alias.extra == {"who": name}
    assert b'"alias":"a"' in dev_a.request
    assert b'"alias":"b"' in dev_b.request
    assert len(opened) == 2
    assert opened[0] is not opened[1]
    assert all(sock.fileno() == -1 for sock in opened)
