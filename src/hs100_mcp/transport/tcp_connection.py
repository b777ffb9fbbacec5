"""One-shot TCP connection to a smart plug's control port.

A connection carries exactly one exchange: the ciphered, framed request
goes out, one framed reply comes back, and the socket is closed. Nothing
is pooled or reused, so concurrent calls never share state.
"""

from __future__ import annotations

import logging
import socket
import time

from ..errors import TransportError
from ..protocol.cipher import decrypt, encrypt
from ..protocol.framing import MAX_FRAME_SIZE, build_frame, read_frame

logger = logging.getLogger(__name__)

DEFAULT_PORT = 9999
DEFAULT_TIMEOUT = 5.0  # seconds, applied to connect, write and read


class TCPConnection:
    """Manages the socket for a single request/response exchange.

    Usage::

        with TCPConnection("192.168.0.10") as conn:
            reply = conn.send_and_receive(b'{"system":{"get_sysinfo":{}}}')
    """

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        timeout: float = DEFAULT_TIMEOUT,
        max_frame_size: int = MAX_FRAME_SIZE,
    ) -> None:
        self._host = host
        self._port = port
        self._timeout = timeout
        self._max_frame_size = max_frame_size
        self._sock: socket.socket | None = None

    @property
    def connected(self) -> bool:
        return self._sock is not None

    @property
    def address(self) -> tuple[str, int]:
        return (self._host, self._port)

    def open(self) -> None:
        """Connect to the device.

        Raises:
            TransportError: If the device is unreachable or the connect
                times out.
        """
        if self._sock is not None:
            return
        try:
            self._sock = socket.create_connection(self.address, timeout=self._timeout)
        except socket.timeout as e:
            raise TransportError(
                f"Timed out connecting to {self._host}:{self._port}", phase="connect"
            ) from e
        except OSError as e:
            raise TransportError(
                f"Device {self._host}:{self._port} is unreachable: {e}", phase="connect"
            ) from e
        logger.debug("Connected to %s:%d", self._host, self._port)

    def close(self) -> None:
        """Close the socket. Safe to call more than once."""
        if self._sock is None:
            return
        try:
            self._sock.close()
        except OSError as e:
            logger.warning("Error closing connection to %s: %s", self._host, e)
        finally:
            self._sock = None
            logger.debug("Disconnected from %s:%d", self._host, self._port)

    def __enter__(self) -> TCPConnection:
        self.open()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _require_socket(self) -> socket.socket:
        if self._sock is None:
            raise TransportError("Not connected to device", phase="connect")
        return self._sock

    def write(self, data: bytes) -> int:
        """Send raw bytes, all or nothing.

        Raises:
            TransportError: On timeout or if the peer drops mid-write.
        """
        sock = self._require_socket()
        try:
            sock.sendall(data)
        except socket.timeout as e:
            raise TransportError(
                f"Timed out writing {len(data)} bytes to {self._host}", phase="write"
            ) from e
        except OSError as e:
            raise TransportError(
                f"Short write of {len(data)} bytes to {self._host}: {e}", phase="write"
            ) from e
        return len(data)

    def read(self) -> bytes:
        """Read one frame and return its (still ciphered) payload.

        The connection timeout bounds the whole read, not each ``recv``.

        Raises:
            TransportError: On timeout or a socket error.
            FrameError: If the frame is truncated or oversized.
        """
        sock = self._require_socket()
        deadline = time.monotonic() + self._timeout

        def recv(size: int) -> bytes:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise socket.timeout("read deadline passed")
            sock.settimeout(remaining)
            return sock.recv(size)

        try:
            return read_frame(recv, self._max_frame_size)
        except socket.timeout as e:
            raise TransportError(
                f"Timed out reading reply from {self._host}", phase="read"
            ) from e
        except OSError as e:
            raise TransportError(
                f"Error reading reply from {self._host}: {e}", phase="read"
            ) from e

    def send_and_receive(self, payload: bytes) -> bytes:
        """Cipher and frame ``payload``, send it, and return the deciphered reply."""
        self.write(build_frame(encrypt(payload)))
        reply = decrypt(self.read())
        logger.debug("Received %d byte reply from %s", len(reply), self._host)
        return reply


def round_trip(
    host: str,
    payload: bytes,
    timeout: float = DEFAULT_TIMEOUT,
    port: int = DEFAULT_PORT,
    max_frame_size: int = MAX_FRAME_SIZE,
) -> bytes:
    """Perform one complete exchange on a fresh connection.

    The connection is closed on every path, including errors.

    Raises:
        TransportError: Connect, write or read failed or timed out.
        ProtocolError: The reply frame was malformed.
    """
    conn = TCPConnection(host, port=port, timeout=timeout, max_frame_size=max_frame_size)
    try:
        conn.open()
        return conn.send_and_receive(payload)
    finally:
        conn.close()
