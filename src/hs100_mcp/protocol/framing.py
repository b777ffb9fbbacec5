"""Length-prefixed framing for ciphered documents.

Frame layout::

    +----------------------+-------------------------------+
    | Length               | Payload                       |
    | 4 bytes, big-endian  | ``Length`` bytes (ciphered)   |
    +----------------------+-------------------------------+

The same layout is used for requests and replies. The protocol itself puts
no upper bound on ``Length``; :data:`MAX_FRAME_SIZE` caps what we accept.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Callable

from ..errors import FrameError

HEADER = struct.Struct(">I")
HEADER_SIZE = HEADER.size
MAX_FRAME_SIZE = 1024 * 1024  # 1 MiB


@dataclass
class Frame:
    """A decoded frame."""

    payload: bytes

    @property
    def length(self) -> int:
        return len(self.payload)

    def __repr__(self) -> str:
        return f"Frame(length={self.length})"


def build_frame(payload: bytes) -> bytes:
    """Prefix ``payload`` with its big-endian 4-byte length."""
    if len(payload) > 0xFFFFFFFF:
        raise ValueError(f"Payload too large for a frame: {len(payload)} bytes")
    return HEADER.pack(len(payload)) + payload


def _read_exactly(recv: Callable[[int], bytes], size: int, what: str) -> bytes:
    chunks = []
    remaining = size
    while remaining > 0:
        chunk = recv(remaining)
        if not chunk:
            raise FrameError(
                f"Connection closed after {size - remaining} of {size} {what} bytes"
            )
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def read_frame(
    recv: Callable[[int], bytes],
    max_size: int = MAX_FRAME_SIZE,
) -> bytes:
    """Read one frame from a byte source and return its payload.

    Args:
        recv: Callable returning up to ``n`` bytes, or ``b""`` once the
            source is closed (``socket.recv`` and ``BytesIO.read`` both fit).
        max_size: Largest declared length that will be accepted.

    Raises:
        FrameError: If the source closes early or the declared length
            exceeds ``max_size``.
    """
    (length,) = HEADER.unpack(_read_exactly(recv, HEADER_SIZE, "header"))
    if length > max_size:
        raise FrameError(
            f"Declared frame length {length} exceeds maximum of {max_size}"
        )
    return _read_exactly(recv, length, "payload")


def parse_frame(data: bytes, max_size: int = MAX_FRAME_SIZE) -> Frame:
    """Parse a complete in-memory frame.

    Trailing bytes after the declared payload are rejected.
    """
    view = memoryview(data)
    offset = 0

    def recv(size: int) -> bytes:
        nonlocal offset
        chunk = bytes(view[offset : offset + size])
        offset += len(chunk)
        return chunk

    payload = read_frame(recv, max_size)
    if offset != len(data):
        raise FrameError(
            f"{len(data) - offset} unexpected bytes after frame payload"
        )
    return Frame(payload=payload)
