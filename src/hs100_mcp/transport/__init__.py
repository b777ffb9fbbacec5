"""Transport layer: one TCP connection per request."""

from .tcp_connection import TCPConnection, round_trip, DEFAULT_PORT, DEFAULT_TIMEOUT
