"""Protocol version and connection lifecycle enumerations."""

from __future__ import annotations

from enum import Enum, IntEnum


class HttpVersion(str, Enum):
    HTTP10 = "HTTP/1.0"
    HTTP11 = "HTTP/1.1"
    HTTP2 = "HTTP/2"

    def __str__(self) -> str:
        return self.value


class ConnectionState(IntEnum):
    """Stages of one request on the wire, in the order they are entered."""

    UNREADY = -1
    READY = 0
    CONNECT = 1
    PROXY = 2
    HANDSHAKE = 3
    SEND_HEADER = 4
    SEND_BODY = 5
    RECV_HEADER = 6
    RECV_BODY = 7
    CLOSE = 8

    @property
    def display_name(self) -> str:
        return self.name.lower()


__all__ = ["ConnectionState", "HttpVersion"]
