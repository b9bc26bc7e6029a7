"""Response accumulation and wire serialization."""

import socket
from email.utils import formatdate
from types import MappingProxyType
from typing import Mapping, Optional

from minihttpd.protocol.errors import ResponseAlreadySent, UnknownStatus
from minihttpd.protocol.request import HTTP_11

# Intentionally partial; any other status fails serialization.
STATUS_TITLES: Mapping[int, str] = MappingProxyType(
    {
        200: "OK",
        201: "Created",
        202: "Accepted",
        203: "Non-Authoritative Information",
        204: "No Content",
        400: "Bad Request",
        404: "Not Found",
        405: "Method Not Allowed",
        500: "Internal Server Error",
    }
)

BAD_REQUEST_RESPONSE = b"HTTP/1.1 400 Bad Request\r\nConnection: close\r\n\r\n"


def http_date(timestamp: Optional[float] = None) -> str:
    """Format a timestamp as ``Mon, 02 Jan 2006 15:04:05 GMT``."""
    return formatdate(timestamp, usegmt=True)


class Response:
    """Mutable response handed to a handler, serialized once after dispatch."""

    def __init__(self, proto: str = HTTP_11, status: int = 200) -> None:
        self.status = status
        self.headers: dict[str, str] = {}
        self.proto = proto
        self._body = bytearray()
        self._finalized = False

    @property
    def body(self) -> bytes:
        """Bytes written so far."""
        return bytes(self._body)

    @property
    def finalized(self) -> bool:
        """Whether the response has been serialized."""
        return self._finalized

    def write(self, data: bytes) -> int:
        """Append body bytes and return how many were buffered."""
        if self._finalized:
            raise ResponseAlreadySent("response has already been serialized")
        self._body += data
        return len(data)

    def _set_system_header(self, name: str, value: str) -> None:
        for existing in [key for key in self.headers if key.lower() == name.lower()]:
            del self.headers[existing]
        self.headers[name] = value

    def _finalize(self) -> str:
        title = STATUS_TITLES.get(self.status)
        if title is None:
            raise UnknownStatus(self.status)
        if not self._finalized:
            self._set_system_header("Date", http_date())
            self._set_system_header("Content-Length", str(len(self._body)))
            self._finalized = True
        return title

    def render_head(self) -> bytes:
        """Finalize and return the status line and header block."""
        title = self._finalize()
        lines = [f"{self.proto} {self.status} {title}"]
        lines.extend(f"{name}: {value}" for name, value in self.headers.items())
        return ("\r\n".join(lines) + "\r\n\r\n").encode("iso-8859-1")

    def render(self) -> bytes:
        """Finalize and return the complete response bytes."""
        return self.render_head() + bytes(self._body)

    def write_to(self, client_socket: socket.socket) -> int:
        """Serialize onto the socket; returns the number of bytes sent.

        An unknown status raises ``UnknownStatus`` before anything is sent.
        Socket errors propagate and may leave a partial response on the wire.
        """
        head = self.render_head()
        client_socket.sendall(head)
        if self._body:
            client_socket.sendall(bytes(self._body))
        return len(head) + len(self._body)
