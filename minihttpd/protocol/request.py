"""Request parsing from a shared buffered connection reader."""

import re
from dataclasses import dataclass
from typing import BinaryIO, Optional, Tuple

from minihttpd.protocol.errors import InvalidContentLength, MalformedRequestLine
from minihttpd.protocol.line_reader import read_line

HTTP_10 = "HTTP/1.0"
HTTP_11 = "HTTP/1.1"

_CONTENT_LENGTH_PATTERN = re.compile(r"[+-]?[0-9]+")
_CONTENT_LENGTH_MAX = 2**63 - 1
_CONTENT_LENGTH_MIN = -(2**63)
_READ_CHUNK_SIZE = 65536


class RequestBody:
    """Reader over exactly ``length`` bytes of the connection stream.

    Bytes beyond the limit belong to the next request, so reads past it
    report end-of-stream even when the underlying reader holds more data.
    """

    def __init__(self, reader: BinaryIO, length: int) -> None:
        self._reader = reader
        self._remaining = max(0, length)
        self.length = self._remaining

    @property
    def remaining(self) -> int:
        """Number of declared body bytes not yet consumed."""
        return self._remaining

    def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` bytes, or everything left when ``size`` < 0.

        The underlying reader is asked for at most one chunk at a time, so the
        declared length never drives a single large allocation.
        """
        if self._remaining <= 0:
            return b""
        if size is None or size < 0 or size > self._remaining:
            size = self._remaining
        chunks = []
        while size > 0:
            data = self._reader.read(min(size, _READ_CHUNK_SIZE))
            if not data:
                # peer closed mid-body
                self._remaining = 0
                break
            chunks.append(data)
            self._remaining -= len(data)
            size -= len(data)
        return b"".join(chunks)

    def drain(self, chunk_size: int = _READ_CHUNK_SIZE) -> int:
        """Discard the unread part of the body; returns the number of bytes skipped."""
        skipped = 0
        while self._remaining > 0:
            chunk = self.read(min(chunk_size, self._remaining))
            if not chunk:
                break
            skipped += len(chunk)
        return skipped


@dataclass(frozen=True)
class Request:
    """Represents a parsed HTTP request."""

    method: str
    uri: str
    proto: str
    headers: dict[str, str]
    body: RequestBody

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Look up a header by case-insensitive name."""
        return self.headers.get(name.lower(), default)


def parse_request_line(line: str) -> Tuple[str, str, str]:
    """Split ``METHOD SP URI SP VERSION`` into its three fields."""
    fields = line.split(" ")
    if len(fields) != 3:
        raise MalformedRequestLine(f"malformed request line: {line!r}")
    method, uri, proto = fields
    return method, uri, proto


def parse_header_line(line: str) -> Optional[Tuple[str, str]]:
    """Return the lower-cased name and trimmed value, or None without a colon."""
    if ":" not in line:
        return None
    name, value = line.split(":", 1)
    return name.strip().lower(), value.strip()


def content_length(headers: dict[str, str]) -> int:
    """Return the declared body length; negative values yield an empty body."""
    value = headers.get("content-length")
    if value is None:
        return 0
    if not _CONTENT_LENGTH_PATTERN.fullmatch(value):
        raise InvalidContentLength(f"invalid Content-Length: {value!r}")
    length = int(value)
    if not _CONTENT_LENGTH_MIN <= length <= _CONTENT_LENGTH_MAX:
        raise InvalidContentLength(f"Content-Length out of range: {value!r}")
    return max(0, length)


def read_request(reader: BinaryIO) -> Request:
    """Build a Request from the reader, leaving it positioned at the body."""
    method, uri, proto = parse_request_line(read_line(reader))

    headers: dict[str, str] = {}
    while True:
        line = read_line(reader)
        if not line:
            break
        parsed = parse_header_line(line)
        if parsed is not None:
            name, value = parsed
            headers[name] = value

    body = RequestBody(reader, content_length(headers))
    return Request(method, uri, proto, headers, body)
