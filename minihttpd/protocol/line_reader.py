"""CRLF line reading from a buffered connection stream."""

from typing import BinaryIO

from minihttpd.protocol.errors import ConnectionClosed, IncompleteLine

CRLF = b"\r\n"
LINE_ENCODING = "iso-8859-1"


def read_line(reader: BinaryIO) -> str:
    """Read one line and return it without the trailing CRLF.

    The reader is consumed up to and including the next LF. A stream that
    ends before the terminator raises ``IncompleteLine``, or
    ``ConnectionClosed`` when not a single byte was available.
    """
    raw = reader.readline()
    if not raw:
        raise ConnectionClosed("connection closed before a line was received")
    if not raw.endswith(b"\n"):
        raise IncompleteLine(f"stream ended inside a line: {raw[:64]!r}")
    return raw.removesuffix(CRLF).decode(LINE_ENCODING)
