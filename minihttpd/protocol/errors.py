"""Exceptions raised while reading requests and writing responses."""


class RequestParseError(ValueError):
    """Base class for any failure to build a request from the wire."""


class IncompleteLine(RequestParseError):
    """Raised when the stream ends before a line terminator arrives."""


class ConnectionClosed(IncompleteLine):
    """Raised when the peer closed the stream before sending any byte of a line."""


class MalformedRequestLine(RequestParseError):
    """Raised when the request line does not hold exactly three fields."""


class InvalidContentLength(RequestParseError):
    """Raised when Content-Length is not a base-10 integer."""


class UnknownStatus(ValueError):
    """Raised when a response status has no entry in the title table."""

    def __init__(self, status: int) -> None:
        super().__init__(f"unsupported status code: {status}")
        self.status = status


class ResponseAlreadySent(RuntimeError):
    """Raised when a finalized response is modified."""
