"""Example handlers selectable from the command line."""

import logging

from minihttpd.domain.correlation_id import get_logger
from minihttpd.protocol.request import Request
from minihttpd.protocol.response import Response

EXAMPLES_LOGGER = get_logger("handlers.examples")

ECHO_PREFIX = "/echo/"


def _text(response: Response, message: str, status: int = 200) -> None:
    response.status = status
    response.headers["Content-Type"] = "text/plain; charset=utf-8"
    response.write(message.encode())


def hello_handler(response: Response, request: Request) -> None:
    """Answer every request with a fixed greeting."""
    _text(response, "Hello, World!\n")


def echo_handler(response: Response, request: Request) -> None:
    """Write the request body back, or the path suffix under ``/echo/``.

    Only GET and POST are accepted; anything else gets 405 with an Allow header.
    """
    if request.method not in ("GET", "POST"):
        response.headers["Allow"] = "GET, POST"
        _text(response, "method not allowed\n", status=405)
        return

    payload = request.body.read()
    if request.method == "GET":
        if not request.uri.startswith(ECHO_PREFIX):
            _text(response, "not found\n", status=404)
            return
        payload = request.uri[len(ECHO_PREFIX) :].encode()

    if EXAMPLES_LOGGER.logger.isEnabledFor(logging.DEBUG):
        EXAMPLES_LOGGER.debug(
            "Echo request processed",
            extra={"event": "echo_request", "bytes_out": len(payload)},
        )
    response.headers["Content-Type"] = request.header(
        "content-type", "application/octet-stream"
    )
    response.write(payload)


def inspect_handler(response: Response, request: Request) -> None:
    """Describe the parsed request as plain text."""
    body = request.body.read()
    lines = [
        f"method: {request.method}",
        f"uri: {request.uri}",
        f"proto: {request.proto}",
        f"body-bytes: {len(body)}",
    ]
    lines.extend(f"header {name}: {value}" for name, value in request.headers.items())
    _text(response, "\n".join(lines) + "\n")


HANDLERS = {
    "hello": hello_handler,
    "echo": echo_handler,
    "inspect": inspect_handler,
}
