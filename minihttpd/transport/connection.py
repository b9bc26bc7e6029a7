"""Request/response loop for one accepted connection."""

import logging
import socket
import threading
from typing import BinaryIO, Callable, Optional

from minihttpd.domain.correlation_id import (
    clear_correlation_id,
    generate_correlation_id,
    get_logger,
    set_correlation_id,
)
from minihttpd.lifecycle.state import ServerLifecycle
from minihttpd.protocol.connection_state import connection_decision
from minihttpd.protocol.errors import ConnectionClosed, RequestParseError, UnknownStatus
from minihttpd.protocol.request import Request, read_request
from minihttpd.protocol.response import BAD_REQUEST_RESPONSE, Response

CONNECTION_LOGGER = get_logger("transport.connection")

Handler = Callable[[Response, Request], None]


def _reject_bad_request(
    client_socket: socket.socket, client_addr_str: str, error: Exception
) -> None:
    """Send the fixed 400 response; the connection is closed by the caller."""
    if isinstance(error, ConnectionClosed):
        CONNECTION_LOGGER.debug(
            "Client closed the connection",
            extra={"event": "client_disconnected", "client": client_addr_str},
        )
    else:
        CONNECTION_LOGGER.warning(
            "Rejecting unparseable request",
            extra={
                "event": "bad_request",
                "client": client_addr_str,
                "error_type": type(error).__name__,
                "reason": str(error),
            },
        )
    try:
        client_socket.sendall(BAD_REQUEST_RESPONSE)
    except OSError:
        pass


def _serve_one(
    reader: BinaryIO,
    client_socket: socket.socket,
    client_addr_str: str,
    handler: Handler,
) -> Optional[bool]:
    """Run one exchange; return keep-alive, or None when the connection must end."""
    try:
        request = read_request(reader)
    except (RequestParseError, OSError) as error:
        _reject_bad_request(client_socket, client_addr_str, error)
        return None

    CONNECTION_LOGGER.debug(
        "Request parsed",
        extra={
            "event": "request_parsed",
            "client": client_addr_str,
            "method": request.method,
            "uri": request.uri,
            "proto": request.proto,
        },
    )

    response = Response(proto=request.proto)
    decision = connection_decision(request.proto, request.headers)
    if decision.echo_connection_header:
        response.headers["Connection"] = request.headers["connection"]

    try:
        handler(response, request)
    except Exception as error:  # pylint: disable=broad-except
        CONNECTION_LOGGER.error(
            "Handler raised, closing connection",
            extra={
                "event": "handler_error",
                "client": client_addr_str,
                "error_type": type(error).__name__,
            },
            exc_info=True,
        )
        return None

    try:
        bytes_out = response.write_to(client_socket)
    except UnknownStatus as error:
        CONNECTION_LOGGER.error(
            "Response status has no known title",
            extra={
                "event": "unknown_status",
                "client": client_addr_str,
                "status_code": error.status,
            },
        )
        return None
    except UnicodeEncodeError as error:
        CONNECTION_LOGGER.error(
            "Response headers are not ISO-8859-1 encodable",
            extra={
                "event": "serialization_error",
                "client": client_addr_str,
                "error_type": type(error).__name__,
            },
        )
        return None

    CONNECTION_LOGGER.debug(
        "Response sent",
        extra={
            "event": "response_sent",
            "client": client_addr_str,
            "status_code": response.status,
            "bytes_out": bytes_out,
            "keep_alive": decision.keep_alive,
        },
    )
    if decision.keep_alive:
        # the next request starts right after this body, read or not
        request.body.drain()
    return decision.keep_alive


def _close_socket(client_socket: socket.socket) -> None:
    try:
        client_socket.shutdown(socket.SHUT_WR)
    except OSError:
        pass
    client_socket.close()


def handle_connection(
    client_socket: socket.socket,
    client_address: tuple[str, int],
    handler: Handler,
    lifecycle: Optional[ServerLifecycle] = None,
) -> None:
    """Serve requests on one connection until it closes or must be closed.

    Requests are handled strictly in turn over one buffered reader. The
    socket is closed exactly once, whichever way the loop ends.
    """
    client_addr_str = f"{client_address[0]}:{client_address[1]}"
    current_thread = threading.current_thread()
    if lifecycle is not None:
        lifecycle.register_worker(current_thread)

    reader = client_socket.makefile("rb")
    requests_served = 0
    try:
        while True:
            set_correlation_id(generate_correlation_id())
            keep_alive = _serve_one(reader, client_socket, client_addr_str, handler)
            clear_correlation_id()
            if keep_alive is None:
                break
            requests_served += 1
            if not keep_alive:
                break
    except OSError as error:
        CONNECTION_LOGGER.warning(
            "Connection I/O failed",
            extra={
                "event": "connection_error",
                "client": client_addr_str,
                "error_type": type(error).__name__,
            },
        )
    finally:
        clear_correlation_id()
        reader.close()
        _close_socket(client_socket)
        if lifecycle is not None:
            lifecycle.cleanup_worker(current_thread)
        if CONNECTION_LOGGER.logger.isEnabledFor(logging.DEBUG):
            CONNECTION_LOGGER.debug(
                "Connection closed",
                extra={
                    "event": "connection_closed",
                    "client": client_addr_str,
                    "requests_served": requests_served,
                },
            )
