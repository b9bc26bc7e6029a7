"""Connection acceptance loop."""

import logging
import socket
import threading

from minihttpd.bootstrap.config import ServerConfig
from minihttpd.bootstrap.socket_factory import create_server_socket
from minihttpd.domain.correlation_id import get_logger
from minihttpd.lifecycle.state import ServerLifecycle
from minihttpd.transport.connection import Handler, handle_connection

LISTENER_LOGGER = get_logger("transport.listener")


def _spawn_connection(
    client_socket: socket.socket,
    client_address: tuple[str, int],
    handler: Handler,
    lifecycle: ServerLifecycle,
) -> threading.Thread:
    """Start a dedicated thread running the connection loop."""
    if LISTENER_LOGGER.logger.isEnabledFor(logging.DEBUG):
        LISTENER_LOGGER.debug(
            "Client connection accepted",
            extra={
                "event": "connection_opened",
                "client": f"{client_address[0]}:{client_address[1]}",
            },
        )
    thread = threading.Thread(
        target=handle_connection,
        args=(client_socket, client_address, handler, lifecycle),
        daemon=True,
    )
    lifecycle.register_worker(thread)
    thread.start()
    return thread


def serve(
    server_socket: socket.socket, handler: Handler, lifecycle: ServerLifecycle
) -> None:
    """Accept connections until asked to stop; an accept failure is re-raised.

    The listening socket is closed on every exit path.
    """
    try:
        while not lifecycle.should_stop():
            try:
                client_socket, client_address = server_socket.accept()
            except socket.timeout:
                continue
            except OSError as error:
                if lifecycle.should_stop():
                    break
                LISTENER_LOGGER.error(
                    "Socket accept failed",
                    extra={"event": "accept_error", "error_type": type(error).__name__},
                )
                raise
            _spawn_connection(client_socket, client_address, handler, lifecycle)
    finally:
        server_socket.close()


def run_server(
    config: ServerConfig, handler: Handler, lifecycle: ServerLifecycle
) -> None:
    """Listen on the configured address, serve, then wait for open connections."""
    server_socket = create_server_socket(config)
    LISTENER_LOGGER.info(
        "Server listening for connections",
        extra={"event": "server_listening", "host": config.host, "port": config.port},
    )
    try:
        serve(server_socket, handler, lifecycle)
    finally:
        LISTENER_LOGGER.info(
            "Waiting for active connections to complete",
            extra={
                "event": "shutdown_waiting",
                "shutdown_grace_seconds": config.shutdown_grace_seconds,
            },
        )
        lifecycle.wait_for_workers(config.shutdown_grace_seconds)
        LISTENER_LOGGER.info(
            "Server shutdown complete", extra={"event": "server_stopped"}
        )
