"""Listening socket creation."""

import socket

from minihttpd.bootstrap.config import ServerConfig


def create_server_socket(config: ServerConfig) -> socket.socket:
    """Bind and listen on the configured address.

    The accept timeout only lets the listener poll its stop flag; it is not
    a per-connection timeout.
    """
    server_socket = socket.create_server((config.host, config.port), reuse_port=True)
    server_socket.settimeout(config.accept_poll_seconds)
    return server_socket
