"""Integration tests for keep-alive and close semantics over raw sockets."""

from __future__ import annotations

import socket

import pytest

from tests.utils.http import read_http_response, read_until_closed

pytestmark = pytest.mark.integration

BAD_REQUEST = b"HTTP/1.1 400 Bad Request\r\nConnection: close\r\n\r\n"


def build_request(
    path: str, proto: str = "HTTP/1.1", connection: str | None = None, body: bytes = b""
) -> bytes:
    lines = [f"GET {path} {proto}", "Host: localhost"]
    if connection:
        lines.append(f"Connection: {connection}")
    if body:
        lines.append(f"Content-Length: {len(body)}")
    lines.extend(["", ""])
    return "\r\n".join(lines).encode() + body


def test_http11_requests_share_connection(echo_server):
    with socket.create_connection(
        (echo_server["host"], echo_server["port"]), timeout=5
    ) as client:
        stream = client.makefile("rb")

        client.sendall(build_request("/echo/first"))
        first = read_http_response(stream)
        client.sendall(build_request("/echo/second"))
        second = read_http_response(stream)
        client.sendall(build_request("/echo/final", connection="close"))
        final = read_http_response(stream)

        assert first.body == b"first"
        assert "connection" not in first.headers
        assert second.body == b"second"
        assert final.body == b"final"
        assert final.headers["connection"] == "close"
        assert stream.read() == b""


def test_http10_closes_unless_keep_alive_requested(echo_server):
    address = (echo_server["host"], echo_server["port"])

    with socket.create_connection(address, timeout=5) as client:
        client.sendall(build_request("/echo/once", proto="HTTP/1.0"))
        stream = client.makefile("rb")
        response = read_http_response(stream)
        assert response.status_line == "HTTP/1.0 200 OK"
        assert "connection" not in response.headers
        assert stream.read() == b""

    with socket.create_connection(address, timeout=5) as client:
        stream = client.makefile("rb")
        client.sendall(
            build_request("/echo/a", proto="HTTP/1.0", connection="keep-alive")
        )
        first = read_http_response(stream)
        client.sendall(build_request("/echo/b", proto="HTTP/1.0"))
        second = read_http_response(stream)

        assert first.headers["connection"] == "keep-alive"
        assert second.body == b"b"
        assert stream.read() == b""


def test_unread_body_does_not_leak_into_next_request(echo_server):
    """GET bodies are ignored by the echo handler yet framed correctly."""
    with socket.create_connection(
        (echo_server["host"], echo_server["port"]), timeout=5
    ) as client:
        stream = client.makefile("rb")
        client.sendall(
            build_request("/echo/with-body", body=b"12345")
            + build_request("/echo/next", connection="close")
        )

        first = read_http_response(stream)
        second = read_http_response(stream)

    assert first.body == b"with-body"
    assert second.body == b"next"


def test_malformed_request_gets_fixed_bad_request(echo_server):
    with socket.create_connection(
        (echo_server["host"], echo_server["port"]), timeout=5
    ) as client:
        client.sendall(b"THIS IS NOT HTTP\r\n\r\n")

        assert read_until_closed(client) == BAD_REQUEST


def test_incomplete_request_line_then_close(echo_server):
    with socket.create_connection(
        (echo_server["host"], echo_server["port"]), timeout=5
    ) as client:
        client.sendall(b"GET /echo/x HTTP/1.1")
        client.shutdown(socket.SHUT_WR)

        assert read_until_closed(client) == BAD_REQUEST


def test_stalled_client_does_not_block_others(echo_server):
    address = (echo_server["host"], echo_server["port"])

    with socket.create_connection(address, timeout=5) as stalled:
        stalled.sendall(b"GET /echo/partial")
        with socket.create_connection(address, timeout=5) as client:
            client.sendall(build_request("/echo/ok", connection="close"))
            response = read_http_response(client.makefile("rb"))

    assert response.body == b"ok"
