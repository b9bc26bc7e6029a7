"""Keep-alive decision for a single request/response exchange."""

from dataclasses import dataclass

from minihttpd.protocol.request import HTTP_10, HTTP_11


@dataclass(frozen=True)
class ConnectionDecision:
    """Whether to reuse the connection and whether to echo the Connection header."""

    keep_alive: bool
    echo_connection_header: bool


_CLOSE_AFTER_RESPONSE = ConnectionDecision(
    keep_alive=False, echo_connection_header=False
)


def connection_decision(proto: str, headers: dict[str, str]) -> ConnectionDecision:
    """Decide persistence from the protocol token and the request's Connection header.

    HTTP/1.0 needs an explicit ``keep-alive`` opt-in, HTTP/1.1 keeps the
    connection unless the client sends ``close``. An explicit client choice
    is echoed back; unrecognized protocol tokens get one exchange only.
    """
    connection = headers.get("connection", "").lower()

    if proto == HTTP_10:
        if connection == "keep-alive":
            return ConnectionDecision(keep_alive=True, echo_connection_header=True)
        return _CLOSE_AFTER_RESPONSE
    if proto == HTTP_11:
        if connection == "close":
            return ConnectionDecision(keep_alive=False, echo_connection_header=True)
        return ConnectionDecision(keep_alive=True, echo_connection_header=False)
    return _CLOSE_AFTER_RESPONSE
