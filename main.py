"""Entry point: serve one of the example handlers over HTTP/1.x."""

import signal
import sys

from minihttpd.bootstrap.config import ServerConfig, parse_cli_args
from minihttpd.bootstrap.logging_setup import configure_logging
from minihttpd.domain.correlation_id import get_logger
from minihttpd.handlers.examples import HANDLERS
from minihttpd.lifecycle.state import ServerLifecycle
from minihttpd.transport.listener import run_server

SERVER_LOGGER = get_logger("server")


def main(argv: list[str] | None = None) -> int:
    """Start the server and block until it stops; returns the exit status."""
    args = parse_cli_args(sys.argv[1:] if argv is None else argv)
    configure_logging(
        args.log_level, args.log_destination, use_json=args.log_format == "json"
    )

    config = ServerConfig.from_args(args)
    lifecycle = ServerLifecycle()

    def shutdown_handler(signum: int, _frame) -> None:
        SERVER_LOGGER.info(
            "Received shutdown signal", extra={"event": "signal", "signal": signum}
        )
        lifecycle.begin_stopping()

    signal.signal(signal.SIGTERM, shutdown_handler)
    signal.signal(signal.SIGINT, shutdown_handler)

    SERVER_LOGGER.info(
        "Starting HTTP server",
        extra={
            "event": "server_starting",
            "host": config.host,
            "port": config.port,
            "handler": args.handler,
            "log_destination": args.log_destination,
            "log_level": args.log_level,
            "shutdown_grace_seconds": config.shutdown_grace_seconds,
        },
    )
    try:
        run_server(config, HANDLERS[args.handler], lifecycle)
    except OSError as error:
        SERVER_LOGGER.critical(
            "Listener terminated",
            extra={
                "event": "listener_failed",
                "error_type": type(error).__name__,
                "error": str(error),
            },
        )
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
