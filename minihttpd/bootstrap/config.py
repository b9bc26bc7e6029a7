"""Server configuration and CLI argument parsing."""

import argparse
import os
from dataclasses import dataclass

HANDLER_CHOICES = ("hello", "echo", "inspect")
LOG_LEVEL_CHOICES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMAT_CHOICES = ("json", "text")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value is not None else default


def _env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value else default


DEFAULT_HOST = _env_str("MINIHTTPD_HOST", "localhost")
DEFAULT_PORT = _env_int("MINIHTTPD_PORT", 4221)
DEFAULT_HANDLER = _env_str("MINIHTTPD_HANDLER", "hello")
DEFAULT_SHUTDOWN_GRACE_SECONDS = _env_int("MINIHTTPD_SHUTDOWN_GRACE_SECONDS", 5)

# Poll interval for noticing a shutdown request while blocked in accept().
ACCEPT_POLL_SECONDS = 0.5


@dataclass
class ServerConfig:
    """Listening address and shutdown settings."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    shutdown_grace_seconds: int = DEFAULT_SHUTDOWN_GRACE_SECONDS
    accept_poll_seconds: float = ACCEPT_POLL_SECONDS

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "ServerConfig":
        return cls(
            host=args.host,
            port=args.port,
            shutdown_grace_seconds=args.shutdown_grace_seconds,
        )


def parse_cli_args(argv: list[str]) -> argparse.Namespace:
    """Return parsed CLI arguments for server configuration."""
    parser = argparse.ArgumentParser(description="Minimal HTTP/1.x server")
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument(
        "--handler",
        default=DEFAULT_HANDLER,
        choices=HANDLER_CHOICES,
        help="Example handler to serve",
    )
    parser.add_argument(
        "--log-level",
        default=_env_str("MINIHTTPD_LOG_LEVEL", "INFO").upper(),
        choices=LOG_LEVEL_CHOICES,
        type=str.upper,
    )
    parser.add_argument(
        "--log-destination",
        default=_env_str("MINIHTTPD_LOG_DESTINATION", "stdout"),
        help="stdout or a file path",
    )
    parser.add_argument(
        "--log-format",
        default=_env_str("MINIHTTPD_LOG_FORMAT", "json").lower(),
        choices=LOG_FORMAT_CHOICES,
        type=str.lower,
    )
    parser.add_argument(
        "--shutdown-grace-seconds",
        type=int,
        default=DEFAULT_SHUTDOWN_GRACE_SECONDS,
        help="Seconds to wait for open connections after a shutdown signal",
    )
    return parser.parse_args(argv)
