"""Settings from the command line, environment and an optional .env file."""

import argparse
import logging
import os
import sys
from dataclasses import dataclass
from typing import Optional, Sequence

from dotenv import load_dotenv

DEFAULT_PORT = 3000
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


@dataclass
class Settings:
    """Runtime configuration for the server."""
    use_http: bool = False
    host: str = "localhost"
    port: int = DEFAULT_PORT
    log_level: str = "INFO"
    long_task_step_seconds: float = 1.0


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcp-starter",
        description="MCP starter server (stdio by default, or streamable HTTP).",
    )
    parser.add_argument("--http", action="store_true",
                        help="Serve over HTTP instead of stdio.")
    parser.add_argument("--port", type=int, default=None,
                        help="HTTP port, only used with --http (default: %d)." % DEFAULT_PORT)
    return parser


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def load_settings(argv: Optional[Sequence[str]] = None) -> Settings:
    """Build Settings. Command-line flags win over environment variables."""
    load_dotenv()
    args = build_arg_parser().parse_args(argv)

    port = args.port
    if port is None:
        port = int(os.environ.get("MCP_HTTP_PORT", DEFAULT_PORT))

    return Settings(
        use_http=args.http,
        host=os.environ.get("MCP_HTTP_HOST", "localhost"),
        port=port,
        log_level=os.environ.get("MCP_LOG_LEVEL", "INFO").upper(),
        long_task_step_seconds=_env_float("MCP_LONG_TASK_STEP_SECONDS", 1.0),
    )


def configure_logging(level: str = "INFO") -> None:
    # stdout carries the JSON-RPC stream in stdio mode, so logs go to stderr.
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        stream=sys.stderr,
    )
