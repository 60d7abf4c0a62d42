#!/usr/bin/env python3
"""
Command line entry point for the ircwire client
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence

from pydantic import ValidationError

from .config import ClientConfig
from .errors.handling import log_error
from .irc.client import IRCClient, describe
from .irc.message import Message
from .logging_config import LoggerConfigurator
from .logs.logger import logger
from .utils.retry import RetryExhaustedError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ircwire", description="Minimal IRC client built on the ircwire engine"
    )
    parser.add_argument("server", help="Server address as <server>[:<port>]")
    parser.add_argument("-n", dest="nick", default=None, help="Nickname (default: current user)")
    parser.add_argument("-f", dest="fullname", default="", help="Full name")
    parser.add_argument("-p", dest="password", default=None, help="Server password")
    parser.add_argument("-d", dest="debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "-j", dest="join", action="append", default=[], help="Channel to join (repeatable)"
    )
    parser.add_argument("--ssl", dest="tls", action="store_true", help="Connect with TLS")
    parser.add_argument(
        "--trust", action="store_true", help="Do not verify the server certificate"
    )
    return parser


def build_config(args: argparse.Namespace) -> ClientConfig:
    """Turn parsed arguments into a validated configuration.

    Raises:
        ValueError: The server address or a field is invalid (pydantic's
            ``ValidationError`` is a ``ValueError``).
    """
    fields = {
        "fullname": args.fullname,
        "password": args.password,
        "tls": args.tls,
        "trust": args.trust,
        "join": args.join,
    }
    if args.nick:
        fields["nick"] = args.nick
    return ClientConfig.from_address(args.server, **fields)


def print_message(message: Message) -> None:
    logger.log_event("irc", "message", text=describe(message))


async def main(config: ClientConfig) -> int:
    """Run the client until it quits or gives up. Returns the exit status."""
    logger.log_event("app", "start", server=config.host_port)
    client = IRCClient(config, print_message)
    try:
        await client.run()
    except RetryExhaustedError as e:
        log_error("Could not connect", e.final_exception or e)
        return 1
    finally:
        logger.log_event("app", "shutdown")
    return 0


def run(argv: Sequence[str] | None = None) -> None:
    """Synchronous entry point for the application.

    Raises:
        SystemExit: Always, with the client's exit status.
    """
    args = build_parser().parse_args(argv)
    LoggerConfigurator().configure(debug=True if args.debug else None)
    try:
        config = build_config(args)
    except (ValidationError, ValueError) as e:
        logger.log_event("app", "config_invalid", level=logging.ERROR, error=str(e))
        sys.exit(1)
    try:
        status = asyncio.run(main(config))
    except KeyboardInterrupt:
        logger.log_event("app", "interrupted", level=logging.WARNING)
        sys.exit(0)
    except Exception as e:
        log_error("Top-level error", e)
        sys.exit(1)
    sys.exit(status)


if __name__ == "__main__":
    run()
