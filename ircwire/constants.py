"""
Configuration constants for the ircwire client

This module contains all configurable constants used throughout the package.
Each tunable constant can be overridden by setting an environment variable
with the same name. Wire-format limits are fixed by the protocol.
"""

import os


def _get_env_int(name: str, default: int) -> int:
    """Retrieve an integer value from an environment variable.

    Attempts to parse the environment variable as an integer. If the variable
    is not set or cannot be parsed, prints a warning and returns the default.

    Args:
        name: The name of the environment variable to read.
        default: The default integer value to return if parsing fails.

    Returns:
        The parsed integer value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            print(
                f"Warning: Invalid integer value for {name}='{value}', using default {default}"
            )
    return default


def _get_env_float(name: str, default: float) -> float:
    """Retrieve a float value from an environment variable.

    Args:
        name: The name of the environment variable to read.
        default: The default float value to return if parsing fails.

    Returns:
        The parsed float value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            print(
                f"Warning: Invalid float value for {name}='{value}', using default {default}"
            )
    return default


# Wire format (RFC 1459/2812); not configurable
MAX_LINE_LENGTH = 512  # bytes, including the terminator
LINE_TERMINATOR = b"\r\n"
MAX_PAYLOAD_LENGTH = MAX_LINE_LENGTH - len(LINE_TERMINATOR)

# Connection settings
DEFAULT_PORT = _get_env_int("IRC_DEFAULT_PORT", 6667)
CONNECT_TIMEOUT = _get_env_float("IRC_CONNECT_TIMEOUT", 30.0)
WRITE_DEADLINE = _get_env_float(
    "IRC_WRITE_DEADLINE", 60.0
)  # Seconds a single flush may stall before the peer is considered dead

# Session hand-off queues
QUEUE_SIZE = _get_env_int("IRC_QUEUE_SIZE", 32)
ERROR_QUEUE_SIZE = _get_env_int("IRC_ERROR_QUEUE_SIZE", 64)

# Keep-alive
KEEPALIVE_INTERVAL = _get_env_float(
    "IRC_KEEPALIVE_INTERVAL", 120.0
)  # Idle seconds before a PING probe is sent

# Reconnect policy (client runner only; the session never retries)
RECONNECT_INITIAL_DELAY = _get_env_float("IRC_RECONNECT_INITIAL_DELAY", 2.0)
RECONNECT_MAX_DELAY = _get_env_float("IRC_RECONNECT_MAX_DELAY", 300.0)
RECONNECT_MAX_ATTEMPTS = _get_env_int(
    "IRC_RECONNECT_MAX_ATTEMPTS", 0
)  # 0 retries forever
SHORT_SESSION_SECONDS = _get_env_float(
    "IRC_SHORT_SESSION_SECONDS", 60.0
)  # Sessions shorter than this count as failures
MAX_SHORT_SESSIONS = _get_env_int("IRC_MAX_SHORT_SESSIONS", 4)
