"""
Configuration constants for the ircplug client

This module contains the tunables used by the connection and dispatch layers.
Each constant can be overridden by setting an environment variable with the same name.
"""

import os


def _get_env_int(name: str, default: int) -> int:
    """Retrieve an integer value from an environment variable.

    Attempts to parse the environment variable as an integer. If the variable
    is not set or cannot be parsed, prints a warning and returns the default value.

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


# Protocol limits
MAX_LINE_BYTES = 510  # 512 minus the "\r\n" appended by the transport
LINE_TERMINATOR = "\r\n"

# Transport
IRC_CONNECT_TIMEOUT = _get_env_float(
    "IRC_CONNECT_TIMEOUT", 30.0
)  # Seconds allowed for the TCP/TLS connect
IRC_CONNECT_ATTEMPTS = _get_env_int(
    "IRC_CONNECT_ATTEMPTS", 3
)  # Connect attempts before the handshake fails with a transport error
IRC_CONNECT_BACKOFF_MAX = _get_env_float(
    "IRC_CONNECT_BACKOFF_MAX", 30.0
)  # Upper bound for the exponential wait between connect attempts
IRC_DEFAULT_PORT = 6667

# Outbound queue and flood protection (token bucket)
OUTPUT_QUEUE_SIZE = _get_env_int(
    "OUTPUT_QUEUE_SIZE", 256
)  # Lines buffered before senders block
FLOOD_BURST = _get_env_int(
    "FLOOD_BURST", 5
)  # Lines that may be written back-to-back
FLOOD_INTERVAL = _get_env_float(
    "FLOOD_INTERVAL", 2.0
)  # Seconds to earn one more line once the burst is spent

# Dispatch
DEFAULT_TRIGGER = "!"
UNAUTHORIZED_REPLY = "You are not authorized to do that."
