from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..constants import IRC_CONNECT_BACKOFF_MAX
from ..logging_config import log_structured_error
from .internal import (
    ConfigError,
    InternalError,
    NetworkError,
    PluginRegistrationError,
    RegistrationError,
    TransportError,
)

T = TypeVar("T")


def log_error(message: str, error: BaseException, context: dict | None = None) -> None:
    """Logs an error message with the associated exception details.

    The exception is classified into a coarse error type so failures are
    counted per category.

    Args:
        message: A descriptive message about the error context.
        error: The exception instance to be logged.
        context: Optional additional context data for debugging.
    """
    error_type = "unknown"
    if isinstance(error, RegistrationError):
        error_type = "registration"
    elif isinstance(error, NetworkError | OSError | ConnectionError):
        error_type = "network"
    elif isinstance(error, PluginRegistrationError):
        error_type = "plugin"
    elif isinstance(error, ConfigError):
        error_type = "config"
    elif isinstance(error, InternalError):
        error_type = "internal"

    log_structured_error(
        error_type=error_type,
        message=f"{message}: {str(error)}",
        exception=error,
        context=context,
    )


async def retry_transport(
    operation: Callable[[], Awaitable[T]],
    context: str,
    max_attempts: int = 3,
) -> T:
    """Run a transport operation with exponential backoff using Tenacity.

    ``OSError`` and ``TimeoutError`` are retried; anything else propagates
    immediately. Exhaustion is reported as :class:`TransportError`.

    Args:
        operation: Async callable performing one attempt.
        context: Descriptive context for log messages.
        max_attempts: Maximum number of attempts.

    Returns:
        The result of the first successful attempt.

    Raises:
        TransportError: If every attempt failed.
    """

    def before_retry(retry_state):
        if retry_state.attempt_number > 1:
            logging.info(f"Retrying {context} (attempt {retry_state.attempt_number})")

    retrying = AsyncRetrying(
        stop=stop_after_attempt(max(1, max_attempts)),
        wait=wait_exponential(multiplier=1, max=IRC_CONNECT_BACKOFF_MAX),
        retry=retry_if_exception_type((OSError, TimeoutError)),
        before=before_retry,
        reraise=False,
    )
    try:
        return await retrying(operation)
    except RetryError as e:
        final = e.last_attempt.exception()
        log_error(
            f"{context} failed after {max_attempts} attempts",
            final or e,
            context={"operation": context, "attempts": max_attempts},
        )
        raise TransportError(
            f"{context} failed after {max_attempts} attempts: {final}",
            data={"attempts": max_attempts},
        ) from final
