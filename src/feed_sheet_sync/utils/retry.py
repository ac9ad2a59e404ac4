"""Bounded retry with exponential backoff for remote operations."""

import logging
import time
from typing import Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def with_retry(
    label: str,
    operation: Callable[[], T],
    attempts: int,
    base_delay: float,
    sleep: Callable[[float], None] = time.sleep
) -> T:
    """
    Call ``operation`` until it succeeds or ``attempts`` calls have been made.

    The delay before attempt ``i + 1`` is ``base_delay * 2 ** (i - 1)``.

    Args:
        label: Name of the operation used in log messages
        operation: Zero-argument callable doing the remote work
        attempts: Maximum number of calls (at least one call is always made)
        base_delay: Delay in seconds before the second attempt
        sleep: Function used to wait between attempts

    Returns:
        The result of the first successful call

    Raises:
        Exception: The failure of the last attempt
    """
    attempts = max(1, int(attempts))
    for attempt in range(1, attempts + 1):
        try:
            return operation()
        except Exception as e:
            if attempt >= attempts:
                logger.error(f"{label} failed after {attempts} attempts: {e}")
                raise
            delay = base_delay * (2 ** (attempt - 1))
            logger.warning(
                f"{label} failed (attempt {attempt}/{attempts}): {e}. Retry in {delay:g}s"
            )
            sleep(delay)
