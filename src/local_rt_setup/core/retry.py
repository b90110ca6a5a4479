# local_rt_setup/core/retry.py
"""Fixed-interval polling used while waiting on the freshly started server.

`run_with_retry` sleeps, probes, and repeats until the probe's result
satisfies a predicate or the time budget runs out. Transport errors are
expected while the server is still binding its ports, so they are logged
and polling continues; any other exception raised by the probe aborts.
"""

import logging
import time
from typing import Callable, Tuple, Type, TypeVar

import requests

from local_rt_setup.error import ConnectionTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_INTERVAL_SECONDS = 10
DEFAULT_MAX_WAIT_SECONDS = 300
TRANSIENT_ERRORS: Tuple[Type[BaseException], ...] = (
    requests.exceptions.RequestException,
)


def max_attempts(interval: int, max_wait: int) -> int:
    if interval <= 0:
        raise ValueError("interval must be positive")
    return max(max_wait // interval, 0)


def run_with_retry(
    probe: Callable[[], T],
    is_success: Callable[[T], bool],
    interval: int = DEFAULT_INTERVAL_SECONDS,
    max_wait: int = DEFAULT_MAX_WAIT_SECONDS,
    description: str = "waiting for Artifactory",
    transient_errors: Tuple[Type[BaseException], ...] = TRANSIENT_ERRORS,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Polls `probe` until `is_success` accepts its result.

    Each attempt first sleeps `interval` seconds, so at most
    ``max_wait // interval`` probes are made.

    Args:
        probe: Called once per attempt.
        is_success: Decides whether a probe result ends the polling.
        interval: Seconds to sleep before each attempt.
        max_wait: Total time budget in seconds.
        description: Used in log lines and the timeout error.
        transient_errors: Exception types logged and absorbed.
        sleep: Sleep function.

    Returns:
        The first probe result accepted by `is_success`.

    Raises:
        ConnectionTimeoutError: If no attempt succeeds within the budget.
    """
    attempts = max_attempts(interval, max_wait)
    retry_msg = f"Trying again in {interval} seconds."
    logger.info(f"Start {description} (up to {attempts} attempts)...")

    for attempt in range(1, attempts + 1):
        sleep(interval)
        try:
            result = probe()
        except transient_errors as e:
            logger.info(f"Attempt {attempt}/{attempts}: received error: {e}. {retry_msg}")
            continue

        if is_success(result):
            logger.debug(f"Done {description} after {attempt} attempt(s).")
            return result
        logger.info(f"Attempt {attempt}/{attempts}: not ready yet. {retry_msg}")

    raise ConnectionTimeoutError(description, attempts)
