# local_rt_setup/core/readiness.py
import logging
import time
from typing import Callable

from local_rt_setup.core.client import ArtifactoryClient
from local_rt_setup.core.retry import (
    DEFAULT_INTERVAL_SECONDS,
    DEFAULT_MAX_WAIT_SECONDS,
    run_with_retry,
)

logger = logging.getLogger(__name__)


def wait_for_successful_ping(
    client: ArtifactoryClient,
    interval: int = DEFAULT_INTERVAL_SECONDS,
    max_wait: int = DEFAULT_MAX_WAIT_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """Blocks until the ping endpoint answers 200.

    Connection errors and non-200 answers keep the loop going.

    Raises:
        ConnectionTimeoutError: If Artifactory is not up within `max_wait`.
    """

    def probe() -> int:
        status = client.ping()
        if status != 200:
            logger.info(f"Artifactory response: {status}")
        return status

    run_with_retry(
        probe,
        lambda status: status == 200,
        interval=interval,
        max_wait=max_wait,
        description="waiting for a successful connection with Artifactory",
        sleep=sleep,
    )
    logger.info("Artifactory is up!")
