import logging
import time
from typing import Callable, Tuple, Type, TypeVar

import requests

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSIENT_ERRORS: Tuple[Type[BaseException], ...] = (requests.Timeout, requests.ConnectionError)


def call_with_retry(
    fn: Callable[[], T],
    max_attempts: int = 3,
    delay_seconds: float = 1.0,
    retry_on: Tuple[Type[BaseException], ...] = TRANSIENT_ERRORS,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``fn`` up to ``max_attempts`` times, waiting a fixed delay between tries.

    Only exceptions listed in ``retry_on`` are retried; the last one is re-raised.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    for attempt in range(1, max_attempts + 1):
        try:
            return fn()
        except retry_on as e:
            if attempt == max_attempts:
                logger.warning("Giving up after %d attempts: %s", attempt, e)
                raise
            logger.info("Attempt %d/%d failed (%s), retrying in %.1fs",
                        attempt, max_attempts, e, delay_seconds)
            sleep(delay_seconds)
