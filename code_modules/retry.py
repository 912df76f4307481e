"""
Retry utility for upstream LLM calls.

Calls a function and, if it raises, retries a few times with exponential
backoff so temporary rate limits or network blips don't immediately fail
the request.

Example:
  text = with_retry(lambda: llm.inference_single_input(msg, prompt), max_attempts=3, base_delay=1.0)
"""
import logging
import time
from typing import Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryError(RuntimeError):
    """Raised when every attempt of an operation failed."""

    def __init__(self, attempts: int, last_exception: Optional[BaseException]):
        super().__init__(f"Operation failed after {attempts} attempt(s): {last_exception}")
        self.attempts = attempts
        self.last_exception = last_exception


def with_retry(
    operation: Callable[[], T],
    max_attempts: int = 3,
    base_delay: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Execute operation(). On failure wait base_delay * 2**attempt_index and
    try again. After max_attempts failures raise RetryError chained to the
    last exception.
    """
    max_attempts = max(1, max_attempts)
    name = getattr(operation, "__name__", "call")
    last_exception = None

    for attempt in range(max_attempts):
        try:
            return operation()
        except Exception as e:
            last_exception = e
            if attempt == max_attempts - 1:
                break
            delay = base_delay * (2 ** attempt)
            logger.warning(
                "Attempt %s/%s of %s failed (%s). Retrying in %.1fs",
                attempt + 1,
                max_attempts,
                name,
                e,
                delay,
            )
            sleep(delay)

    logger.error("%s failed after %s attempt(s): %s", name, max_attempts, last_exception)
    raise RetryError(max_attempts, last_exception) from last_exception
