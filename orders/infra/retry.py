"""
Retry utilities with exponential backoff and jitter.
"""
import logging
import random
import time
from functools import wraps
from typing import Callable, TypeVar, Any

T = TypeVar('T')

logger = logging.getLogger(__name__)


def backoff_delay(attempt: int, initial_delay: float, max_delay: float, exponential_base: float, jitter: bool) -> float:
    """Delay before retry number ``attempt`` (0-based)."""
    delay = initial_delay * (exponential_base ** attempt)
    if jitter:
        # up to 25% extra
        delay += delay * 0.25 * random.random()
    return min(delay, max_delay)


def retry_with_backoff(
    max_retries: int = 2,
    initial_delay: float = 0.5,
    max_delay: float = 5.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
    exceptions: tuple = (Exception,),
):
    """
    Decorator for retrying functions with exponential backoff and jitter.

    Args:
        max_retries: Maximum number of retry attempts after the first call
        initial_delay: Initial delay in seconds
        max_delay: Maximum delay in seconds
        exponential_base: Base for exponential backoff
        jitter: Whether to add random jitter to delay
        exceptions: Tuple of exceptions to catch and retry; anything else propagates at once
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            last_exception = None

            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    last_exception = e

                    if attempt == max_retries:
                        raise

                    delay = backoff_delay(attempt, initial_delay, max_delay, exponential_base, jitter)
                    logger.warning(
                        "retrying_call",
                        extra={
                            "operation": getattr(func, "__name__", repr(func)),
                            "attempt": attempt + 1,
                            "error": str(e),
                        },
                    )
                    time.sleep(delay)

            raise last_exception

        return wrapper
    return decorator
