"""
Exponential backoff for transient Google Drive failures.

Rate limiting (HTTP 429), overloaded servers (HTTP 5xx) and flaky networks go
away if the request is repeated a little later. The delay before retry n is
``base_delay * 2**n``, capped at ``max_delay`` and scaled by a random factor
in [0.5, 1.5) so that requests made for several users at once spread out.

HTTP 401 is never transient: ``is_retryable`` must return False for it so the
caller can ask the user to sign in again.

USAGE:
------
    from utils.retry import retry_on_transient_error

    @retry_on_transient_error(is_retryable=_is_retryable_gdrive_error)
    def list_page():
        return request.execute()
"""

import time
import random
from functools import wraps
from typing import Callable, Optional


def backoff_delay(retry: int, base_delay: float, max_delay: float,
                  rand: Callable[[], float] = random.random) -> float:
    """Seconds to wait before retry number `retry` (0-indexed), with jitter."""
    return min(base_delay * (2 ** retry), max_delay) * (0.5 + rand())


def retry_on_transient_error(
    is_retryable: Callable[[Exception], bool],
    max_retries: int = 5,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    on_retry: Optional[Callable[[Exception, int, float], None]] = None,
    sleep: Callable[[float], None] = time.sleep,
):
    """
    Decorator that repeats a call while it fails with a retryable error.

    Args:
        is_retryable: Predicate on the raised exception.
        max_retries: Extra attempts after the first one.
        base_delay: Un-jittered delay before the first retry, in seconds.
        max_delay: Cap on the un-jittered delay.
        on_retry: Called as ``on_retry(exc, attempt, delay)`` before sleeping;
                  ``attempt`` counts failed attempts from 1.
        sleep: Replaced in tests.

    Raises:
        The first non-retryable exception, or the last retryable one once
        ``max_retries`` is used up.
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            failures = 0
            while True:
                try:
                    return func(*args, **kwargs)
                except Exception as exc:
                    if not is_retryable(exc) or failures >= max_retries:
                        raise
                    delay = backoff_delay(failures, base_delay, max_delay)
                    failures += 1
                    if on_retry:
                        on_retry(exc, failures, delay)
                    sleep(delay)

        return wrapper
    return decorator


# Status codes Drive returns for rate limiting and server-side trouble
TRANSIENT_HTTP_STATUS_CODES = frozenset({429, 500, 502, 503, 504})

# ConnectionError and TimeoutError are OSError subclasses; socket errors too
TRANSIENT_NETWORK_EXCEPTIONS = (OSError,)


def is_transient_network_error(exc: Exception) -> bool:
    """True for connection resets, timeouts and other socket-level failures."""
    return isinstance(exc, TRANSIENT_NETWORK_EXCEPTIONS)
