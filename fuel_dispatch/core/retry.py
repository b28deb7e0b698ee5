"""
Backoff retry for engine units of work.

An allocation mutation locks the assignment, re-reads its ledger and writes
the truck in one transaction. If that transaction loses a lock race the
database rolls it back completely, so the mutation can simply be run again
from the first read. `async_retry` does that for the transient failures
listed in `RETRY_ON`; everything else surfaces on the first attempt.
"""

import asyncio
import logging
from dataclasses import dataclass
from functools import wraps
from typing import Any, Callable, Tuple, Type, TypeVar

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class RetryableError(Exception):
    """
    Transient failure; the same call may succeed once the contention clears.

    Raised for lock waits, deadlocks and serialization failures on the
    assignment, ledger or truck rows.
    """


class NonRetryableError(Exception):
    """
    Deterministic failure; running the call again cannot change the outcome.

    Every allocation domain error (missing rows, quantities outside the
    available fuel, lifecycle violations) derives from this.
    """


RETRY_ON: Tuple[Type[BaseException], ...] = (RetryableError, asyncio.TimeoutError)


@dataclass(frozen=True)
class BackoffPolicy:
    max_attempts: int = 3
    base_delay: float = 0.1
    max_delay: float = 2.0

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after the given zero-based failed attempt."""
        return min(self.base_delay * (2 ** attempt), self.max_delay)


def async_retry(
    max_attempts: int = 3,
    base_delay: float = 0.1,
    max_delay: float = 2.0
) -> Callable[[F], F]:
    """Re-run an async unit of work on transient failures.

    Args:
        max_attempts: total calls made before giving up
        base_delay: wait after the first failure, doubled on each further one
        max_delay: ceiling for any single wait

    The last transient error is re-raised once attempts are exhausted.
    """
    policy = BackoffPolicy(max_attempts, base_delay, max_delay)

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            for attempt in range(policy.max_attempts):
                try:
                    return await func(*args, **kwargs)
                except NonRetryableError:
                    raise
                except RETRY_ON as e:
                    if attempt + 1 >= policy.max_attempts:
                        logger.error(
                            f"{func.__name__} gave up after {policy.max_attempts} attempts: {e}",
                            extra={"attempts": policy.max_attempts},
                        )
                        raise
                    delay = policy.delay_for(attempt)
                    logger.warning(
                        f"{func.__name__} hit a transient failure, retrying in {delay:.2f}s "
                        f"(attempt {attempt + 1}/{policy.max_attempts}): {e}"
                    )
                    await asyncio.sleep(delay)

        return wrapper
    return decorator
