"""Retry policy with exponential backoff for storage operations.

Only transient storage failures (lost connections, timeouts, pool exhaustion)
are retried. Constraint violations and domain outcomes are never retried, and
the error of the last attempt is re-raised unchanged.

Usage:
    policy = RetryPolicy(max_attempts=3, base_delay=0.1, max_delay=1.0)

    session = await with_retry(lambda: repository_call(...), policy)

Every operation handed to `with_retry` must be safe to issue again: inserts
carry a pre-generated primary key and state changes are conditioned on the
current state, so a retried change that already landed matches no rows.
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Type, TypeVar

from sqlalchemy import exc as sa_exc

from src.app.services.logger import get_logger, log_event
from src.domain.entities import SessionEvent

logger = get_logger(__name__)

T = TypeVar("T")


TRANSIENT_EXCEPTIONS: tuple[Type[BaseException], ...] = (
    sa_exc.OperationalError,
    sa_exc.InterfaceError,
    sa_exc.DisconnectionError,
    sa_exc.TimeoutError,  # QueuePool exhausted
    ConnectionError,
    TimeoutError,
)


def is_transient_error(error: BaseException) -> bool:
    """Whether a storage error may succeed when the operation is re-issued."""
    if isinstance(error, sa_exc.IntegrityError):
        return False
    if isinstance(error, sa_exc.DBAPIError) and error.connection_invalidated:
        return True
    return isinstance(error, TRANSIENT_EXCEPTIONS)


@dataclass(frozen=True)
class RetryPolicy:
    """Configuration for retry behavior.

    Attributes:
        max_attempts: Total attempts including the first one (default 3)
        base_delay: Base delay in seconds (default 0.1)
        max_delay: Upper bound for a single delay in seconds (default 1.0)
    """

    max_attempts: int = 3
    base_delay: float = 0.1
    max_delay: float = 1.0

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    def get_delay(self, attempt: int) -> float:
        """Delay after the given failed attempt (1-based)."""
        return min(self.base_delay * (2**attempt), self.max_delay)

    @classmethod
    def from_config(cls, config) -> "RetryPolicy":
        return cls(
            max_attempts=config.DB_RETRY_MAX_ATTEMPTS,
            base_delay=config.DB_RETRY_BASE_DELAY_MS / 1000,
            max_delay=config.DB_RETRY_MAX_DELAY_MS / 1000,
        )


DEFAULT_POLICY = RetryPolicy()


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: Optional[RetryPolicy] = None,
    *,
    operation_name: str = "storage_operation",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Await `operation()`, re-issuing it after transient storage failures.

    Args:
        operation: Zero-argument coroutine factory; called once per attempt
        policy: RetryPolicy to use (default: DEFAULT_POLICY)
        operation_name: Name reported in storage_retry events
        sleep: Awaitable used for backoff (injectable for tests)

    Returns:
        The operation's result

    Raises:
        The original exception when it is not transient or attempts run out
    """
    policy = policy or DEFAULT_POLICY

    for attempt in range(1, policy.max_attempts + 1):
        try:
            return await operation()
        except Exception as e:
            if not is_transient_error(e) or attempt >= policy.max_attempts:
                raise

            delay = policy.get_delay(attempt)
            log_event(
                logger,
                SessionEvent.storage_retry,
                level="warning",
                operation=operation_name,
                attempt=attempt,
                max_attempts=policy.max_attempts,
                delay=delay,
                error=type(e).__name__,
            )
            await sleep(delay)

    raise RuntimeError("Retry loop exited unexpectedly")
