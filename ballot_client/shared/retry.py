"""
Retry policy of the read layer.

Only reads are retried; mutating calls go through the TransactionCoordinator
exactly once. Transport failures are retried with backoff. Contract reverts
are deterministic and surface on the first attempt.
"""

import asyncio
import logging
from typing import Any, Callable, Optional, Tuple, Type, TypeVar

from web3.exceptions import (
    BadFunctionCallOutput,
    ProviderConnectionError,
)

from ballot_client.shared.exceptions import RetryableException

T = TypeVar("T")

logger = logging.getLogger(__name__)

# Network/RPC errors plus the RetryableException hierarchy
DEFAULT_RETRYABLE_EXCEPTIONS: Tuple[Type[Exception], ...] = (
    RetryableException,
    ConnectionError,
    TimeoutError,
    OSError,  # requests.ConnectionError lands here
    ProviderConnectionError,
    BadFunctionCallOutput,  # Malformed RPC responses
)


class RetryConfig:
    """
    Backoff settings shared by every read of a reader.

    Args:
        max_attempts: Total attempts, including the first
        base_delay: Delay before the second attempt, in seconds
        max_delay: Upper bound on any single delay
        exponential: Double the delay after each failed attempt
        retryable_exceptions: Exception types worth another attempt
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        exponential: bool = True,
        retryable_exceptions: Optional[Tuple[Type[Exception], ...]] = None,
    ):
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential = exponential
        self.retryable_exceptions = (
            retryable_exceptions or DEFAULT_RETRYABLE_EXCEPTIONS
        )

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after the given zero-based failed attempt."""
        if not self.exponential:
            return self.base_delay
        return min(self.base_delay * (2**attempt), self.max_delay)

    async def run(
        self,
        operation: Callable[..., T],
        *args: Any,
        operation_name: Optional[str] = None,
        **kwargs: Any,
    ) -> T:
        """Run a single read under this config."""
        return await retry_async_operation(
            operation,
            *args,
            config=self,
            operation_name=operation_name,
            **kwargs,
        )


async def retry_async_operation(
    operation: Callable[..., T],
    *args: Any,
    config: Optional[RetryConfig] = None,
    operation_name: Optional[str] = None,
    **kwargs: Any,
) -> T:
    """
    Await `operation(*args, **kwargs)`, retrying transient failures.

    The last exception is re-raised once every attempt has failed;
    non-retryable exceptions propagate immediately.
    """
    config = config or RetryConfig()
    name = operation_name or getattr(operation, "__name__", "operation")

    for attempt in range(config.max_attempts):
        try:
            return await operation(*args, **kwargs)
        except config.retryable_exceptions as e:
            if attempt == config.max_attempts - 1:
                logger.error(
                    f"{name} failed after {config.max_attempts} attempts: {e}"
                )
                raise

            delay = config.delay_for(attempt)
            logger.warning(
                f"Attempt {attempt + 1}/{config.max_attempts} failed for "
                f"{name}: {e}. Retrying in {delay:.1f}s..."
            )
            await asyncio.sleep(delay)

    raise ValueError(f"max_attempts must be positive, got {config.max_attempts}")


# Read layer policy
RPC_RETRY_CONFIG = RetryConfig(
    max_attempts=3,
    base_delay=1.0,
    max_delay=10.0,
    exponential=True,
)
