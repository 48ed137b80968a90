"""Retry logic with linear backoff for RPC calls."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


class RetryConfig:
    """
    Configuration for retry behavior.

    Parameters
    ----------
    max_attempts : int
        Total number of attempts, including the first one
    base_delay : float
        Delay in seconds after the first failed attempt; later delays grow
        linearly with the attempt number

    """

    def __init__(self, max_attempts: int = 4, base_delay: float = 0.2) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if base_delay < 0:
            raise ValueError("base_delay must not be negative")
        self.max_attempts = max_attempts
        self.base_delay = base_delay

    def get_delay(self, attempt: int) -> float:
        """
        Calculate delay after a failed attempt using linear backoff.

        There is no jitter and no upper bound: attempt 10 with a 0.2s base
        waits 2.0s.

        Parameters
        ----------
        attempt : int
            Failed attempt number (1-indexed)

        Returns
        -------
        float
            Delay in seconds

        """
        return self.base_delay * attempt

    def __repr__(self) -> str:
        return f"RetryConfig(max_attempts={self.max_attempts}, base_delay={self.base_delay})"


class RetryExecutor:
    """
    Runs an async operation, re-invoking it on failure up to a fixed budget.

    Parameters
    ----------
    config : RetryConfig | None
        Retry configuration. Uses default config if None.
    sleep : Callable[[float], Awaitable[None]]
        Coroutine used for backoff waits, injectable for tests

    """

    def __init__(
        self,
        config: RetryConfig | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.config = config or RetryConfig()
        self._sleep = sleep

    async def execute(self, operation: Callable[[], Awaitable[T]], description: str = "rpc call") -> T:
        """
        Execute an operation with retry and linear backoff.

        Parameters
        ----------
        operation : Callable[[], Awaitable[T]]
            Zero-argument coroutine function performing one attempt
        description : str
            Label used in log messages

        Returns
        -------
        T
            Result of the first successful attempt

        Raises
        ------
        Exception
            The last attempt's exception, unchanged, once all attempts fail

        """
        attempt = 0
        while True:
            attempt += 1
            try:
                return await operation()
            except Exception as e:
                if attempt >= self.config.max_attempts:
                    logger.debug("%s failed after %d attempts", description, attempt)
                    raise

                delay = self.config.get_delay(attempt)
                logger.warning(
                    "%s failed (attempt %d/%d): %s; retrying in %.2fs",
                    description,
                    attempt,
                    self.config.max_attempts,
                    e,
                    delay,
                )
                await self._sleep(delay)
