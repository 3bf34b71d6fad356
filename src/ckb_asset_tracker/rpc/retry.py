"""Retry with exponential backoff and endpoint rotation for JSON-RPC calls."""

import logging
import time
from collections.abc import Callable
from typing import TypeVar

import httpx

T = TypeVar("T")

logger = logging.getLogger(__name__)


class RetryableHTTPStatusError(Exception):
    """Raised for HTTP responses worth retrying (5xx, 429)."""

    def __init__(self, response: httpx.Response) -> None:
        super().__init__(f"HTTP {response.status_code} from {response.request.url}")
        self.response = response


class RetryConfig:
    """
    Configuration for retry behavior.

    Parameters
    ----------
    max_retries : int
        Maximum number of retry attempts
    base_delay : float
        Initial delay in seconds before first retry
    max_delay : float
        Maximum delay between retries
    exponential_base : float
        Base for exponential backoff calculation
    retry_on : tuple[type[Exception], ...]
        Exception types that trigger a retry; anything else propagates at once

    """

    def __init__(
        self,
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        exponential_base: float = 2.0,
        retry_on: tuple[type[Exception], ...] = (httpx.TransportError, RetryableHTTPStatusError),
    ) -> None:
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.retry_on = retry_on

    def get_delay(self, attempt: int) -> float:
        """
        Calculate delay for a given retry attempt using exponential backoff.

        Parameters
        ----------
        attempt : int
            Current attempt number (0-indexed)

        Returns
        -------
        float
            Delay in seconds

        """
        delay = self.base_delay * (self.exponential_base**attempt)
        return min(delay, self.max_delay)


def call_with_retry(
    func: Callable[[], T],
    config: RetryConfig,
    on_retry: Callable[[Exception], None] | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Call ``func`` until it succeeds or retries are exhausted.

    Parameters
    ----------
    func : Callable[[], T]
        Zero-argument call to attempt
    config : RetryConfig
        Retry configuration
    on_retry : Callable[[Exception], None] | None
        Hook run after each retryable failure (e.g., endpoint rotation)
    sleep : Callable[[float], None]
        Sleep function, replaceable in tests

    Returns
    -------
    T
        Result of the first successful call

    Raises
    ------
    Exception
        The last retryable exception once retries are exhausted, or any
        non-retryable exception immediately

    """
    last_exception: Exception | None = None

    for attempt in range(config.max_retries + 1):
        try:
            return func()
        except config.retry_on as e:
            last_exception = e
            if on_retry is not None:
                on_retry(e)

            # Don't retry on last attempt
            if attempt == config.max_retries:
                break

            delay = config.get_delay(attempt)
            logger.debug(
                "Attempt %d/%d failed (%s), retrying in %.1fs",
                attempt + 1,
                config.max_retries + 1,
                e,
                delay,
            )
            sleep(delay)

    logger.debug("Giving up after %d attempts", config.max_retries + 1)
    raise last_exception  # type: ignore[misc]
