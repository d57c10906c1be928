"""HTTP GET with a timeout and a fixed-delay retry budget, shared by all HTTP sources."""

from typing import Any, Callable, Optional

import requests

from .errors import TransientSourceError
from .logger import get_logger
from .retry import RetryError, fixed_delay, should_retry_http_status

logger = get_logger()


class RetryableStatus(Exception):
    """A response status worth retrying (408, 429, 5xx)."""

    def __init__(self, response):
        self.response = response
        super().__init__(f"HTTP {response.status_code}")


class RetryingFetcher:
    """
    Performs one GET per attempt. Network errors, timeouts and retryable
    statuses are retried; anything else fails the source immediately.
    """

    def __init__(self, session=None, sleep: Optional[Callable[[float], None]] = None):
        self.session = session or requests.Session()
        self.sleep = sleep

    def _get(self, url: str, timeout: float):
        resp = self.session.get(url, timeout=timeout, headers={"Accept": "application/json"})
        if should_retry_http_status(resp.status_code):
            raise RetryableStatus(resp)
        return resp

    def fetch(self, url: str, timeout: float = 10.0, max_retries: int = 0, retry_delay: float = 1.0) -> Any:
        """Fetch URL and return the decoded JSON body.

        Args:
            url: Endpoint URL
            timeout: Per-attempt timeout in seconds
            max_retries: Additional attempts after the first
            retry_delay: Seconds between attempts

        Raises:
            TransientSourceError: On exhausted retries, non-2xx status or malformed JSON
        """
        def on_retry(attempt, exc, delay):
            logger.debug("Retrying request", url=url, attempt=attempt, delay=delay, error=str(exc))

        retry_kwargs = {"sleep": self.sleep} if self.sleep is not None else {}
        get = fixed_delay(
            max_retries=max_retries,
            delay=retry_delay,
            exceptions=(requests.exceptions.Timeout, requests.exceptions.ConnectionError, RetryableStatus),
            on_retry=on_retry,
            **retry_kwargs,
        )(self._get)

        try:
            resp = get(url, timeout)
            resp.raise_for_status()
        except RetryError as e:
            cause = e.__cause__
            if isinstance(cause, requests.exceptions.Timeout):
                raise TransientSourceError(url, f"timed out after {max_retries + 1} attempts") from e
            if isinstance(cause, RetryableStatus):
                raise TransientSourceError(url, f"HTTP {cause.response.status_code} after {max_retries + 1} attempts") from e
            raise TransientSourceError(url, f"connection failed: {cause}") from e
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "HTTPError"
            raise TransientSourceError(url, f"HTTP {status}") from e
        except requests.exceptions.RequestException as e:
            raise TransientSourceError(url, f"request error: {e}") from e

        try:
            return resp.json()
        except ValueError as e:
            raise TransientSourceError(url, "malformed JSON") from e
