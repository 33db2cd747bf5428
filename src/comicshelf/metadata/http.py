# ABOUTME: HTTP client abstraction and request throttling for bibliographic API calls.
# ABOUTME: Single-attempt GETs with an explicit timeout, plus a minimum-interval rate gate.

import logging
import time
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

import httpx

from comicshelf import __version__

logger = logging.getLogger(__name__)

# Seconds before an unresponsive lookup is abandoned. A hung request would
# otherwise stall the whole sequential batch.
LOOKUP_TIMEOUT = 10.0


class MetadataFetchError(Exception):
    """Raised when an HTTP request to a metadata API fails."""


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP GET operations against metadata APIs."""

    def get(self, url: str, params: dict[str, str] | None = None) -> dict[str, Any]: ...


class MinIntervalGate:
    """Cooperative throttle enforcing a minimum interval between calls.

    Callers invoke wait() immediately before the rate-limited operation. The
    first call never sleeps. Clock and sleep are injectable for testing.
    """

    def __init__(
        self,
        min_interval: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last: float | None = None

    @property
    def min_interval(self) -> float:
        return self._min_interval

    def wait(self) -> None:
        """Sleep if needed so calls are at least min_interval apart."""
        if self._min_interval > 0 and self._last is not None:
            elapsed = self._clock() - self._last
            if elapsed < self._min_interval:
                delay = self._min_interval - elapsed
                logger.debug("Throttling lookup for %.3fs", delay)
                self._sleep(delay)
        self._last = self._clock()


class ComicshelfHttpClient:
    """HTTP client for metadata API calls.

    Wraps httpx.Client with a fixed timeout. Each request is attempted once;
    any transport error or non-2xx status raises MetadataFetchError.
    """

    def __init__(
        self,
        *,
        timeout: float = LOOKUP_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        client_kwargs: dict[str, Any] = {
            "headers": {"User-Agent": f"comicshelf/{__version__}"},
            "timeout": timeout,
        }
        if transport is not None:
            client_kwargs["transport"] = transport
        self._client = httpx.Client(**client_kwargs)

    def get(self, url: str, params: dict[str, str] | None = None) -> dict[str, Any]:
        """Send a GET request and return the parsed JSON body.

        Raises:
            MetadataFetchError: On transport failure, non-2xx status, or a
                body that isn't valid JSON.
        """
        try:
            response = self._client.get(url, params=params)
        except httpx.HTTPError as exc:
            raise MetadataFetchError(f"Request failed: {url}: {exc}") from exc

        if not response.is_success:
            raise MetadataFetchError(f"HTTP {response.status_code} from {url}")

        try:
            return response.json()
        except ValueError as exc:
            raise MetadataFetchError(f"Invalid JSON from {url}: {exc}") from exc

    def close(self) -> None:
        self._client.close()
