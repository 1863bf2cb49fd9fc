"""insee_sirene.transport

`requests` wrapper retrying connection failures and 5xx responses a bounded
number of times with a fixed delay between attempts.
"""
from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

import requests

from .errors import ConnectionFailure, HttpStatusFailure, TransportFailure

__all__ = [
    "FailureKind",
    "RetryPolicy",
    "should_retry",
    "RetryingTransport",
]

logger = logging.getLogger(__name__)


class FailureKind(enum.Enum):
    NONE = "none"
    CONNECTION = "connection"
    OTHER = "other"


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = 2
    retry_delay_ms: int = 500

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.retry_delay_ms < 0:
            raise ValueError("retry_delay_ms must be >= 0")


def should_retry(
    attempts: int,
    failure_kind: FailureKind,
    status_code: Optional[int],
    max_retries: int,
) -> bool:
    """Decide whether another attempt should be made.

    *attempts* counts the retries already performed (0 after the first try).
    """
    if attempts >= max_retries:
        return False
    if failure_kind is FailureKind.CONNECTION:
        return True
    if status_code is not None and status_code >= 500:
        return True
    return False


class RetryingTransport:
    """Blocking HTTP transport owning one `requests.Session`.

    ``policy`` may be a `RetryPolicy` or a zero-argument callable returning
    one, so that an owner can change its retry settings between calls.
    """

    def __init__(
        self,
        policy: RetryPolicy | Callable[[], RetryPolicy] = RetryPolicy(),
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._policy = policy
        self.timeout = timeout or None
        self.session = session or requests.Session()
        self._sleep = sleep

    @property
    def policy(self) -> RetryPolicy:
        return self._policy() if callable(self._policy) else self._policy

    def send(self, method: str, url: str, **options: Any) -> requests.Response:
        """Send the request, retrying per `should_retry`; return a 2xx response."""
        policy = self.policy
        options.setdefault("timeout", self.timeout)
        attempts = 0
        while True:
            response: Optional[requests.Response] = None
            error: Optional[requests.RequestException] = None
            kind = FailureKind.NONE
            logger.debug("%s %s (attempt %d)", method, url, attempts + 1)
            try:
                response = self.session.request(method, url, **options)
            except requests.ConnectionError as exc:
                error, kind = exc, FailureKind.CONNECTION
            except requests.RequestException as exc:
                error, kind = exc, FailureKind.OTHER

            status = response.status_code if response is not None else None
            if not should_retry(attempts, kind, status, policy.max_retries):
                break
            attempts += 1
            delay = policy.retry_delay_ms / 1000
            logger.warning(
                "Retrying %s %s in %.3fs (retry %d/%d, reason: %s)",
                method, url, delay, attempts, policy.max_retries,
                f"HTTP {status}" if status is not None else kind.value,
            )
            if delay:
                self._sleep(delay)

        if error is not None:
            if kind is FailureKind.CONNECTION:
                raise ConnectionFailure(f"Could not connect to {url}: {error}") from error
            raise TransportFailure(f"{method} {url} failed: {error}") from error
        if response is None:
            raise TransportFailure(f"{method} {url} returned no response")
        if not 200 <= response.status_code < 300:
            logger.debug("%s %s returned HTTP %d", method, url, response.status_code)
            raise HttpStatusFailure(response.status_code, url, response.text)
        return response

    def close(self) -> None:
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
