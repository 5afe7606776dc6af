"""
Transport executors.

An executor takes a request that already passed validation and reports how
the endpoint answered. Two are provided:
- HttpExecutor: real HTTP via requests, with retries on server errors
- SyntheticExecutor: random but plausible answers, no network
"""

import logging
import random
import time
from dataclasses import dataclass
from typing import Optional

import requests

from .request_parser import ParsedRequest


logger = logging.getLogger(__name__)


# Retry configuration
MAX_RETRIES = 3
INITIAL_BACKOFF_SECONDS = 0.5
BACKOFF_MULTIPLIER = 2.0

DEFAULT_TIMEOUT_SECONDS = 5.0

STATUS_REASONS = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    429: "Too Many Requests",
    500: "Internal Server Error",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Timeout",
}


@dataclass(frozen=True)
class ApiHealthStatus:
    """
    How an endpoint answered.

    status_code is -1 when no response was received.
    """

    status_code: int
    response_time_ms: int
    healthy: bool
    error_message: Optional[str] = None


def describe_status(status_code: int) -> str:
    """Error message for a non-2xx status code."""
    reason = STATUS_REASONS.get(status_code, f"HTTP Status {status_code}")
    if 400 <= status_code < 500:
        return f"Client error: {reason}"
    if 500 <= status_code < 600:
        return f"Server error: {reason}"
    return f"Unknown error with status code {status_code}"


class HttpExecutor:
    """
    Sends requests over HTTP.

    Server errors (5xx) and transport failures are retried with exponential
    backoff. Transport failures after the last attempt give status -1.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
        max_retries: int = MAX_RETRIES,
        initial_backoff: float = INITIAL_BACKOFF_SECONDS,
    ):
        """
        Initialize executor.

        Args:
            timeout: Per-attempt timeout in seconds
            session: Session to use (a new one by default)
            max_retries: Attempts before giving up
            initial_backoff: First backoff delay in seconds
        """
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.initial_backoff = initial_backoff
        self._session = session or requests.Session()

    def execute(self, request: ParsedRequest) -> ApiHealthStatus:
        """
        Send the request and report the outcome.

        Args:
            request: Validated request

        Returns:
            ApiHealthStatus for the last attempt
        """
        headers = dict(request.headers)
        data = None
        if request.body is not None:
            data = request.body.encode("utf-8")
            if not any(name.lower() == "content-type" for name in headers):
                headers["Content-Type"] = "application/json"
        headers = headers or None

        start_time = time.monotonic()
        last_error = "Unexpected error"

        for attempt in range(self.max_retries):
            try:
                response = self._session.request(
                    request.method,
                    request.url,
                    params=request.query_params or None,
                    headers=headers,
                    data=data,
                    timeout=self.timeout,
                )
            except requests.exceptions.RequestException as e:
                last_error = f"Request failed: {e}"
                logger.warning(
                    f"{request.method} {request.url} attempt {attempt + 1}/{self.max_retries} "
                    f"failed: {e}"
                )
            else:
                if response.status_code < 500 or attempt == self.max_retries - 1:
                    return self._status(response.status_code, start_time)
                logger.warning(
                    f"{request.method} {request.url} attempt {attempt + 1}/{self.max_retries} "
                    f"returned {response.status_code}"
                )

            if attempt < self.max_retries - 1:
                time.sleep(self.initial_backoff * (BACKOFF_MULTIPLIER ** attempt))

        return ApiHealthStatus(
            status_code=-1,
            response_time_ms=self._elapsed_ms(start_time),
            healthy=False,
            error_message=last_error,
        )

    def _status(self, status_code: int, start_time: float) -> ApiHealthStatus:
        healthy = 200 <= status_code < 300
        return ApiHealthStatus(
            status_code=status_code,
            response_time_ms=self._elapsed_ms(start_time),
            healthy=healthy,
            error_message=None if healthy else f"Unhealthy status code: {status_code}",
        )

    @staticmethod
    def _elapsed_ms(start_time: float) -> int:
        return int((time.monotonic() - start_time) * 1000)

    def close(self) -> None:
        self._session.close()


class SyntheticExecutor:
    """
    Produces simulated answers without touching the network.

    Roughly 70% success, 20% client errors, 10% server errors.
    """

    SUCCESS_CODES = (200, 201, 202, 204)
    CLIENT_ERROR_CODES = (400, 401, 403, 404)
    SERVER_ERROR_CODES = (500, 502, 503)

    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random(seed)

    def execute(self, request: ParsedRequest) -> ApiHealthStatus:
        roll = self._rng.randint(1, 10)
        if roll <= 7:
            status_code = self._rng.choice(self.SUCCESS_CODES)
        elif roll <= 9:
            status_code = self._rng.choice(self.CLIENT_ERROR_CODES)
        else:
            status_code = self._rng.choice(self.SERVER_ERROR_CODES)

        healthy = 200 <= status_code < 300
        logger.debug(f"Synthetic {request.method} {request.url} -> {status_code}")
        return ApiHealthStatus(
            status_code=status_code,
            response_time_ms=self._rng.randint(50, 499),
            healthy=healthy,
            error_message=None if healthy else describe_status(status_code),
        )

    def close(self) -> None:
        pass
