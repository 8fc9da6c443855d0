"""HTTP access to Archethic nodes.

Every request goes through :class:`NetworkClient`, which applies a
connect/read timeout pair and retries transient failures (timeouts,
refused connections, 408/429/5xx) with exponential backoff. Whatever
finally fails is raised as a :class:`NetworkError`.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, TypeVar

import requests
from requests.exceptions import ConnectionError, HTTPError, Timeout

logger = logging.getLogger(__name__)

T = TypeVar("T")

GRAPHQL_PATH = "/api"


class NetworkErrorType(Enum):
    TIMEOUT = "timeout"
    CONNECTION_ERROR = "connection_error"
    HTTP_ERROR = "http_error"
    QUERY_ERROR = "query_error"
    UNKNOWN = "unknown"


@dataclass
class NetworkError(Exception):
    error_type: NetworkErrorType
    message: str
    original_error: Exception | None = None
    status_code: int | None = None
    response_text: str | None = None

    def __str__(self) -> str:
        return self.message


@dataclass
class TimeoutConfig:
    connect_timeout: float = 5.0
    read_timeout: float = 15.0

    @property
    def request_timeout(self) -> tuple[float, float]:
        return (self.connect_timeout, self.read_timeout)


@dataclass
class RetryConfig:
    """Backoff schedule: ``base_delay * exponential_base ** attempt``, capped."""

    max_retries: int = 2
    base_delay: float = 0.5
    max_delay: float = 10.0
    exponential_base: float = 2.0
    retryable_status_codes: set[int] = field(
        default_factory=lambda: {408, 429, 500, 502, 503, 504}
    )

    def calculate_delay(self, attempt: int) -> float:
        return min(self.base_delay * self.exponential_base**attempt, self.max_delay)


DEFAULT_TIMEOUT_CONFIG = TimeoutConfig()
DEFAULT_RETRY_CONFIG = RetryConfig()

_ERROR_TYPES: tuple[tuple[type[Exception], NetworkErrorType], ...] = (
    (Timeout, NetworkErrorType.TIMEOUT),
    (ConnectionError, NetworkErrorType.CONNECTION_ERROR),
    (HTTPError, NetworkErrorType.HTTP_ERROR),
)


def classify_error(error: Exception) -> NetworkErrorType:
    if isinstance(error, NetworkError):
        return error.error_type
    for error_class, error_type in _ERROR_TYPES:
        if isinstance(error, error_class):
            return error_type
    return NetworkErrorType.UNKNOWN


def _status_of(error: Exception) -> int | None:
    return getattr(getattr(error, "response", None), "status_code", None)


def create_network_error(
    error: Exception, node_url: str, context: str = ""
) -> NetworkError:
    """Wrap a low level exception raised while talking to ``node_url``."""
    if isinstance(error, NetworkError):
        return error

    error_type = classify_error(error)
    status_code = response_text = None
    if error_type is NetworkErrorType.TIMEOUT:
        detail = f"Connection timeout. Node may be unavailable: {node_url}"
    elif error_type is NetworkErrorType.CONNECTION_ERROR:
        detail = f"Cannot connect to node: {node_url}. Check your network connection."
    elif error_type is NetworkErrorType.HTTP_ERROR:
        status_code = _status_of(error)
        response_text = getattr(error.response, "text", None)
        detail = f"HTTP error {status_code}: {response_text or 'Unknown error'}"
    else:
        detail = f"Network error: {error}"

    return NetworkError(
        error_type=error_type,
        message=f"{context}: {detail}" if context else detail,
        original_error=error,
        status_code=status_code,
        response_text=response_text,
    )


def should_retry(error: Exception, retry_config: RetryConfig) -> bool:
    if isinstance(error, (Timeout, ConnectionError)):
        return True
    return (
        isinstance(error, HTTPError)
        and _status_of(error) in retry_config.retryable_status_codes
    )


def _decode_body(response: requests.Response) -> dict[str, Any]:
    if not response.content:
        return {}
    try:
        return response.json()
    except ValueError:
        return {"message": response.text}


def _query_error_message(errors: list[Any]) -> str:
    return "; ".join(
        str(error.get("message", error)) if isinstance(error, dict) else str(error)
        for error in errors
    )


class NetworkClient:
    def __init__(
        self,
        node_url: str,
        timeout_config: TimeoutConfig | None = None,
        retry_config: RetryConfig | None = None,
        on_retry: Callable[[int, Exception, float], None] | None = None,
    ):
        self.node_url = node_url.rstrip("/")
        self.timeout_config = timeout_config or DEFAULT_TIMEOUT_CONFIG
        self.retry_config = retry_config or DEFAULT_RETRY_CONFIG
        self.on_retry = on_retry

    def _with_retry(self, operation: Callable[[], T], context: str = "") -> T:
        attempts = self.retry_config.max_retries + 1
        attempt = 0
        while True:
            try:
                return operation()
            except Exception as error:
                attempt += 1
                if attempt >= attempts or not should_retry(error, self.retry_config):
                    raise create_network_error(error, self.node_url, context) from error
                delay = self.retry_config.calculate_delay(attempt - 1)
                logger.warning(
                    "Request to %s failed (attempt %d/%d), retrying in %.1fs: %s",
                    self.node_url,
                    attempt,
                    attempts,
                    delay,
                    error,
                )
                if self.on_retry:
                    self.on_retry(attempt, error, delay)
                time.sleep(delay)

    def post(self, endpoint: str, context: str = "", **kwargs) -> dict[str, Any]:
        """POST to ``endpoint`` and return the decoded body.

        An empty body decodes to ``{}``; a non-JSON body to ``{"message": text}``.
        """
        url = f"{self.node_url}{endpoint}"
        kwargs.setdefault("timeout", self.timeout_config.request_timeout)

        def send() -> dict[str, Any]:
            response = requests.post(url, **kwargs)
            response.raise_for_status()
            return _decode_body(response)

        return self._with_retry(send, context)

    def graphql(self, query: str, context: str = "") -> dict[str, Any]:
        """Run a GraphQL query and return its ``data`` object.

        Errors reported in the response body are raised as
        ``NetworkError(QUERY_ERROR)`` and are never retried.
        """
        body = self.post(GRAPHQL_PATH, context=context, json={"query": query})
        errors = body.get("errors")
        if errors:
            detail = _query_error_message(errors)
            raise NetworkError(
                error_type=NetworkErrorType.QUERY_ERROR,
                message=f"{context}: {detail}" if context else detail,
            )
        return body.get("data") or {}
