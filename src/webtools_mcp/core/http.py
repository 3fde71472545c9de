"""Low-level HTTP client with timeout, retry, and error translation.

Owns the ``httpx.Client`` and provides ``request()`` / ``get()`` /
``post_json()`` helpers used by all services, plus ``stream()`` for bodies
that must be size-checked before they are read.  Transient failures are
retried with ``tenacity``; whatever still fails is raised as one of the
structured ``WebToolError`` subclasses.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, Optional

import httpx
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_incrementing,
)

from webtools_mcp.config import Settings
from webtools_mcp.safety.exceptions import (
    FetchTimeoutError,
    NetworkError,
    UpstreamHttpError,
)

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({408, 429})


def _is_retryable(exception: BaseException) -> bool:
    """Retry network-level failures, timeouts, 408/429 and 5xx responses."""
    if isinstance(exception, httpx.TransportError):
        return True
    if isinstance(exception, UpstreamHttpError):
        code = exception.status_code
        return code >= 500 or code in RETRYABLE_STATUS_CODES
    return False


def _log_retry(retry_state: RetryCallState) -> None:
    exception = retry_state.outcome.exception() if retry_state.outcome else None
    # args are (method, url) as passed to HttpClient._send / _open
    url = retry_state.args[1] if len(retry_state.args) > 1 else ""
    logger.warning(
        "Retry %d for %s after %s: %s",
        retry_state.attempt_number,
        url,
        type(exception).__name__,
        exception,
    )


class HttpClient:
    """Thin wrapper around ``httpx.Client`` with retries.

    Args:
        settings: Server-wide configuration.
        transport: Optional httpx transport (tests pass ``httpx.MockTransport``).
    """

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._settings = settings
        client_kwargs: Dict[str, Any] = {
            "follow_redirects": True,
            "headers": {"User-Agent": settings.user_agent},
        }
        if transport is not None:
            client_kwargs["transport"] = transport
        elif settings.proxy:
            client_kwargs["proxy"] = settings.proxy
        self.client = httpx.Client(**client_kwargs)

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def request(
        self,
        method: str,
        url: str,
        *,
        timeout: float,
        retries: Optional[int] = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request, retrying transient failures.

        Raises:
            UpstreamHttpError: Final response was not 2xx.
            FetchTimeoutError: Every attempt timed out.
            NetworkError: Connection, DNS or TLS failure.
        """
        return self._with_retries(
            self._send, method, url, timeout=timeout, retries=retries, **kwargs
        )

    def get(self, url: str, *, timeout: float, **kwargs: Any) -> httpx.Response:
        return self.request("GET", url, timeout=timeout, **kwargs)

    def post_json(
        self,
        url: str,
        payload: Dict[str, Any],
        *,
        timeout: float,
        **kwargs: Any,
    ) -> httpx.Response:
        return self.request("POST", url, timeout=timeout, json=payload, **kwargs)

    @contextmanager
    def stream(
        self,
        method: str,
        url: str,
        *,
        timeout: float,
        retries: Optional[int] = None,
        **kwargs: Any,
    ) -> Iterator[httpx.Response]:
        """Open a request whose body has not been read yet.

        Status and headers are available on entry; the body is only pulled
        when the caller iterates ``response.iter_bytes()``.  Opening the
        response is retried like ``request``; reading the body is not.  The
        response is closed on exit.

        Usage::

            with http.stream("GET", url, timeout=15) as response:
                for chunk in response.iter_bytes():
                    ...
        """
        response = self._with_retries(
            self._open, method, url, timeout=timeout, retries=retries, **kwargs
        )
        try:
            yield response
        except httpx.TimeoutException as e:
            raise FetchTimeoutError(url, timeout) from e
        except httpx.TransportError as e:
            raise NetworkError(url, e) from e
        finally:
            response.close()

    def close(self) -> None:
        self.client.close()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _with_retries(
        self,
        fn: Callable[..., httpx.Response],
        method: str,
        url: str,
        *,
        timeout: float,
        retries: Optional[int],
        **kwargs: Any,
    ) -> httpx.Response:
        if retries is None:
            retries = self._settings.max_retries
        retrying = Retrying(
            stop=stop_after_attempt(retries + 1),
            wait=wait_incrementing(
                start=self._settings.retry_delay_seconds,
                increment=self._settings.retry_delay_seconds,
            ),
            retry=retry_if_exception(_is_retryable),
            before_sleep=_log_retry,
            reraise=True,
        )
        try:
            return retrying(fn, method, url, timeout=timeout, **kwargs)
        except httpx.TimeoutException as e:
            raise FetchTimeoutError(url, timeout) from e
        except httpx.TransportError as e:
            raise NetworkError(url, e) from e

    def _send(self, method: str, url: str, *, timeout: float, **kwargs: Any) -> httpx.Response:
        response = self.client.request(method, url, timeout=timeout, **kwargs)
        if not response.is_success:
            raise _status_error(url, response)
        return response

    def _open(self, method: str, url: str, *, timeout: float, **kwargs: Any) -> httpx.Response:
        request = self.client.build_request(method, url, timeout=timeout, **kwargs)
        response = self.client.send(request, stream=True)
        if not response.is_success:
            # Error bodies are short; read one for the message, then release it
            try:
                response.read()
            finally:
                response.close()
            raise _status_error(url, response)
        return response


def _status_error(url: str, response: httpx.Response) -> UpstreamHttpError:
    body = ""
    try:
        body = response.text
    except (httpx.DecodingError, UnicodeDecodeError):
        pass
    return UpstreamHttpError(url, response.status_code, response.reason_phrase, body)
