"""Synchronous HTTP client that sends requests described by RequestConfig.

The client is the consumer of the configuration layer: it reads a
RequestConfig without re-validating it and translates each field into the
arguments ``requests`` expects. Transport failures never raise; they come
back as an Err carrying request metadata and the lifecycle stage at which
the request failed. A config's ``error_filter`` is called with that stage
before the Err is built, and anything it raises propagates to the caller.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from time import sleep
from typing import Any, Callable

import requests

from .config import DEFAULT_TIMEOUTS, RequestConfig, Timeouts, build_config
from .errors import HttpClientError, RequestTimeoutError, RetryableHttpError
from .headers import HeaderDict
from .pairs import OrderedList, to_pairs
from .predicates import is_func, is_in_array, is_str
from .settings import ClientSettings
from .state import ConnectionState, HttpVersion
from .types import Err, Ok, Result

logger = logging.getLogger(__name__)

RETRYABLE_METHODS = ("GET", "HEAD")


def infer_state(
    error: requests.exceptions.RequestException,
) -> ConnectionState:
    """Return the lifecycle stage a requests exception was raised in."""
    exc = requests.exceptions
    if isinstance(
        error, (exc.MissingSchema, exc.InvalidSchema, exc.InvalidURL)
    ):
        return ConnectionState.UNREADY
    if isinstance(error, exc.ProxyError):
        return ConnectionState.PROXY
    if isinstance(error, exc.SSLError):
        return ConnectionState.HANDSHAKE
    if isinstance(error, (exc.ConnectTimeout, exc.ConnectionError)):
        return ConnectionState.CONNECT
    if isinstance(error, (exc.ReadTimeout, exc.TooManyRedirects)):
        return ConnectionState.RECV_HEADER
    if isinstance(error, (exc.ChunkedEncodingError, exc.ContentDecodingError)):
        return ConnectionState.RECV_BODY
    return ConnectionState.CLOSE


def _cookie_header(cookie: Any) -> str:
    if is_str(cookie):
        return cookie
    return "; ".join(f"{name}={value}" for name, value in to_pairs(cookie))


class HttpClient:
    """HTTP client driven by RequestConfig.

    Methods return a Result that contains either the ``requests.Response`` or
    an error plus request metadata.
    """

    def __init__(
        self,
        settings: ClientSettings | None = None,
        session: requests.Session | None = None,
    ) -> None:
        """Create a new HttpClient.

        Args:
            settings: Retry policy; read from the environment when omitted.
            session: Session to send through; a fresh one when omitted.
        """
        self._settings = settings or ClientSettings.from_env()
        self._session = session or requests.Session()

    @staticmethod
    def _get_timeout(config: RequestConfig) -> tuple[float, float]:
        """Return ``(connect, read)`` seconds; requests has no send timeout."""
        timeouts = config.timeouts
        if not isinstance(timeouts, Timeouts):
            logger.warning(
                "malformed timeouts %r, falling back to defaults", timeouts
            )
            timeouts = DEFAULT_TIMEOUTS
        connect, _, read = timeouts.as_seconds()
        return (connect, read)

    @staticmethod
    def _get_verify(config: RequestConfig) -> bool | str:
        ssl = config.ssl
        if ssl is None:
            return True
        if isinstance(ssl, Mapping):
            return ssl.get("verify", True)
        return ssl

    @staticmethod
    def _get_headers(config: RequestConfig) -> dict[str, str]:
        headers = {
            name: str(value)
            for name, value in HeaderDict(config.headers).canonical_items()
        }
        if config.auth is not None and "authorization" not in headers:
            headers["authorization"] = config.auth
        if config.cookie is not None and "cookie" not in headers:
            headers["cookie"] = _cookie_header(config.cookie)
        return headers

    @staticmethod
    def _get_data(config: RequestConfig) -> Any:
        body = config.body
        if isinstance(body, (Mapping, OrderedList)):
            return list(to_pairs(body))
        return body

    def _prepare(
        self,
        method: str,
        url: str,
        config: RequestConfig,
        params: Any,
    ) -> requests.PreparedRequest:
        request = requests.Request(
            method=method,
            url=url,
            headers=self._get_headers(config),
            data=self._get_data(config),
            json=config.json,
            files=config.files,
            params=params,
            hooks=config.hooks if isinstance(config.hooks, Mapping) else None,
        )
        prepared = self._session.prepare_request(request)
        user_type = "content-type" in config.headers
        if not config.use_default_type and not user_type:
            prepared.headers.pop("Content-Type", None)
        return prepared

    def _send(
        self,
        method: str,
        url: str,
        config: RequestConfig,
        params: Any,
        timeout: tuple[float, float],
    ) -> requests.Response:
        prepared = self._prepare(method, url, config, params)
        session = self._session
        if config.redirect_max_times is not None:
            # shallow copy shares adapters and cookies with self._session
            session = copy.copy(self._session)
            session.max_redirects = int(config.redirect_max_times)
        environment = session.merge_environment_settings(
            prepared.url,
            config.proxies or {},
            config.stream,
            self._get_verify(config),
            None,
        )
        return session.send(
            prepared,
            timeout=timeout,
            allow_redirects=config.allow_redirects,
            **environment,
        )

    def _max_attempts(self) -> int:
        """Return the total number of attempts for one request."""
        return 1 + max(0, self._settings.retries)

    def _is_retryable_exception(
        self, method: str, error: requests.exceptions.RequestException
    ) -> bool:
        """Return True for retryable transport errors."""
        if not is_in_array(method, RETRYABLE_METHODS):
            return False
        return isinstance(
            error,
            (requests.exceptions.Timeout, requests.exceptions.ConnectionError),
        )

    def _sleep_between_attempts(self, attempt: int) -> None:
        """Sleep between retry attempts using exponential backoff."""
        backoff_base = self._settings.backoff_base_seconds
        if backoff_base <= 0:
            return
        sleep(backoff_base * (2 ** max(0, attempt - 1)))

    def _build_meta(
        self,
        method: str,
        request_url: str,
        config: RequestConfig,
        response: requests.Response | None,
        context: Mapping[str, Any] | None,
        attempts: int,
        timeout: tuple[float, float],
        final_error: str | None = None,
    ) -> dict[str, Any]:
        """Construct metadata dictionary from response and context."""
        meta: dict[str, Any] = {}
        meta["method"] = method
        meta["url"] = request_url
        meta["version"] = str(config.version)
        meta["attempts"] = attempts
        meta["timeout_s"] = timeout
        if context:
            context_dict = dict(context)
            meta["context"] = context_dict
            for key, value in context_dict.items():
                meta.setdefault(key, value)

        if response is not None:
            meta["status"] = response.status_code
            meta["status_code"] = response.status_code
            meta["url"] = response.url
            meta["reason"] = response.reason
            try:
                meta["elapsed_s"] = response.elapsed.total_seconds()
            except AttributeError:
                pass  # In case elapsed is not available or mocked
        if final_error is not None:
            meta["final_error"] = final_error

        return meta

    def _handle_request_exception(
        self,
        method: str,
        request_url: str,
        config: RequestConfig,
        e: requests.exceptions.RequestException,
        context: Mapping[str, Any] | None,
        attempts: int,
        timeout: tuple[float, float],
    ) -> Result[Any, Exception]:
        """Map requests exceptions to resty-requests errors."""
        state = infer_state(e)
        meta = self._build_meta(
            method,
            request_url,
            config,
            e.response,
            context,
            attempts,
            timeout,
            final_error=type(e).__name__,
        )
        meta["state"] = state.display_name

        if is_func(config.error_filter):
            config.error_filter(state, e)

        if isinstance(e, requests.exceptions.Timeout):
            return Err(RequestTimeoutError(str(e)), meta=meta)

        if isinstance(e, requests.exceptions.ConnectionError):
            return Err(RetryableHttpError(str(e)), meta=meta)

        # Generic fallback for other request exceptions
        return Err(HttpClientError(str(e)), meta=meta)

    def _request(
        self,
        method: str,
        url: str,
        config: RequestConfig,
        *,
        context: Mapping[str, Any] | None,
        timeout: tuple[float, float],
        request_fn: Callable[[], requests.Response],
    ) -> Result[requests.Response, Exception]:
        """Execute request with retries and normalized metadata."""
        attempts = 0
        last_error: requests.exceptions.RequestException | None = None
        for _ in range(self._max_attempts()):
            attempts += 1
            try:
                response = request_fn()
                return Ok(
                    response,
                    meta=self._build_meta(
                        method=method,
                        request_url=url,
                        config=config,
                        response=response,
                        context=context,
                        attempts=attempts,
                        timeout=timeout,
                    ),
                )
            except requests.exceptions.RequestException as exc:
                last_error = exc
                if (
                    attempts >= self._max_attempts()
                    or not self._is_retryable_exception(method, exc)
                ):
                    break
                logger.debug(
                    "retrying %s %s after %s (attempt %d)",
                    method,
                    url,
                    type(exc).__name__,
                    attempts,
                )
                self._sleep_between_attempts(attempts)
            except Exception as exc:  # pragma: no cover - defensive fallback
                return Err(
                    HttpClientError(str(exc)),
                    meta=self._build_meta(
                        method=method,
                        request_url=url,
                        config=config,
                        response=None,
                        context=context,
                        attempts=attempts,
                        timeout=timeout,
                        final_error=type(exc).__name__,
                    ),
                )

        assert last_error is not None
        return self._handle_request_exception(
            method=method,
            request_url=url,
            config=config,
            e=last_error,
            context=context,
            attempts=attempts,
            timeout=timeout,
        )

    def send(
        self,
        method: str,
        url: str,
        config: RequestConfig,
        *,
        params: Any = None,
        context: Mapping[str, Any] | None = None,
    ) -> Result[requests.Response, Exception]:
        """Send one request described by an already built config.

        Args:
            method: HTTP method name.
            url: Absolute URL to request.
            config: Output of build_config.
            params: Optional query parameters.
            context: Optional caller context for logging/tracing.

        Returns:
            Result containing the response on success, or an error on failure.

        Raises:
            Exception: Whatever ``config.error_filter`` raises.
        """
        method = method.upper()
        if config.version is not HttpVersion.HTTP11:
            logger.debug(
                "%s requested for %s; requests sends HTTP/1.1",
                config.version,
                url,
            )
        timeout = self._get_timeout(config)
        return self._request(
            method,
            url,
            config,
            context=context,
            timeout=timeout,
            request_fn=lambda: self._send(
                method, url, config, params, timeout
            ),
        )

    def request(
        self,
        method: str,
        url: str,
        options: Mapping[str, Any] | None = None,
        *,
        params: Any = None,
        context: Mapping[str, Any] | None = None,
    ) -> Result[requests.Response, Exception]:
        """Build a config from ``options`` and send the request.

        Raises:
            ConfigurationError: ``options`` cannot be built into a config.
        """
        return self.send(
            method,
            url,
            build_config(options),
            params=params,
            context=context,
        )

    def get(
        self,
        url: str,
        options: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> Result[requests.Response, Exception]:
        return self.request("GET", url, options, **kwargs)

    def head(
        self,
        url: str,
        options: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> Result[requests.Response, Exception]:
        return self.request("HEAD", url, options, **kwargs)

    def post(
        self,
        url: str,
        options: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> Result[requests.Response, Exception]:
        return self.request("POST", url, options, **kwargs)
