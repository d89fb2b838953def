"""Request configuration model and the builder that fills it in.

build_config reconciles a loosely structured options mapping into one
RequestConfig. The builder is lenient by default: malformed timeouts,
redirect counts and auth shapes are repaired or dropped with a warning
rather than rejected. Strict mode turns those repairs into
ConfigurationError. Header names that cannot be canonicalized are an error
in both modes.
"""

from __future__ import annotations

import logging
from collections.abc import Hashable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, NamedTuple

from .auth import basic_auth
from .errors import ConfigurationError, KeyValueShapeError
from .headers import BUILTIN_HEADERS, HeaderDict, normalize_header_name
from .pairs import to_pairs
from .predicates import (
    Shapes,
    array_items,
    is_array,
    is_num,
    is_str,
    is_tab,
    shapes_for,
)
from .settings import BuilderSettings
from .state import HttpVersion

logger = logging.getLogger(__name__)


class Timeouts(NamedTuple):
    """Connect, send and read timeouts in milliseconds."""

    connect: float
    send: float
    read: float

    def as_seconds(self) -> tuple[float, float, float]:
        return (self.connect / 1000, self.send / 1000, self.read / 1000)


DEFAULT_TIMEOUTS = Timeouts(10 * 1000, 30 * 1000, 60 * 1000)
DEFAULT_REDIRECT_MAX_TIMES = 10

KNOWN_OPTIONS = frozenset(
    {
        "timeouts",
        "http10",
        "http2",
        "headers",
        "body",
        "ssl",
        "allow_redirects",
        "redirect_max_times",
        "error_filter",
        "proxies",
        "auth",
        "cookie",
        "json",
        "hooks",
        "stream",
        "use_default_type",
        "files",
    }
)


def _default_headers() -> HeaderDict:
    headers = HeaderDict(size_hint=len(BUILTIN_HEADERS))
    headers.update(BUILTIN_HEADERS)
    return headers


@dataclass(frozen=True)
class RequestConfig:
    """Fully defaulted settings for one outgoing request.

    Optional pass-through fields are ``None`` when the caller did not supply
    them; an empty container means "supplied but empty". Headers are copied
    and exposed read-only.
    """

    timeouts: Timeouts | tuple[Any, ...] | Mapping[Any, Any] = (
        DEFAULT_TIMEOUTS
    )
    version: HttpVersion = HttpVersion.HTTP11
    headers: Mapping[Hashable, Any] = field(default_factory=_default_headers)
    body: Any = None
    ssl: Any = None
    allow_redirects: bool = False
    redirect_max_times: int | float | None = None
    error_filter: Any = None
    proxies: Any = None
    auth: str | None = None
    cookie: Any = None
    json: Any = None
    hooks: Any = None
    stream: bool = True
    use_default_type: bool = True
    files: Any = None

    def __post_init__(self) -> None:
        headers = self.headers
        if isinstance(headers, HeaderDict):
            headers = headers.copy()
        else:
            headers = HeaderDict(headers)
        object.__setattr__(self, "headers", MappingProxyType(headers))


def _reject_or_warn(strict: bool, message: str, *args: Any) -> None:
    if strict:
        raise ConfigurationError(message % args)
    logger.warning(message, *args)


def _resolve_timeouts(
    value: Any, strict: bool, shapes: Shapes | None = None
) -> Timeouts | tuple[Any, ...] | Mapping[Any, Any]:
    if value is None:
        return DEFAULT_TIMEOUTS
    if not is_tab(value):
        _reject_or_warn(
            strict,
            "timeouts must be a container, got %r; using defaults",
            value,
        )
        return DEFAULT_TIMEOUTS

    if isinstance(value, Mapping):
        if not is_array(value, shapes):
            if strict:
                raise ConfigurationError(
                    f"timeouts mapping is not list-like: {value!r}"
                )
            logger.debug("keeping map-like timeouts as given: %r", value)
            return MappingProxyType(dict(value))
        items = tuple(array_items(value, shapes))
    else:
        items = tuple(value)
    if len(items) == 3:
        if strict and not all(is_num(item) and item >= 0 for item in items):
            raise ConfigurationError(
                f"timeouts must be non-negative numbers, got {items!r}"
            )
        return Timeouts(*items)

    if strict:
        raise ConfigurationError(
            f"timeouts must hold exactly 3 values, got {len(items)}"
        )
    logger.debug("keeping %d-element timeouts as given", len(items))
    return items


def _resolve_version(options: Mapping[str, Any]) -> HttpVersion:
    if options.get("http10"):
        return HttpVersion.HTTP10
    if options.get("http2"):
        return HttpVersion.HTTP2
    return HttpVersion.HTTP11


def _build_headers(
    value: Any, strict: bool, shapes: Shapes | None = None
) -> HeaderDict:
    headers = HeaderDict(size_hint=len(BUILTIN_HEADERS) + 3)

    if value:
        try:
            pairs = to_pairs(value, shapes)
        except KeyValueShapeError:
            if strict:
                raise
            logger.warning(
                "ignoring headers that are not a container: %r", value
            )
            pairs = []
        for name, header_value in pairs:
            if header_value is None:
                continue
            headers[normalize_header_name(name)] = header_value

    for name, header_value in BUILTIN_HEADERS.items():
        if name not in headers:
            headers[name] = header_value

    return headers


def _present(value: Any) -> Any:
    """Map ``False`` to ``None``; every other value counts as supplied."""
    return None if value is False else value


def _resolve_redirect_max_times(value: Any, strict: bool) -> int | float:
    if value is None or value is False:
        return DEFAULT_REDIRECT_MAX_TIMES
    if not is_num(value):
        _reject_or_warn(
            strict,
            "redirect_max_times must be a number, got %r; using %d",
            value,
            DEFAULT_REDIRECT_MAX_TIMES,
        )
        return DEFAULT_REDIRECT_MAX_TIMES
    if strict and (value < 1 or not float(value).is_integer()):
        raise ConfigurationError(
            f"redirect_max_times must be an integer >= 1, got {value!r}"
        )
    if value < 1:
        logger.debug("clamping redirect_max_times %r to 1", value)
        return 1
    return value


def _resolve_auth(value: Any, strict: bool) -> str | None:
    if value is None or value is False:
        return None
    if is_str(value):
        return value
    if isinstance(value, Mapping):
        if strict and not {"user", "pass"}.issubset(value.keys()):
            raise ConfigurationError(
                "auth mapping needs both 'user' and 'pass'"
            )
        return basic_auth(value.get("user"), value.get("pass"))
    if is_tab(value) and len(value) == 2:
        user, password = value
        return basic_auth(user, password)

    _reject_or_warn(
        strict, "dropping auth of unsupported shape %r", type(value)
    )
    return None


def build_config(
    options: Mapping[str, Any] | None = None,
    *,
    strict: bool | None = None,
    settings: BuilderSettings | None = None,
) -> RequestConfig:
    """Build the RequestConfig for one request.

    Args:
        options: Caller options; ``None`` yields every default.
        strict: Reject malformed values instead of repairing them. Defaults
            to ``settings.strict``.
        settings: Builder settings; read from the environment when omitted.
            When given, its shape strategy classifies list-like timeouts
            and headers in place of the process-wide one.

    Raises:
        ConfigurationError: ``options`` is not a mapping, a header name cannot
            be normalized, or strict validation failed.
    """
    if options is None:
        options = {}
    if not isinstance(options, Mapping):
        raise ConfigurationError(
            f"request options must be a mapping, got {type(options).__name__}"
        )
    if strict is None:
        strict = (settings or BuilderSettings.from_env()).strict
    shapes = shapes_for(settings.shape_strategy) if settings else None

    unknown = sorted(str(key) for key in options.keys() - KNOWN_OPTIONS)
    if unknown:
        if strict:
            raise ConfigurationError(f"unknown request options: {unknown}")
        logger.debug("ignoring unknown request options: %s", unknown)

    allow_redirects = bool(options.get("allow_redirects"))
    redirect_max_times = None
    if allow_redirects:
        redirect_max_times = _resolve_redirect_max_times(
            options.get("redirect_max_times"), strict
        )

    stream = options.get("stream")

    config = RequestConfig(
        timeouts=_resolve_timeouts(options.get("timeouts"), strict, shapes),
        version=_resolve_version(options),
        headers=_build_headers(options.get("headers"), strict, shapes),
        body=options.get("body"),
        ssl=options.get("ssl"),
        allow_redirects=allow_redirects,
        redirect_max_times=redirect_max_times,
        error_filter=options.get("error_filter"),
        proxies=options.get("proxies"),
        auth=_resolve_auth(options.get("auth"), strict),
        cookie=_present(options.get("cookie")),
        json=_present(options.get("json")),
        hooks=_present(options.get("hooks")),
        stream=True if stream is None else bool(stream),
        use_default_type=options.get("use_default_type") is not False,
        files=options.get("files"),
    )
    logger.debug(
        "built request config: version=%s redirects=%s stream=%s",
        config.version,
        config.redirect_max_times,
        config.stream,
    )
    return config


__all__ = [
    "DEFAULT_REDIRECT_MAX_TIMES",
    "DEFAULT_TIMEOUTS",
    "KNOWN_OPTIONS",
    "RequestConfig",
    "Timeouts",
    "build_config",
]
