"""Request configuration layer and HTTP client exports."""

from .auth import basic_auth
from .client import HttpClient, infer_state
from .config import (
    DEFAULT_TIMEOUTS,
    RequestConfig,
    Timeouts,
    build_config,
)
from .errors import (
    ConfigurationError,
    HeaderNormalizationError,
    HttpClientError,
    KeyValueShapeError,
    RequestTimeoutError,
    RestyRequestsError,
    RetryableHttpError,
)
from .headers import BUILTIN_HEADERS, HeaderDict, normalize_header_name
from .pairs import OrderedList, to_pairs
from .settings import BuilderSettings, ClientSettings, ShapeStrategy
from .state import ConnectionState, HttpVersion
from .types import Err, Ok, Result

__all__ = [
    "BUILTIN_HEADERS",
    "DEFAULT_TIMEOUTS",
    "BuilderSettings",
    "ClientSettings",
    "ConfigurationError",
    "ConnectionState",
    "Err",
    "HeaderDict",
    "HeaderNormalizationError",
    "HttpClient",
    "HttpClientError",
    "HttpVersion",
    "KeyValueShapeError",
    "Ok",
    "OrderedList",
    "RequestConfig",
    "RequestTimeoutError",
    "RestyRequestsError",
    "Result",
    "RetryableHttpError",
    "ShapeStrategy",
    "Timeouts",
    "basic_auth",
    "build_config",
    "infer_state",
    "normalize_header_name",
    "to_pairs",
]
