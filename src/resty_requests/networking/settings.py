"""Environment-driven settings for the builder and the client."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class ShapeStrategy(str, Enum):
    """How containers are classified as list-like or map-like.

    ``INTROSPECTING`` inspects mapping keys and reports a mapping keyed
    exactly ``1..n`` as list-like. ``CONSERVATIVE`` treats every
    mapping as map-like; only real sequences are list-like.
    """

    INTROSPECTING = "introspecting"
    CONSERVATIVE = "conservative"


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _strategy_env(name: str, default: ShapeStrategy) -> ShapeStrategy:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return ShapeStrategy(value.strip().lower())
    except ValueError:
        logger.warning("ignoring unknown %s=%r", name, value)
        return default


@dataclass(frozen=True)
class BuilderSettings:
    """Knobs for build_config."""

    strict: bool = False
    shape_strategy: ShapeStrategy = ShapeStrategy.INTROSPECTING

    @classmethod
    def from_env(cls) -> "BuilderSettings":
        """Create settings from environment variables at call time."""
        return cls(
            strict=_bool_env("RESTY_REQUESTS_STRICT", cls.strict),
            shape_strategy=_strategy_env(
                "RESTY_REQUESTS_SHAPE_STRATEGY", cls.shape_strategy
            ),
        )


@dataclass(frozen=True)
class ClientSettings:
    """Retry policy for HttpClient."""

    retries: int = 0
    backoff_base_seconds: float = 0.0

    def __post_init__(self) -> None:
        if self.retries < 0:
            raise ValueError("retries must be >= 0")
        if self.backoff_base_seconds < 0:
            raise ValueError("backoff_base_seconds must be >= 0")

    @classmethod
    def from_env(cls) -> "ClientSettings":
        retries = _int_env("RESTY_REQUESTS_RETRIES", cls.retries)
        backoff = _float_env(
            "RESTY_REQUESTS_BACKOFF", cls.backoff_base_seconds
        )
        return cls(
            retries=retries if retries >= 0 else cls.retries,
            backoff_base_seconds=(
                backoff if backoff >= 0 else cls.backoff_base_seconds
            ),
        )
