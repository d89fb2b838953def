"""Request configuration building blocks for the resty-requests client."""

from .log import setup_logging

__version__ = "0.1.0"

__all__ = ["setup_logging"]
