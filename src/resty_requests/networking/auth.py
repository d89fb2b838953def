"""HTTP Basic credential encoding."""

from __future__ import annotations

from base64 import b64encode
from typing import Any


def basic_auth(user: Any, password: Any) -> str:
    """Return an ``Authorization`` value for HTTP Basic authentication.

    Neither part is validated; ``None`` encodes as an empty string.
    """
    user = "" if user is None else user
    password = "" if password is None else password
    token = b64encode(f"{user}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


__all__ = ["basic_auth"]
