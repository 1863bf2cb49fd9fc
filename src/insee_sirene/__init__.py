# noqa: D104
"""Top-level package for insee_sirene."""
from __future__ import annotations

from .errors import (
    AuthenticationFailure,
    ConnectionFailure,
    DecodeFailure,
    HttpStatusFailure,
    InseeError,
    TransportFailure,
)

__version__ = "0.1.0"
__all__ = [
    "InseeClient",
    "InseeSettings",
    "InseeError",
    "TransportFailure",
    "ConnectionFailure",
    "HttpStatusFailure",
    "AuthenticationFailure",
    "DecodeFailure",
]


def __getattr__(name):  # type: ignore[override]
    if name == "InseeClient":
        from .client import InseeClient

        return InseeClient
    if name == "InseeSettings":
        from .config import InseeSettings

        return InseeSettings
    raise AttributeError(name)
