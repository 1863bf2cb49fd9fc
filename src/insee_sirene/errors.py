"""insee_sirene.errors

Exceptions raised by the SIRENE client.
"""
from __future__ import annotations

from typing import Optional

__all__ = [
    "InseeError",
    "TransportFailure",
    "ConnectionFailure",
    "HttpStatusFailure",
    "AuthenticationFailure",
    "DecodeFailure",
]


class InseeError(Exception):
    """Base class for every error raised by this package."""


class TransportFailure(InseeError):
    """The request could not be completed (no response received)."""


class ConnectionFailure(TransportFailure):
    """No connection could be established to the API host."""


class HttpStatusFailure(InseeError):
    """A response was received with a non-2xx status code."""

    def __init__(self, status_code: int, url: str, body: Optional[str] = None):
        self.status_code = status_code
        self.url = url
        self.body = body
        super().__init__(f"HTTP {status_code} returned by {url}")


class AuthenticationFailure(InseeError):
    """The client-credentials exchange did not yield a usable token."""


class DecodeFailure(InseeError):
    """The response body is not valid JSON."""
