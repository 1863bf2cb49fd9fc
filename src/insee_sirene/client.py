"""insee_sirene.client

Public client for the INSEE SIRENE API: company lookups by SIREN (legal
unit) and SIRET (establishment) number.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Optional

import requests

from .auth import AuthGuard, TokenIssuer
from .config import InseeSettings
from .errors import DecodeFailure
from .token_store import CachedTokenStore, TokenStore, default_store
from .transport import RetryingTransport, RetryPolicy
from .utils import build_query_string, normalize_identifier, version_segment

__all__ = ["InseeClient", "ENDPOINT_SIRENE"]

logger = logging.getLogger(__name__)

ENDPOINT_SIRENE = "/entreprises/sirene"


class InseeClient:
    """Client for the SIRENE API.

    ``additional_data`` is merged into the query string of every request,
    ``max_retries`` and ``retry_delay`` (milliseconds) drive the retry policy
    and may be changed at any time. ``timeout`` is in seconds, ``0`` meaning
    no timeout.

    Without ``store`` every client shares one process-wide cache under a
    single fixed key, so clients using different credentials or a different
    ``api_url`` must each be given their own ``store``.

    Example::

        client = InseeClient(timeout=10)
        record = client.siren("552 100 554")
    """

    def __init__(
        self,
        timeout: float = 0,
        settings: Optional[InseeSettings] = None,
        store: Optional[TokenStore] = None,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings or InseeSettings.from_env()
        self.additional_data: Dict[str, Any] = {}
        self.max_retries = 2
        self.retry_delay = 500
        self.headers = {"Content-Type": "application/json; charset=utf-8"}

        self.transport = RetryingTransport(
            policy=self._retry_policy,
            timeout=timeout,
            session=session,
            sleep=sleep,
        )
        self.token_store = CachedTokenStore(store if store is not None else default_store)
        self.issuer = TokenIssuer(
            self.settings,
            self.transport,
            self.token_store,
            query_defaults=lambda: self.additional_data,
        )
        self.guard = AuthGuard(self.token_store, self.issuer)

    def _retry_policy(self) -> RetryPolicy:
        return RetryPolicy(max_retries=self.max_retries, retry_delay_ms=self.retry_delay)

    # ------------------------------------------------------------------ lookups
    def siren(self, siren: str) -> Dict[str, Any]:
        """Company (unité légale) record for a SIREN number. Whitespace is removed first."""
        return self._lookup("siren", siren)

    def siret(self, siret: str) -> Dict[str, Any]:
        """Establishment record for a SIRET number. Whitespace is removed first."""
        return self._lookup("siret", siret)

    def access_token(self) -> str:
        """Request a fresh token from INSEE, cache it and return it."""
        return self.issuer.issue().value

    # ----------------------------------------------------------------- internals
    def endpoint(self) -> str:
        """SIRENE base path, with the configured version segment if any."""
        return ENDPOINT_SIRENE + version_segment(self.settings.sirene_api_version)

    def _lookup(self, kind: str, identifier: str) -> Dict[str, Any]:
        identifier = normalize_identifier(identifier)
        if not identifier:
            raise ValueError(f"{kind} number must not be empty")

        headers = self.guard.ensure_authenticated(self.headers)
        url = (
            self.settings.api_url
            + self.endpoint()
            + f"/{kind}/{identifier}"
            + build_query_string(defaults=self.additional_data)
        )
        response = self.transport.send("GET", url, headers=headers)
        try:
            return response.json()
        except ValueError as exc:
            raise DecodeFailure(f"Response from {url} is not valid JSON") from exc

    def close(self) -> None:
        self.transport.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
