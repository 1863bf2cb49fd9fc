"""insee_sirene.auth

OAuth2 client-credentials exchange and the read-through guard that puts a
bearer token on outgoing requests.
"""
from __future__ import annotations

import base64
import logging
from typing import Callable, Dict, Mapping, Optional

from .config import InseeSettings
from .errors import AuthenticationFailure, HttpStatusFailure, TransportFailure
from .token_store import CachedTokenStore, Token
from .transport import RetryingTransport
from .utils import build_query_string

__all__ = ["ENDPOINT_TOKEN", "VALIDITY_PERIOD", "TokenIssuer", "AuthGuard"]

logger = logging.getLogger(__name__)

ENDPOINT_TOKEN = "/token"
VALIDITY_PERIOD = 604800  # 7 days, requested; the server's expires_in is what gets cached


def basic_credentials(consumer_key: str, consumer_secret: str) -> str:
    raw = f"{consumer_key}:{consumer_secret}".encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


class TokenIssuer:
    """Exchange consumer key/secret for a bearer token and cache it."""

    def __init__(
        self,
        settings: InseeSettings,
        transport: RetryingTransport,
        store: CachedTokenStore,
        query_defaults: Optional[Callable[[], Mapping[str, object]]] = None,
    ) -> None:
        self.settings = settings
        self.transport = transport
        self.store = store
        self._query_defaults = query_defaults or dict

    def issue(self) -> Token:
        credentials = basic_credentials(
            self.settings.consumer_key,
            self.settings.consumer_secret.get_secret_value(),
        )
        url = self.settings.api_url + ENDPOINT_TOKEN + build_query_string(defaults=self._query_defaults())
        try:
            response = self.transport.send(
                "POST",
                url,
                headers={
                    "Content-Type": "application/x-www-form-urlencoded",
                    "Authorization": f"Basic {credentials}",
                },
                data={
                    "grant_type": "client_credentials",
                    "validity_period": VALIDITY_PERIOD,
                },
            )
        except (TransportFailure, HttpStatusFailure) as exc:
            raise AuthenticationFailure(f"Token request to {url} failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise AuthenticationFailure("Token response is not valid JSON") from exc

        if not isinstance(payload, dict):
            raise AuthenticationFailure("Malformed token response: expected a JSON object")
        value = payload.get("access_token")
        expires_in = payload.get("expires_in")
        if not isinstance(value, str) or not value:
            raise AuthenticationFailure("Malformed token response: missing or invalid access_token")
        if isinstance(expires_in, bool) or not isinstance(expires_in, int) or expires_in <= 0:
            raise AuthenticationFailure("Malformed token response: missing or invalid expires_in")
        token = Token(value=value, expires_in=expires_in)

        self.store.put(token, token.expires_in)
        logger.info("Issued new SIRENE access token (expires in %ss)", token.expires_in)
        return token


class AuthGuard:
    """Attach ``Authorization: Bearer`` to headers, issuing a token on a cache miss."""

    def __init__(self, store: CachedTokenStore, issuer: TokenIssuer) -> None:
        self.store = store
        self.issuer = issuer

    def ensure_authenticated(self, headers: Mapping[str, str]) -> Dict[str, str]:
        token = self.store.get()
        if token is None:
            token = self.issuer.issue().value
        authenticated = dict(headers)
        authenticated["Authorization"] = f"Bearer {token}"
        return authenticated
