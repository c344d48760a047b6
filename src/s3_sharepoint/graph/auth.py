"""Client-credentials token broker for Microsoft Graph."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import jwt
import msal

if TYPE_CHECKING:
    from s3_sharepoint.config import AppConfig

logger = logging.getLogger(__name__)

GRAPH_SCOPES = ["https://graph.microsoft.com/.default"]
AUTHORITY_BASE_URL = "https://login.microsoftonline.com"


class GraphAuthError(Exception):
    """Raised when the token exchange fails or returns an unusable token."""


@dataclass(frozen=True)
class AccessToken:
    """Bearer token together with the expiry read from its ``exp`` claim."""

    value: str
    expires_at: datetime

    def is_valid(self, now: datetime | None = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now < self.expires_at


def token_expiry(token: str) -> datetime:
    """Read the ``exp`` claim of a JWT without verifying its signature.

    The token comes straight from the identity platform over TLS, so only its
    expiry is of interest here.

    Raises:
        GraphAuthError: If the token cannot be decoded or has no usable ``exp``.
    """
    try:
        claims = jwt.decode(token, options={"verify_signature": False, "verify_exp": False})
    except jwt.PyJWTError as exc:
        raise GraphAuthError(f"Access token could not be decoded: {exc}") from exc

    exp = claims.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        raise GraphAuthError("Access token has no numeric 'exp' claim")
    try:
        return datetime.fromtimestamp(exp, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as exc:
        raise GraphAuthError(f"Access token 'exp' claim out of range: {exp}") from exc


class CredentialBroker:
    """Keeps a Graph access token valid for concurrent callers.

    One instance is shared by every request of the process. The cached token
    is read under a lock; when it has expired the caller performs the
    exchange itself and stores the result. Refreshes are not deduplicated, so
    callers racing on an expired token may each exchange, and the last one to
    finish wins the cache slot.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        tenant_id: str,
        scopes: list[str] | None = None,
        authority_base_url: str = AUTHORITY_BASE_URL,
    ) -> None:
        """Initialise the MSAL confidential client application.

        Args:
            client_id: Entra ID application (client) ID.
            client_secret: Entra ID application client secret.
            tenant_id: Entra ID tenant ID.
            scopes: Scopes requested in the exchange (default: Graph ``.default``).
            authority_base_url: Identity platform base URL.
        """
        authority = f"{authority_base_url.rstrip('/')}/{tenant_id}"
        self._app = msal.ConfidentialClientApplication(
            client_id=client_id,
            client_credential=client_secret,
            authority=authority,
        )
        self._scopes = list(scopes or GRAPH_SCOPES)
        self._token: AccessToken | None = None
        self._lock = asyncio.Lock()

    async def get_token(self) -> AccessToken:
        """Return the cached token, exchanging client credentials if it expired.

        Raises:
            GraphAuthError: If the exchange fails or yields an unusable token.
        """
        async with self._lock:
            cached = self._token
        if cached is not None and cached.is_valid():
            logger.debug(
                "[get_token] cached token still valid; expires_at:%s",
                cached.expires_at.isoformat(),
            )
            return cached

        token = await asyncio.to_thread(self._exchange)

        async with self._lock:
            self._token = token
        logger.info("[get_token] new token stored; expires_at:%s", token.expires_at.isoformat())
        return token

    def _exchange(self) -> AccessToken:
        """Run the client-credentials grant against the token endpoint."""
        try:
            result: dict[str, Any] = self._app.acquire_token_for_client(scopes=self._scopes) or {}
        except Exception as exc:
            logger.error("[_exchange] token endpoint call failed; error:%s", type(exc).__name__)
            raise GraphAuthError(f"Token endpoint call failed: {exc}") from exc

        if "access_token" not in result:
            error = result.get("error", "unknown_error")
            description = result.get("error_description", "No description provided")
            logger.error("[_exchange] token acquisition failed; error:%s", error)
            raise GraphAuthError(f"Token acquisition failed: {error}: {description}")

        value = str(result["access_token"])
        return AccessToken(value=value, expires_at=token_expiry(value))


def credential_broker_from_config(config: AppConfig) -> CredentialBroker:
    """Construct a CredentialBroker from application configuration.

    Args:
        config: Application configuration instance.

    Returns:
        Configured CredentialBroker instance.
    """
    return CredentialBroker(
        client_id=config.client_id,
        client_secret=config.client_secret,
        tenant_id=config.tenant_id,
        scopes=config.scopes,
        authority_base_url=config.authority_base_url,
    )
