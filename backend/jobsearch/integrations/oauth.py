import logging

import httpx

from jobsearch.config import Settings
from jobsearch.errors import AuthenticationError, ConfigurationError

logger = logging.getLogger(__name__)


class TokenProvider:
    """OAuth2 client-credentials token for the France Travail API.

    The token is fetched once and kept for the lifetime of the provider.
    There is no refresh: callers authenticate again after ``clear()``.
    """

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings
        self._transport = transport
        self._token: str | None = None

    @property
    def token(self) -> str | None:
        return self._token

    def clear(self) -> None:
        self._token = None

    async def authenticate(
        self,
        client_id: str | None = None,
        client_secret: str | None = None,
        scope: str | None = None,
        token_url: str | None = None,
    ) -> str:
        client_id = client_id or self.settings.france_travail_client_id
        client_secret = client_secret or self.settings.france_travail_client_secret
        scope = scope or self.settings.france_travail_scope
        token_url = token_url or self.settings.france_travail_token_url

        if not client_id or not client_secret:
            raise ConfigurationError(
                "France Travail credentials are missing (client id / client secret)"
            )

        data = {
            "grant_type": "client_credentials",
            "client_id": client_id,
            "client_secret": client_secret,
            "scope": scope,
        }
        timeout = httpx.Timeout(None, connect=self.settings.http_timeout)
        async with httpx.AsyncClient(
            timeout=timeout, transport=self._transport
        ) as client:
            # httpx form-encodes ``data`` as application/x-www-form-urlencoded
            response = await client.post(token_url, data=data)

        if response.status_code != 200:
            logger.error(
                "Token request failed: HTTP %d - %s",
                response.status_code,
                response.text,
            )
            raise AuthenticationError(response.status_code, response.text)

        try:
            payload = response.json()
        except ValueError:
            payload = None
        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not token:
            logger.error("Token response has no access_token: %s", response.text)
            raise AuthenticationError(response.status_code, response.text)

        self._token = token
        logger.info("France Travail authentication succeeded")
        return token
