"""
CRM credential acquisition and caching.

Uses the OAuth client-credentials grant. The credential (access token plus the
instance URL the CRM assigns) is held by the provider instance and reused
until its validity window closes, then fetched again on the next request.
Concurrent callers that find it expired may both refresh; the second refresh
simply replaces the first.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

import httpx

from ..errors import AuthError
from ..logging import get_logger

logger = get_logger(__name__)

DEFAULT_TOKEN_TTL = timedelta(minutes=55)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Credential:
    """Bearer token for the CRM and the instance it is valid for."""

    token: str
    instance_url: str | None
    valid_until: datetime

    def is_valid(self, now: datetime) -> bool:
        return now < self.valid_until


class CrmTokenProvider:
    """
    Lazily fetches and caches the CRM access token.

    Args:
        http: Shared async HTTP client
        auth_url: Token endpoint
        client_id: OAuth client ID
        client_secret: OAuth client secret
        ttl: How long a fetched token is trusted
        clock: Returns the current UTC time (injected by tests)
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        auth_url: str,
        client_id: str,
        client_secret: str,
        ttl: timedelta = DEFAULT_TOKEN_TTL,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._http = http
        self._auth_url = auth_url
        self._client_id = client_id
        self._client_secret = client_secret
        self._ttl = ttl
        self._clock = clock
        self._credential: Credential | None = None

    async def get_credential(self) -> Credential:
        """
        Return the cached credential, fetching a new one if it has expired.

        Raises:
            AuthError: The token endpoint failed or returned no access token
        """
        credential = self._credential
        if credential is not None and credential.is_valid(self._clock()):
            return credential

        credential = await self._fetch()
        self._credential = credential
        return credential

    def invalidate(self) -> None:
        """Drop the cached credential so the next request fetches a new one."""
        self._credential = None

    async def _fetch(self) -> Credential:
        logger.info('auth.token_requested')
        try:
            response = await self._http.get(
                self._auth_url,
                params={
                    'grant_type': 'client_credentials',
                    'client_id': self._client_id,
                    'client_secret': self._client_secret,
                },
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise AuthError(
                f"Token request failed with HTTP {e.response.status_code}",
                context={'auth_url': self._auth_url},
            ) from e
        except httpx.HTTPError as e:
            raise AuthError(
                f"Token request failed: {e}",
                context={'auth_url': self._auth_url, 'error_type': type(e).__name__},
            ) from e
        except ValueError as e:
            raise AuthError(
                'Token endpoint returned a non-JSON body',
                context={'auth_url': self._auth_url},
            ) from e

        token = data.get('access_token') if isinstance(data, dict) else None
        if not token:
            raise AuthError(
                'Token endpoint response has no access_token',
                context={'auth_url': self._auth_url},
            )

        credential = Credential(
            token=token,
            instance_url=data.get('instance_url'),
            valid_until=self._clock() + self._ttl,
        )
        logger.info(
            'auth.token_acquired',
            instance_url=credential.instance_url,
            valid_until=credential.valid_until.isoformat(),
        )
        return credential
