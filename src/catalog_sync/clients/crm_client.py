"""
Async HTTP client for the CRM upsert APIs.

Handles:
- Bearer token injection from CrmTokenProvider
- Rebasing configured endpoint URLs onto the token's instance host
- Translating network failures and error responses into TransportError /
  ApplicationError (see delivery.verify)

Retries are not done here; RetryExecutor wraps each post_json() call.
"""

from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse, urlunparse

import httpx

from ..delivery.verify import verify_response
from ..errors import wrap_http_error
from ..logging import get_logger
from .auth import CrmTokenProvider

logger = get_logger(__name__)

PRODUCT_API_SEGMENT = 'ProductUpsertAPI'
PRICE_LIST_API_SEGMENT = 'PriceListUpsertAPI'
IMAGE_API_SEGMENT = 'UploadSKUImages'


def rebase_url(base_url: str, instance_url: str | None) -> str:
    """
    Move base_url onto the scheme and host of instance_url.

    The CRM hands out the instance host with each token; configured URLs only
    fix the path. Returns base_url unchanged when there is no usable
    instance URL.
    """
    if not instance_url:
        return base_url
    base = urlparse(base_url)
    instance = urlparse(instance_url)
    if not instance.scheme or not instance.netloc:
        return base_url
    return urlunparse(base._replace(scheme=instance.scheme, netloc=instance.netloc))


@dataclass(frozen=True)
class CrmEndpoints:
    """
    Upsert endpoint URLs per domain.

    Price list and image URLs fall back to the product URL with its API
    segment swapped.
    """

    product_url: str
    price_list_url: str | None = None
    image_url: str | None = None

    @property
    def products(self) -> str:
        return self.product_url

    @property
    def price_lists(self) -> str:
        return self.price_list_url or self.product_url.replace(
            PRODUCT_API_SEGMENT, PRICE_LIST_API_SEGMENT
        )

    @property
    def images(self) -> str:
        return self.image_url or self.product_url.replace(PRODUCT_API_SEGMENT, IMAGE_API_SEGMENT)


@dataclass(frozen=True)
class CrmResponse:
    """A verified CRM response."""

    status_code: int
    body: Any


class CrmClient:
    """
    Posts JSON documents to CRM endpoints.

    Args:
        tokens: Credential provider shared across requests
        http: Shared async HTTP client
        timeout: Seconds allowed per request
    """

    def __init__(
        self,
        tokens: CrmTokenProvider,
        http: httpx.AsyncClient,
        timeout: float = 30.0,
    ):
        self.tokens = tokens
        self._http = http
        self._timeout = timeout

    async def post_json(self, url: str, body: Any) -> CrmResponse:
        """
        POST a document or list of documents.

        Raises:
            AuthError: No credential could be obtained
            TransportError: Network failure, timeout or non-2xx status
            ApplicationError: 2xx response whose body reports failure
        """
        credential = await self.tokens.get_credential()
        target = rebase_url(url, credential.instance_url)

        try:
            response = await self._http.post(
                target,
                json=body,
                headers={
                    'Authorization': f'Bearer {credential.token}',
                    'Content-Type': 'application/json',
                },
                timeout=self._timeout,
            )
        except httpx.HTTPError as e:
            raise wrap_http_error(e, context={'url': target}) from e

        if response.status_code == 401:
            # Token revoked early; the next attempt fetches a fresh one
            self.tokens.invalidate()

        parsed = verify_response(response)
        logger.debug('crm.post_ok', url=target, status_code=response.status_code)
        return CrmResponse(status_code=response.status_code, body=parsed)
