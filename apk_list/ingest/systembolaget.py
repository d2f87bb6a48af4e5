"""Systembolaget product catalog client."""

import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from apk_list.ingest.base import CatalogFetcher, CatalogParseError
from apk_list.ingest.http_client import SitePolicy, fetch_with_policy
from apk_list.models import Product

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_URL = "https://api-extern.systembolaget.se/product/v1/product"
API_KEY_HEADER = "Ocp-Apim-Subscription-Key"


class SystembolagetClient(CatalogFetcher):
    """
    Fetches the full product list from the Systembolaget API.

    The endpoint returns every product in a single JSON array. Records that
    do not validate as a Product (for example a missing price or volume) are
    skipped and logged rather than failing the whole fetch.
    """

    def __init__(
        self,
        api_key: str,
        url: str = DEFAULT_CATALOG_URL,
        timeout: float = 60.0,
        max_attempts: int = 3,
        backoff_factor: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            api_key: Subscription key for the retailer API
            url: Product list endpoint
            timeout: Read timeout in seconds (the full catalog is large)
            max_attempts: Attempts per fetch before giving up
            backoff_factor: Multiplier for the retry delay
            transport: Optional httpx transport (used by tests)
        """
        self.api_key = api_key
        self.url = url
        self.policy = SitePolicy(
            name="systembolaget",
            max_attempts=max_attempts,
            timeout=httpx.Timeout(connect=10.0, read=timeout, write=10.0, pool=10.0),
            backoff_factor=backoff_factor,
        )
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(transport=self._transport)
        return self._http_client

    async def close(self):
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def fetch_all_products(self) -> list[Product]:
        client = await self._get_client()
        response = await fetch_with_policy(
            client,
            self.url,
            self.policy,
            headers={API_KEY_HEADER: self.api_key},
        )

        try:
            payload = response.json()
        except ValueError as e:
            raise CatalogParseError(f"Catalog response is not JSON: {e}") from e

        if not isinstance(payload, list):
            raise CatalogParseError(
                f"Expected a JSON list of products, got {type(payload).__name__}"
            )

        products = self._parse_products(payload)
        logger.info(f"Fetched {len(products)} products ({len(payload) - len(products)} skipped)")
        return products

    @staticmethod
    def _parse_products(items: list[Any]) -> list[Product]:
        products = []
        for item in items:
            try:
                products.append(Product.model_validate(item))
            except ValidationError as e:
                ident = item.get("ProductId", "?") if isinstance(item, dict) else "?"
                logger.warning(
                    f"Skipping product {ident}: {e.error_count()} invalid field(s)"
                )
        return products
