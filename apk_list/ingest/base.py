"""Base catalog fetcher interface and fetch error types."""

from abc import ABC, abstractmethod
from typing import Optional

from apk_list.models import Product


class FetchError(RuntimeError):
    """Base class for failures retrieving the catalog."""
    pass


class BlockedError(FetchError):
    """Raised when access is refused (401, 403), usually a bad API key."""
    pass


class PermanentURLError(FetchError):
    """Raised when the catalog URL does not exist (404)."""
    pass


class TransientFetchError(FetchError):
    """Raised when fetch fails after retries (5xx, timeouts, etc.)."""
    pass


class RateLimitedError(FetchError):
    """Raised when rate limited (429)."""

    def __init__(self, retry_after: Optional[int] = None):
        super().__init__("Rate limited")
        self.retry_after = retry_after


class CatalogParseError(FetchError):
    """Raised when the catalog payload is not a JSON list of products."""
    pass


class CatalogFetcher(ABC):
    """Abstract base class for catalog sources."""

    @abstractmethod
    async def fetch_all_products(self) -> list[Product]:
        """
        Fetch the retailer's full product catalog.

        Returns:
            Every product the source returned that passed validation

        Raises:
            FetchError: If the catalog could not be retrieved or parsed
        """
        pass

    async def close(self):
        """Release any network resources held by the fetcher."""
        pass
