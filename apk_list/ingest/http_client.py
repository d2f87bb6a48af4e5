"""HTTP GET with a per-site policy and status-aware error handling."""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Optional

import httpx

from apk_list.ingest.base import (
    BlockedError,
    PermanentURLError,
    RateLimitedError,
    TransientFetchError,
)

logger = logging.getLogger(__name__)

# Retryable exceptions (transport errors)
RETRYABLE_EXC = (
    httpx.ReadTimeout,
    httpx.ConnectTimeout,
    httpx.ConnectError,
    httpx.RemoteProtocolError,
    httpx.PoolTimeout,
)


@dataclass(frozen=True)
class SitePolicy:
    """Per-site HTTP request policy configuration."""

    name: str
    max_attempts: int = 3
    timeout: httpx.Timeout = None  # Will be set to default if None
    backoff_factor: float = 1.0  # Scales the exponential retry delay

    def __post_init__(self):
        """Set default timeout if not provided."""
        if self.timeout is None:
            object.__setattr__(
                self,
                'timeout',
                httpx.Timeout(connect=10.0, read=60.0, write=10.0, pool=10.0)
            )

    def backoff(self, attempt: int) -> float:
        """Seconds to wait before the next attempt."""
        return self.backoff_factor * ((2 ** attempt) + random.random())


def default_headers() -> dict[str, str]:
    """Headers sent with every catalog request."""
    return {
        "User-Agent": "apk-list/0.1",
        "Accept": "application/json",
        "Accept-Encoding": "gzip, deflate",
        "Cache-Control": "no-cache",
    }


def _retry_after_seconds(resp: httpx.Response) -> Optional[int]:
    retry_after = resp.headers.get("Retry-After")
    if not retry_after:
        return None
    try:
        return int(retry_after)
    except (ValueError, TypeError):
        return None


async def fetch_with_policy(
    client: httpx.AsyncClient,
    url: str,
    policy: SitePolicy,
    headers: Optional[dict[str, str]] = None,
) -> httpx.Response:
    """
    Fetch URL with per-site policy and status-aware error handling.

    Args:
        client: httpx AsyncClient instance
        url: URL to fetch
        policy: SitePolicy configuration
        headers: Optional additional headers (merged with defaults)

    Returns:
        httpx.Response on success

    Raises:
        BlockedError: If access is refused (401, 403)
        PermanentURLError: If URL is permanently invalid (404)
        RateLimitedError: If still rate limited (429) on the final attempt
        TransientFetchError: If fetch fails after retries
    """
    hdrs = default_headers()
    if headers:
        hdrs.update(headers)

    last_exc: Exception | None = None

    for attempt in range(1, policy.max_attempts + 1):
        is_last = attempt == policy.max_attempts
        try:
            resp = await client.get(
                url,
                headers=hdrs,
                timeout=policy.timeout,
                follow_redirects=True,
            )
        except RETRYABLE_EXC as e:
            if is_last:
                raise TransientFetchError(
                    f"{policy.name}: transport error after {policy.max_attempts} attempts: {url}"
                ) from e
            sleep_s = policy.backoff(attempt)
            logger.warning(
                f"{policy.name}: Transport error ({type(e).__name__}), "
                f"retrying in {sleep_s:.1f}s (attempt {attempt}/{policy.max_attempts})"
            )
            last_exc = e
            await asyncio.sleep(sleep_s)
            continue

        sc = resp.status_code

        if 200 <= sc < 300:
            return resp

        if sc == 404:
            raise PermanentURLError(f"{policy.name}: 404 for {url}")

        if sc in (401, 403):
            raise BlockedError(f"{policy.name}: {sc} for {url}")

        if sc == 429:
            last_exc = RateLimitedError(retry_after=_retry_after_seconds(resp))
            if is_last:
                raise last_exc
            if last_exc.retry_after is not None:
                sleep_s = float(last_exc.retry_after)
            else:
                sleep_s = policy.backoff(attempt)
            logger.warning(
                f"{policy.name}: Rate limited (429), retrying in {sleep_s:.1f}s "
                f"(attempt {attempt}/{policy.max_attempts})"
            )
            await asyncio.sleep(sleep_s)
            continue

        # 5xx and anything unexpected: transient, retry
        last_exc = TransientFetchError(f"{policy.name}: status {sc} for {url}")
        if is_last:
            raise TransientFetchError(
                f"{policy.name}: status {sc} for {url} after {policy.max_attempts} attempts"
            )
        sleep_s = policy.backoff(attempt)
        logger.warning(
            f"{policy.name}: Unexpected status {sc}, retrying in {sleep_s:.1f}s "
            f"(attempt {attempt}/{policy.max_attempts})"
        )
        await asyncio.sleep(sleep_s)

    # Only reachable when max_attempts < 1
    raise TransientFetchError(
        f"{policy.name}: failed after {policy.max_attempts} attempts: {url}"
    ) from last_exc
