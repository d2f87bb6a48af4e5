"""Tests for the Systembolaget catalog client."""

import httpx
import pytest

from apk_list.ingest.base import (
    BlockedError,
    CatalogParseError,
    PermanentURLError,
    RateLimitedError,
    TransientFetchError,
)
from apk_list.ingest.http_client import SitePolicy, fetch_with_policy
from apk_list.ingest.systembolaget import API_KEY_HEADER, SystembolagetClient

CATALOG_URL = "https://catalog.test/product/v1/product"

RECORDS = [
    {
        "ProductId": "1",
        "ProductNumber": "101",
        "ProductNameBold": "Lager",
        "Category": "Öl",
        "Assortment": "FS",
        "AlcoholPercentage": 5.0,
        "Volume": 330.0,
        "Price": 14.9,
        "RecycleFee": 1.0,
        "IsCompletelyOutOfStock": False,
    },
    {
        "ProductId": "2",
        "ProductNumber": "202",
        "ProductNameBold": "Rödvin",
        "Category": "Röda viner",
        "Assortment": "FS",
        "AlcoholPercentage": 13.5,
        "Volume": 750.0,
        "Price": 99.0,
        "RecycleFee": 0.0,
        "IsCompletelyOutOfStock": False,
    },
]


def make_client(handler, max_attempts: int = 3) -> SystembolagetClient:
    return SystembolagetClient(
        api_key="secret",
        url=CATALOG_URL,
        max_attempts=max_attempts,
        backoff_factor=0.0,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_fetch_all_products_sends_key_and_parses():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["key"] = request.headers.get(API_KEY_HEADER)
        seen["url"] = str(request.url)
        return httpx.Response(200, json=RECORDS)

    client = make_client(handler)
    products = await client.fetch_all_products()
    await client.close()

    assert seen == {"key": "secret", "url": CATALOG_URL}
    assert [p.product_name_bold for p in products] == ["Lager", "Rödvin"]
    assert products[1].category == "Röda viner"


@pytest.mark.asyncio
async def test_invalid_records_are_skipped():
    broken = {"ProductId": "3", "ProductNameBold": "No price", "AlcoholPercentage": 5.0, "Volume": 330}
    client = make_client(lambda request: httpx.Response(200, json=[RECORDS[0], broken, "junk"]))

    products = await client.fetch_all_products()
    await client.close()

    assert [p.product_id for p in products] == ["1"]


@pytest.mark.asyncio
async def test_server_errors_are_retried():
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) < 3:
            return httpx.Response(503)
        return httpx.Response(200, json=RECORDS)

    client = make_client(handler, max_attempts=3)
    products = await client.fetch_all_products()
    await client.close()

    assert len(calls) == 3
    assert len(products) == 2


@pytest.mark.asyncio
async def test_server_errors_exhaust_attempts():
    client = make_client(lambda request: httpx.Response(500), max_attempts=2)
    with pytest.raises(TransientFetchError):
        await client.fetch_all_products()
    await client.close()


@pytest.mark.asyncio
async def test_transport_errors_raise_transient_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(handler, max_attempts=2)
    with pytest.raises(TransientFetchError):
        await client.fetch_all_products()
    await client.close()


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [401, 403])
async def test_auth_failures_are_not_retried(status):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(status)

    client = make_client(handler)
    with pytest.raises(BlockedError):
        await client.fetch_all_products()
    await client.close()
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_not_found_is_permanent():
    client = make_client(lambda request: httpx.Response(404))
    with pytest.raises(PermanentURLError):
        await client.fetch_all_products()
    await client.close()


@pytest.mark.asyncio
async def test_rate_limit_honours_retry_after_then_gives_up():
    client = make_client(
        lambda request: httpx.Response(429, headers={"Retry-After": "0"}), max_attempts=2
    )
    with pytest.raises(RateLimitedError) as exc_info:
        await client.fetch_all_products()
    await client.close()
    assert exc_info.value.retry_after == 0


@pytest.mark.asyncio
async def test_non_json_payload():
    client = make_client(lambda request: httpx.Response(200, text="<html>maintenance</html>"))
    with pytest.raises(CatalogParseError):
        await client.fetch_all_products()
    await client.close()


@pytest.mark.asyncio
async def test_non_list_payload():
    client = make_client(lambda request: httpx.Response(200, json={"products": RECORDS}))
    with pytest.raises(CatalogParseError):
        await client.fetch_all_products()
    await client.close()


@pytest.mark.asyncio
async def test_null_display_fields_do_not_drop_product():
    record = {
        "ProductId": "1",
        "Category": "Öl",
        "Assortment": "FS",
        "AlcoholPercentage": 5.0,
        "Volume": 330.0,
        "Price": 14.9,
        "RecycleFee": 1.0,
        "ProductNameBold": None,
        "ProductNameThin": None,
    }
    client = make_client(lambda request: httpx.Response(200, json=[record]))

    products = await client.fetch_all_products()
    await client.close()

    assert len(products) == 1
    assert products[0].product_name_bold is None
    assert products[0].display_name == ""


@pytest.mark.asyncio
async def test_fetch_with_policy_merges_headers():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["accept"] = request.headers.get("Accept")
        seen["key"] = request.headers.get(API_KEY_HEADER)
        return httpx.Response(200, json=[])

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        resp = await fetch_with_policy(
            client, CATALOG_URL, SitePolicy(name="catalog"), headers={API_KEY_HEADER: "secret"}
        )

    assert resp.status_code == 200
    assert seen == {"url": CATALOG_URL, "accept": "application/json", "key": "secret"}
