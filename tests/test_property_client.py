import asyncio

import httpx
import pytest

from kreit.core.config import Settings
from kreit.core.errors import ConfigurationError, UpstreamError
from kreit.data.property_client import (
    AttomPropertyData,
    MockPropertyData,
    UnconfiguredPropertyData,
    property_client,
)

BASE_URL = "https://api.example.test/propertyapi/v1.0.0/property/detail"


def _client(handler):
    return AttomPropertyData(BASE_URL, "attom-key", transport=httpx.MockTransport(handler))


def test_sends_raw_address_and_key():
    seen = {}

    def handler(request):
        seen["url"] = request.url
        seen["apikey"] = request.headers.get("apikey")
        return httpx.Response(200, json={"property": [{"id": 7}]})

    data = asyncio.run(_client(handler).fetch("123 Main St, Springfield"))
    assert data == {"property": [{"id": 7}]}
    assert seen["url"].params["address"] == "123 Main St, Springfield"
    assert seen["apikey"] == "attom-key"


@pytest.mark.parametrize("status", [400, 401, 404, 500, 503])
def test_non_success_status_is_fatal(status):
    client = _client(lambda request: httpx.Response(status, text="nope"))
    with pytest.raises(UpstreamError) as info:
        asyncio.run(client.fetch("123 Main St"))
    assert str(status) in str(info.value)


def test_transport_error_is_fatal():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(UpstreamError):
        asyncio.run(_client(handler).fetch("123 Main St"))


def test_non_json_body_is_fatal():
    with pytest.raises(UpstreamError):
        asyncio.run(_client(lambda request: httpx.Response(200, text="<html>")).fetch("123 Main St"))


def test_mock_is_deterministic():
    mock = MockPropertyData()
    first = asyncio.run(mock.fetch("1 A St"))
    assert first == asyncio.run(mock.fetch("1 A St"))
    assert first["property"][0]["address"]["oneLine"] == "1 A St"
    assert first["property"][0]["building"] == asyncio.run(mock.fetch("1 a st"))["property"][0]["building"]


def test_factory():
    assert isinstance(property_client(Settings(PROPERTY_PROVIDER="mock")), MockPropertyData)
    configured = property_client(Settings(PROPERTY_PROVIDER="attom", ATTOM_API_KEY="k", ATTOM_BASE_URL=BASE_URL))
    assert isinstance(configured, AttomPropertyData)
    missing = property_client(Settings(PROPERTY_PROVIDER="attom", ATTOM_API_KEY=None, ATTOM_BASE_URL=None))
    assert isinstance(missing, UnconfiguredPropertyData)
    with pytest.raises(ConfigurationError):
        asyncio.run(missing.fetch("1 A St"))
