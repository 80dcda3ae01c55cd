"""Tests for the GSTIN registry client."""
import json

import httpx
import pytest

from billbook.core.exceptions import GstinValidationError
from billbook.services.gst_registry import GstinRegistryClient


REGISTRY_RESPONSE = {
    "result": {
        "source_output": {
            "legal_name": "MEHTA TEXTILE MILLS PRIVATE LIMITED",
            "trade_name": "Mehta Textiles",
            "address": "Plot 12, MIDC, Bhiwandi",
            "city": "Thane",
            "pincode": "421302",
            "status": "Active",
            "registration_date": "2018-03-14",
            "business_type": "Private Limited Company",
        }
    }
}


def registry(handler) -> GstinRegistryClient:
    return GstinRegistryClient(
        api_key="test-key",
        base_url="https://registry.test/verify",
        host="registry.test",
        transport=httpx.MockTransport(handler),
    )


class TestLocalProfile:
    """Lookups without a configured registry."""

    @pytest.mark.asyncio
    async def test_no_key_uses_local_profile(self) -> None:
        client = GstinRegistryClient(api_key="")

        profile = await client.verify("27AAAAA0000A1Z5")

        assert not client.enabled
        assert profile.verified is False
        assert profile.legal_name == "AAA Association"
        assert profile.state == "Maharashtra"
        assert profile.city == "Mumbai"
        assert profile.pincode == "400001"

    @pytest.mark.asyncio
    async def test_invalid_gstin_raises_before_lookup(self) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json=REGISTRY_RESPONSE)

        with pytest.raises(GstinValidationError):
            await registry(handler).verify("27AAAAA0000A1Z")

        assert calls == []


class TestRemoteLookup:
    """Lookups against a stubbed registry."""

    @pytest.mark.asyncio
    async def test_verified_profile(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["headers"] = request.headers
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=REGISTRY_RESPONSE)

        profile = await registry(handler).verify("27aaccm1234b1z5")

        assert profile.verified is True
        assert profile.gstin == "27AACCM1234B1Z5"
        assert profile.legal_name == "MEHTA TEXTILE MILLS PRIVATE LIMITED"
        assert profile.city == "Thane"
        assert profile.state == "Maharashtra"
        assert seen["headers"]["X-RapidAPI-Key"] == "test-key"
        assert seen["headers"]["X-RapidAPI-Host"] == "registry.test"
        assert seen["body"]["data"] == {"gstin": "27AACCM1234B1Z5"}
        assert seen["body"]["task_id"]

    @pytest.mark.asyncio
    async def test_server_error_falls_back(self) -> None:
        client = registry(lambda request: httpx.Response(500, text="upstream down"))

        profile = await client.verify("27AACCM1234B1Z5")

        assert profile.verified is False
        assert profile.legal_name == "AAC Enterprises Pvt Ltd"

    @pytest.mark.asyncio
    async def test_connection_error_falls_back(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        profile = await registry(handler).verify("27AACCM1234B1Z5")

        assert profile.verified is False

    @pytest.mark.asyncio
    async def test_unexpected_payload_falls_back(self) -> None:
        client = registry(lambda request: httpx.Response(200, json={"status": "failed"}))

        profile = await client.verify("27AACCM1234B1Z5")

        assert profile.verified is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [["unexpected"], "unexpected", {"result": ["unexpected"]}, {"result": None}],
    )
    async def test_malformed_body_falls_back(self, body) -> None:
        client = registry(lambda request: httpx.Response(200, json=body))

        profile = await client.verify("27AACCM1234B1Z5")

        assert profile.verified is False
        assert profile.state == "Maharashtra"
