# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/idp_connect

import socket
from collections.abc import AsyncIterator
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from idp_connect.exceptions import OversizedResponseError, SecurityError
from idp_connect.transport import SafeHTTPTransport, safe_json_fetch


class TestSafeHTTPTransport:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("host", ["127.0.0.1", "10.1.2.3", "169.254.169.254", "192.168.0.1"])
    async def test_blocks_private_ip_literals(self, host: str) -> None:
        async with httpx.AsyncClient(transport=SafeHTTPTransport()) as client:
            with pytest.raises(SecurityError, match="is blocked"):
                await client.get(f"https://{host}/.well-known/openid-configuration")

    @pytest.mark.asyncio
    async def test_blocks_hostname_resolving_to_private_ip(self, mock_dns_resolution: MagicMock) -> None:
        mock_dns_resolution.return_value = [(socket.AF_INET, socket.SOCK_STREAM, 6, "", ("127.0.0.1", 443))]

        async with httpx.AsyncClient(transport=SafeHTTPTransport()) as client:
            with pytest.raises(SecurityError, match="No valid public IP found for rebind.example.com"):
                await client.get("https://rebind.example.com/")

    @pytest.mark.asyncio
    async def test_dns_failure(self, mock_dns_resolution: MagicMock) -> None:
        mock_dns_resolution.side_effect = socket.gaierror("Name or service not known")

        async with httpx.AsyncClient(transport=SafeHTTPTransport()) as client:
            with pytest.raises(SecurityError, match="DNS resolution failed"):
                await client.get("https://nowhere.example.com/")

    @pytest.mark.asyncio
    async def test_pins_first_public_ip(self, mock_dns_resolution: MagicMock) -> None:
        mock_dns_resolution.return_value = [
            (socket.AF_INET, socket.SOCK_STREAM, 6, "", ("10.0.0.1", 443)),
            (socket.AF_INET, socket.SOCK_STREAM, 6, "", ("93.184.216.34", 443)),
        ]
        sent: list[httpx.Request] = []

        async def fake_handle(self: SafeHTTPTransport, request: httpx.Request) -> httpx.Response:
            sent.append(request)
            return httpx.Response(200, json={})

        with patch.object(httpx.AsyncHTTPTransport, "handle_async_request", fake_handle):
            async with httpx.AsyncClient(transport=SafeHTTPTransport()) as client:
                await client.get("https://idp.example.com/.well-known/openid-configuration")

        assert len(sent) == 1
        assert sent[0].url.host == "93.184.216.34"
        assert sent[0].headers["Host"] == "idp.example.com"
        assert sent[0].extensions["sni_hostname"] == "idp.example.com"

    @pytest.mark.asyncio
    async def test_allow_private_skips_checks(self, mock_dns_resolution: MagicMock) -> None:
        parent = AsyncMock(return_value=httpx.Response(200))

        with patch.object(httpx.AsyncHTTPTransport, "handle_async_request", parent):
            async with httpx.AsyncClient(transport=SafeHTTPTransport(allow_private=True)) as client:
                response = await client.get("http://127.0.0.1:8080/")

        assert response.status_code == 200
        mock_dns_resolution.assert_not_called()


class TestSafeJsonFetch:
    @pytest.mark.asyncio
    async def test_returns_object(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"issuer": "x"}))
        async with httpx.AsyncClient(transport=transport) as client:
            assert await safe_json_fetch(client, "https://idp.example.com/doc") == {"issuer": "x"}

    @pytest.mark.asyncio
    async def test_follows_redirects(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/old":
                return httpx.Response(301, headers={"Location": "https://idp.example.com/new"})
            return httpx.Response(200, json={"moved": True})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            assert await safe_json_fetch(client, "https://idp.example.com/old") == {"moved": True}

    @pytest.mark.asyncio
    async def test_rejects_large_content_length(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b"x" * 100))
        async with httpx.AsyncClient(transport=transport) as client:
            with pytest.raises(OversizedResponseError, match="too large"):
                await safe_json_fetch(client, "https://idp.example.com/doc", max_bytes=10)

    @pytest.mark.asyncio
    async def test_rejects_large_stream_without_length(self) -> None:
        async def body() -> AsyncIterator[bytes]:
            for _ in range(10):
                yield b"{" * 10

        transport = httpx.MockTransport(lambda request: httpx.Response(200, content=body()))
        async with httpx.AsyncClient(transport=transport) as client:
            with pytest.raises(OversizedResponseError, match="exceeded 50 bytes"):
                await safe_json_fetch(client, "https://idp.example.com/doc", max_bytes=50)

    @pytest.mark.asyncio
    async def test_raises_for_status(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(404, json={"error": "not_found"}))
        async with httpx.AsyncClient(transport=transport) as client:
            with pytest.raises(httpx.HTTPStatusError):
                await safe_json_fetch(client, "https://idp.example.com/doc")
