# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/idp_connect

"""
Discovery component for fetching OpenID Connect provider metadata.
"""

from typing import Any, Protocol

import httpx
from opentelemetry import trace
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.trace import Status, StatusCode
from pydantic import ValidationError

from idp_connect.config import IdpConnectSettings
from idp_connect.exceptions import DiscoveryFetchError, IdpConnectError
from idp_connect.models import DiscoveryDocument, ServiceEndpointConfig
from idp_connect.transport import SafeHTTPTransport, safe_json_fetch
from idp_connect.utils.logger import logger

tracer = trace.get_tracer(__name__)

WELL_KNOWN_PATH = ".well-known/openid-configuration"


class ConfigurationFetcher(Protocol):
    """Anything that can turn a discovery document URI into service endpoints."""

    async def fetch_from_url(self, uri: httpx.URL) -> ServiceEndpointConfig:
        """
        Fetches and parses the discovery document at ``uri``.

        Raises:
            DiscoveryFetchError: If the document cannot be retrieved or parsed.
        """
        ...


class DiscoveryFetcher:
    """
    Fetches OpenID Connect discovery documents and converts them into service endpoints.

    A single fetch is attempted per call; callers decide whether to retry.

    Attributes:
        settings (IdpConnectSettings): Timeout, size limit and local-dev switches.
    """

    def __init__(self, settings: IdpConnectSettings | None = None, client: httpx.AsyncClient | None = None) -> None:
        """
        Initialize the DiscoveryFetcher.

        Args:
            settings: Runtime settings. Defaults to settings read from the environment.
            client: External async client (optional). If not provided, a `SafeHTTPTransport` client is created
                and owned by this fetcher.
        """
        self.settings = settings or IdpConnectSettings()
        self._internal_client = client is None

        if client:
            self._client = client
        else:
            transport = SafeHTTPTransport(allow_private=self.settings.unsafe_local_dev)
            self._client = httpx.AsyncClient(transport=transport, timeout=self.settings.http_timeout)
            HTTPXClientInstrumentor().instrument_client(self._client)

    async def __aenter__(self) -> "DiscoveryFetcher":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._internal_client:
            await self._client.aclose()

    async def fetch_from_url(self, uri: httpx.URL | str) -> ServiceEndpointConfig:
        """
        Fetches the discovery document at ``uri`` and extracts the service endpoints.

        Emits an OpenTelemetry span `fetch_discovery_document`.

        Args:
            uri: The discovery document URI (e.g. https://accounts.google.com/.well-known/openid-configuration).

        Returns:
            ServiceEndpointConfig: The endpoints, with the parsed document attached as ``discovery_doc``.

        Raises:
            DiscoveryFetchError: On malformed or non-HTTPS URIs, network faults, HTTP error status, oversized or
                malformed documents.
        """
        with tracer.start_as_current_span("fetch_discovery_document") as span:
            span.set_attribute("url.full", str(uri))

            try:
                uri = httpx.URL(uri)
            except httpx.InvalidURL as e:
                raise self._failure(span, f"Invalid discovery document URI {uri}: {e}", e) from e

            if uri.scheme != "https" and not self.settings.unsafe_local_dev:
                msg = f"Discovery document URI must use HTTPS: {uri}"
                logger.warning(msg)
                span.set_status(Status(StatusCode.ERROR, msg))
                raise DiscoveryFetchError(msg)

            try:
                data = await safe_json_fetch(self._client, uri, max_bytes=self.settings.max_response_bytes)
                doc = DiscoveryDocument(**data)
                config = ServiceEndpointConfig.from_discovery(doc)
            except ValidationError as e:
                raise self._failure(span, f"Invalid discovery document from {uri}: {e}", e) from e
            except (httpx.HTTPError, httpx.InvalidURL, IdpConnectError, ValueError) as e:
                raise self._failure(span, f"Failed to fetch discovery document from {uri}: {e}", e) from e

            logger.debug(f"Discovery document retrieved from {uri} (issuer {doc.issuer})")
            span.set_status(Status(StatusCode.OK))
            return config

    async def fetch_from_issuer(self, issuer: str | httpx.URL) -> ServiceEndpointConfig:
        """
        Fetches the discovery document published under ``issuer``.

        Args:
            issuer: The issuer URI (e.g. https://login.microsoftonline.com/common/v2.0).

        Returns:
            ServiceEndpointConfig: The discovered endpoints.

        Raises:
            DiscoveryFetchError: If the issuer is malformed or the fetch fails.
        """
        base = str(issuer)
        if not base.endswith("/"):
            base += "/"
        try:
            uri = httpx.URL(base).join(WELL_KNOWN_PATH)
        except httpx.InvalidURL as e:
            logger.warning(f"Invalid issuer URI {issuer}: {e}")
            raise DiscoveryFetchError(f"Invalid issuer URI {issuer}: {e}") from e
        return await self.fetch_from_url(uri)

    @staticmethod
    def _failure(span: trace.Span, msg: str, error: Exception) -> DiscoveryFetchError:
        logger.warning(msg)
        span.record_exception(error)
        span.set_status(Status(StatusCode.ERROR, str(error)))
        return DiscoveryFetchError(msg)
