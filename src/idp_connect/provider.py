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
Identity provider definitions: resource references, one-time resolution and endpoint dispatch.
"""

from typing import Protocol

import httpx
from pydantic import SecretStr

from idp_connect.config_source import ConfigSource
from idp_connect.discovery import ConfigurationFetcher, DiscoveryFetcher
from idp_connect.exceptions import ConfigurationError, DiscoveryFetchError, StateViolationError
from idp_connect.models import ResolvedProviderConfig, ServiceEndpointConfig
from idp_connect.utils.logger import logger

#: Marks an optional reference that is not configured for a provider.
NOT_SPECIFIED = None


class RetrieveConfigurationCallback(Protocol):
    """
    Receives the outcome of a dispatch. Exactly one of the two arguments is not None.
    """

    def __call__(self, config: ServiceEndpointConfig | None, error: DiscoveryFetchError | None) -> None: ...


def _is_specified(ref: str | None) -> bool:
    return ref is not None and ref != ""


def _check_specified(ref: str | None, ref_name: str) -> str:
    if not _is_specified(ref):
        raise ConfigurationError(f"{ref_name} must be specified")
    return ref  # type: ignore[return-value]


class IdentityProvider:
    """
    An identity provider whose settings live in a configuration source.

    The definition only holds resource keys. `resolve` reads the values once and freezes them into a
    `ResolvedProviderConfig`; every accessor fails with `StateViolationError` until that has happened.

    Attributes:
        name (str): Human-readable provider name, unique within a registry.
        button_image (str): Presentation reference for the sign-in button image.
        button_label (str): Presentation reference for the sign-in button label.
    """

    def __init__(
        self,
        name: str,
        *,
        enabled: str,
        discovery_endpoint: str | None = NOT_SPECIFIED,
        auth_endpoint: str | None = NOT_SPECIFIED,
        token_endpoint: str | None = NOT_SPECIFIED,
        client_id: str,
        client_secret: str | None = NOT_SPECIFIED,
        redirect_uri: str,
        scope: str,
        button_image: str,
        button_label: str,
    ) -> None:
        """
        Initialize the IdentityProvider.

        Args:
            name: Human-readable provider name.
            enabled: Key of the boolean that switches the provider on.
            discovery_endpoint: Key of the discovery document URI, if the provider publishes one.
            auth_endpoint: Key of the authorization endpoint URI, when not discovered.
            token_endpoint: Key of the token endpoint URI, when not discovered.
            client_id: Key of the client ID.
            client_secret: Key of the client secret, if the client is confidential.
            redirect_uri: Key of the redirect URI.
            scope: Key of the space-delimited scope string.
            button_image: Key of the sign-in button image.
            button_label: Key of the sign-in button label.

        Raises:
            ConfigurationError: If neither a discovery endpoint nor both explicit endpoints are given,
                or a required reference is missing.
        """
        if not name or not name.strip():
            raise ConfigurationError("name must be specified")

        if not _is_specified(discovery_endpoint) and not (
            _is_specified(auth_endpoint) and _is_specified(token_endpoint)
        ):
            raise ConfigurationError(
                f"{name}: the discovery endpoint or the auth and token endpoints must be specified"
            )

        self.name = name
        self._enabled_ref = _check_specified(enabled, "enabled")
        self._discovery_endpoint_ref = discovery_endpoint if _is_specified(discovery_endpoint) else None
        self._auth_endpoint_ref = auth_endpoint if _is_specified(auth_endpoint) else None
        self._token_endpoint_ref = token_endpoint if _is_specified(token_endpoint) else None
        self._client_id_ref = _check_specified(client_id, "client_id")
        self._client_secret_ref = client_secret if _is_specified(client_secret) else None
        self._redirect_uri_ref = _check_specified(redirect_uri, "redirect_uri")
        self._scope_ref = _check_specified(scope, "scope")
        self.button_image = _check_specified(button_image, "button_image")
        self.button_label = _check_specified(button_label, "button_label")

        self._config: ResolvedProviderConfig | None = None

    def __repr__(self) -> str:
        state = "resolved" if self._config is not None else "unresolved"
        return f"IdentityProvider(name={self.name!r}, {state})"

    @property
    def is_resolved(self) -> bool:
        return self._config is not None

    def resolve(self, source: ConfigSource) -> None:
        """
        Reads every referenced value from ``source``. Does nothing if already resolved.

        Args:
            source: The configuration source to read from.

        Raises:
            ConfigurationError: If the source lacks a referenced value.
            httpx.InvalidURL: If a URI value cannot be parsed.
        """
        if self._config is not None:
            return

        def _uri(ref: str | None) -> httpx.URL | None:
            return httpx.URL(source.get_string(ref)) if ref is not None else None

        def _string(ref: str | None) -> str | None:
            return source.get_string(ref) if ref is not None else None

        client_secret = _string(self._client_secret_ref)

        # Nothing is installed until every read has succeeded
        config = ResolvedProviderConfig(
            enabled=source.get_bool(self._enabled_ref),
            discovery_endpoint=_uri(self._discovery_endpoint_ref),
            auth_endpoint=_uri(self._auth_endpoint_ref),
            token_endpoint=_uri(self._token_endpoint_ref),
            client_id=source.get_string(self._client_id_ref),
            client_secret=SecretStr(client_secret) if client_secret is not None else None,
            redirect_uri=httpx.URL(source.get_string(self._redirect_uri_ref)),
            scope=source.get_string(self._scope_ref),
        )
        self._config = config
        logger.debug(f"Configuration read for {self.name} (enabled={config.enabled})")

    @property
    def config(self) -> ResolvedProviderConfig:
        if self._config is None:
            raise StateViolationError(f"Configuration not read for {self.name}")
        return self._config

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    @property
    def discovery_endpoint(self) -> httpx.URL | None:
        return self.config.discovery_endpoint

    @property
    def auth_endpoint(self) -> httpx.URL | None:
        return self.config.auth_endpoint

    @property
    def token_endpoint(self) -> httpx.URL | None:
        return self.config.token_endpoint

    @property
    def client_id(self) -> str:
        return self.config.client_id

    @property
    def client_secret(self) -> str | None:
        secret = self.config.client_secret
        return secret.get_secret_value() if secret is not None else None

    @property
    def redirect_uri(self) -> httpx.URL:
        return self.config.redirect_uri

    @property
    def scope(self) -> str:
        return self.config.scope

    @property
    def scopes(self) -> list[str]:
        """The scope string split into individual scopes."""
        return self.config.scope.split()

    async def retrieve_config(
        self, source: ConfigSource, fetcher: ConfigurationFetcher | None = None
    ) -> ServiceEndpointConfig:
        """
        Produces the service endpoints for this provider.

        Providers with a discovery endpoint fetch their discovery document; the others are built directly
        from the explicit endpoints without suspending and without touching ``fetcher``.

        Args:
            source: The configuration source, used to resolve the provider if needed.
            fetcher: Discovery fetcher. If not provided, a `DiscoveryFetcher` is created for this call.

        Returns:
            ServiceEndpointConfig: The endpoints to send authorization and token requests to.

        Raises:
            DiscoveryFetchError: If the discovery document cannot be fetched or parsed.
            ConfigurationError: If resolution fails.
        """
        self.resolve(source)

        discovery_endpoint = self.discovery_endpoint
        if discovery_endpoint is None:
            # Construction guarantees both endpoints whenever discovery is absent
            return ServiceEndpointConfig.from_endpoints(
                authorization_endpoint=self.auth_endpoint,  # type: ignore[arg-type]
                token_endpoint=self.token_endpoint,  # type: ignore[arg-type]
            )

        logger.debug(f"Fetching discovery document for {self.name} from {discovery_endpoint}")
        if fetcher is not None:
            return await fetcher.fetch_from_url(discovery_endpoint)

        async with DiscoveryFetcher() as owned_fetcher:
            return await owned_fetcher.fetch_from_url(discovery_endpoint)

    async def dispatch(
        self,
        source: ConfigSource,
        callback: RetrieveConfigurationCallback,
        fetcher: ConfigurationFetcher | None = None,
    ) -> None:
        """
        Retrieves the service endpoints and reports the outcome through ``callback``.

        The callback runs exactly once: ``callback(config, None)`` on success or ``callback(None, error)``
        when discovery fails. Resolution errors are raised instead. Each call is independent, so a failed
        dispatch may simply be invoked again.

        Args:
            source: The configuration source.
            callback: Receives the outcome.
            fetcher: Discovery fetcher, see `retrieve_config`.
        """
        try:
            config = await self.retrieve_config(source, fetcher)
        except DiscoveryFetchError as e:
            logger.warning(f"Failed to retrieve configuration for {self.name}: {e}")
            callback(None, e)
            return

        logger.debug(f"Configuration retrieved for {self.name}")
        callback(config, None)
