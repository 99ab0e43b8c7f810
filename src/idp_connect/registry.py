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
Provider registry and the built-in identity provider definitions.
"""

from collections.abc import Iterable, Iterator

from idp_connect.config_source import ConfigSource
from idp_connect.exceptions import ConfigurationError
from idp_connect.provider import NOT_SPECIFIED, IdentityProvider
from idp_connect.utils.logger import logger


def facebook() -> IdentityProvider:
    # Facebook has no OpenID Connect discovery endpoint
    return IdentityProvider(
        "Facebook",
        enabled="facebook_enabled",
        discovery_endpoint=NOT_SPECIFIED,
        auth_endpoint="facebook_auth_endpoint",
        token_endpoint="facebook_token_endpoint",
        client_id="facebook_client_id",
        client_secret="facebook_client_secret",
        redirect_uri="facebook_auth_redirect_uri",
        scope="facebook_scope_string",
        button_image="btn_facebook",
        button_label="facebook_name",
    )


def github() -> IdentityProvider:
    # GitHub has no OpenID Connect discovery endpoint
    return IdentityProvider(
        "GitHub",
        enabled="github_enabled",
        discovery_endpoint=NOT_SPECIFIED,
        auth_endpoint="github_auth_endpoint",
        token_endpoint="github_token_endpoint",
        client_id="github_client_id",
        client_secret="github_client_secret",
        redirect_uri="github_auth_redirect_uri",
        scope="github_scope_string",
        button_image="btn_github",
        button_label="github_name",
    )


def google() -> IdentityProvider:
    # Endpoints are discovered; public client, no secret
    return IdentityProvider(
        "Google",
        enabled="google_enabled",
        discovery_endpoint="google_discovery_uri",
        client_id="google_client_id",
        client_secret=NOT_SPECIFIED,
        redirect_uri="google_auth_redirect_uri",
        scope="google_scope_string",
        button_image="btn_google",
        button_label="google_name",
    )


def microsoft() -> IdentityProvider:
    # Endpoints are discovered; public client, no secret
    return IdentityProvider(
        "Microsoft",
        enabled="microsoft_enabled",
        discovery_endpoint="microsoft_discovery_uri",
        client_id="microsoft_client_id",
        client_secret=NOT_SPECIFIED,
        redirect_uri="microsoft_auth_redirect_uri",
        scope="microsoft_scope_string",
        button_image="btn_microsoft",
        button_label="microsoft_name",
    )


def default_providers() -> list[IdentityProvider]:
    """
    Builds fresh, unresolved instances of the built-in providers in registration order.
    """
    return [facebook(), github(), google(), microsoft()]


class ProviderRegistry:
    """
    An immutable, ordered collection of identity providers.

    Build one at application start and pass it to whatever needs it.
    """

    def __init__(self, providers: Iterable[IdentityProvider]) -> None:
        """
        Initialize the ProviderRegistry.

        Args:
            providers: The providers, in the order they should be offered.

        Raises:
            ConfigurationError: If two providers share a name.
        """
        self._providers: tuple[IdentityProvider, ...] = tuple(providers)

        seen: set[str] = set()
        for provider in self._providers:
            key = provider.name.lower()
            if key in seen:
                raise ConfigurationError(f"Duplicate identity provider name: {provider.name}")
            seen.add(key)

    def __iter__(self) -> Iterator[IdentityProvider]:
        return iter(self._providers)

    def __len__(self) -> int:
        return len(self._providers)

    @property
    def names(self) -> list[str]:
        return [p.name for p in self._providers]

    def get(self, name: str) -> IdentityProvider:
        """
        Looks a provider up by name, ignoring case.

        Raises:
            KeyError: If no provider has that name.
        """
        for provider in self._providers:
            if provider.name.lower() == name.lower():
                return provider
        raise KeyError(name)

    def list_enabled(self, source: ConfigSource) -> list[IdentityProvider]:
        """
        Resolves every provider and returns the enabled ones in registration order.

        Args:
            source: The configuration source.

        Returns:
            list[IdentityProvider]: The enabled providers.

        Raises:
            ConfigurationError: If any provider fails to resolve. Failures are never skipped.
        """
        enabled = []
        for provider in self._providers:
            provider.resolve(source)
            if provider.enabled:
                enabled.append(provider)

        logger.info(f"{len(enabled)} of {len(self._providers)} identity providers enabled")
        return enabled


def default_registry() -> ProviderRegistry:
    """
    Returns a registry of the built-in providers: Facebook, GitHub, Google, Microsoft.
    """
    return ProviderRegistry(default_providers())
