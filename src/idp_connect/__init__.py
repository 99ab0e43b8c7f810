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
Per-provider OAuth2/OpenID Connect configuration with endpoint discovery for multiple identity providers.
"""

__version__ = "0.1.0"

from .authorization import build_authorization_request
from .config import IdpConnectSettings
from .config_source import ConfigSource, ResourceBundle
from .discovery import ConfigurationFetcher, DiscoveryFetcher
from .exceptions import (
    ConfigurationError,
    DiscoveryFetchError,
    IdpConnectError,
    StateViolationError,
)
from .models import AuthorizationRequest, DiscoveryDocument, ResolvedProviderConfig, ServiceEndpointConfig
from .provider import NOT_SPECIFIED, IdentityProvider, RetrieveConfigurationCallback
from .registry import ProviderRegistry, default_providers, default_registry

__all__ = [
    "NOT_SPECIFIED",
    "AuthorizationRequest",
    "ConfigSource",
    "ConfigurationError",
    "ConfigurationFetcher",
    "DiscoveryDocument",
    "DiscoveryFetchError",
    "DiscoveryFetcher",
    "IdentityProvider",
    "IdpConnectError",
    "IdpConnectSettings",
    "ProviderRegistry",
    "ResolvedProviderConfig",
    "ResourceBundle",
    "RetrieveConfigurationCallback",
    "ServiceEndpointConfig",
    "StateViolationError",
    "build_authorization_request",
    "default_providers",
    "default_registry",
]
