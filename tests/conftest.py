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
from collections import Counter
from collections.abc import Generator
from unittest.mock import MagicMock, patch

import pytest

from idp_connect.config_source import ResourceBundle


@pytest.fixture(autouse=True)
def mock_dns_resolution() -> Generator[MagicMock, None, None]:
    """
    Globally patches socket.getaddrinfo so no test ever depends on real DNS.

    The default answer is a public IP. Tests exercising the SSRF guard configure this mock's
    return value with a private address.
    """
    safe_response = [(socket.AF_INET, socket.SOCK_STREAM, 6, "", ("8.8.8.8", 443))]

    with patch("socket.getaddrinfo", return_value=safe_response) as mock:
        yield mock


class CountingSource:
    """ConfigSource wrapper that records every key read."""

    def __init__(self, values: dict[str, bool | str]) -> None:
        self._bundle = ResourceBundle(values)
        self.reads: Counter[str] = Counter()

    def get_bool(self, key: str) -> bool:
        self.reads[key] += 1
        return self._bundle.get_bool(key)

    def get_string(self, key: str) -> str:
        self.reads[key] += 1
        return self._bundle.get_string(key)


@pytest.fixture
def bundle_values() -> dict[str, bool | str]:
    """Values for all four built-in providers; Facebook and Google enabled."""
    return {
        "facebook_enabled": True,
        "facebook_name": "Facebook",
        "facebook_auth_endpoint": "https://example.com/authorize",
        "facebook_token_endpoint": "https://example.com/token",
        "facebook_client_id": "fb-client",
        "facebook_client_secret": "fb-secret",
        "facebook_auth_redirect_uri": "https://app.example.com/callback/facebook",
        "facebook_scope_string": "public_profile email",
        "github_enabled": False,
        "github_name": "GitHub",
        "github_auth_endpoint": "https://github.example.com/login/oauth/authorize",
        "github_token_endpoint": "https://github.example.com/login/oauth/access_token",
        "github_client_id": "gh-client",
        "github_client_secret": "gh-secret",
        "github_auth_redirect_uri": "https://app.example.com/callback/github",
        "github_scope_string": "user:email",
        "google_enabled": True,
        "google_name": "Google",
        "google_discovery_uri": "https://accounts.example.com/.well-known/openid-configuration",
        "google_client_id": "google-client",
        "google_auth_redirect_uri": "https://app.example.com/callback/google",
        "google_scope_string": "openid email profile",
        "microsoft_enabled": "false",
        "microsoft_name": "Microsoft",
        "microsoft_discovery_uri": "https://login.example.com/common/v2.0/.well-known/openid-configuration",
        "microsoft_client_id": "ms-client",
        "microsoft_auth_redirect_uri": "https://app.example.com/callback/microsoft",
        "microsoft_scope_string": "openid email profile offline_access",
    }


@pytest.fixture
def bundle(bundle_values: dict[str, bool | str]) -> ResourceBundle:
    return ResourceBundle(bundle_values)


@pytest.fixture
def counting_source(bundle_values: dict[str, bool | str]) -> CountingSource:
    return CountingSource(bundle_values)
