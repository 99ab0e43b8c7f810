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
Custom exceptions for the idp-connect package.
"""


class IdpConnectError(Exception):
    """Base exception for all idp-connect errors."""


class ConfigurationError(IdpConnectError):
    """
    Raised when a provider definition or its configuration source is unusable.

    Missing endpoint references, missing required references, duplicate provider
    names and unknown resource keys all end up here. Not recoverable.
    """


class StateViolationError(IdpConnectError):
    """Raised when a provider accessor is used before its configuration was resolved."""


class DiscoveryFetchError(IdpConnectError):
    """
    Raised when the OpenID Connect discovery document cannot be fetched or parsed.
    Delivered once through the dispatch callback; never retried internally.
    """


class OversizedResponseError(IdpConnectError):
    """Raised when an HTTP response is too large."""


class SecurityError(IdpConnectError):
    """Raised when a security violation is detected."""
