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
Builds authorization-code requests for a provider once its endpoints are known.
"""

from authlib.common.security import generate_token
from authlib.oauth2.rfc6749.parameters import prepare_grant_uri

from idp_connect.models import AuthorizationRequest, ServiceEndpointConfig
from idp_connect.provider import IdentityProvider
from idp_connect.utils.logger import logger

RESPONSE_TYPE_CODE = "code"


def build_authorization_request(
    service_config: ServiceEndpointConfig,
    provider: IdentityProvider,
    state: str | None = None,
) -> AuthorizationRequest:
    """
    Builds the ``response_type=code`` authorization URL for a resolved provider.

    The request is not sent. Opening the URL, handling the redirect and exchanging the code are
    left to the caller.

    Args:
        service_config: Endpoints returned by `IdentityProvider.retrieve_config`.
        provider: The resolved provider supplying client ID, redirect URI and scope.
        state: Opaque anti-forgery value. A random one is generated if omitted.

    Returns:
        AuthorizationRequest: The URL together with the parameters that went into it.

    Raises:
        StateViolationError: If the provider has not been resolved.
    """
    state = state or generate_token(30)
    redirect_uri = str(provider.redirect_uri)

    url = prepare_grant_uri(
        str(service_config.authorization_endpoint),
        client_id=provider.client_id,
        response_type=RESPONSE_TYPE_CODE,
        redirect_uri=redirect_uri,
        scope=provider.scope,
        state=state,
    )

    logger.debug(f"Authorization request built for {provider.name}")
    return AuthorizationRequest(
        url=url,
        state=state,
        client_id=provider.client_id,
        redirect_uri=redirect_uri,
        scope=provider.scope,
    )
