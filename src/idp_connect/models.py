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
Data models for the idp-connect package.
"""

import httpx
from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator


class DiscoveryDocument(BaseModel):
    """
    OpenID Connect discovery document from ``.well-known/openid-configuration``.

    Only the members needed to drive an authorization-code flow are modelled; anything else
    the provider publishes is ignored.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    issuer: str = Field(..., description="The OIDC issuer URL.")
    authorization_endpoint: str = Field(..., description="The authorization endpoint URL.")
    jwks_uri: str = Field(..., description="The URL to the JWKS.")
    token_endpoint: str | None = Field(default=None, description="The token endpoint URL.")
    userinfo_endpoint: str | None = None
    registration_endpoint: str | None = None
    end_session_endpoint: str | None = None
    scopes_supported: list[str] = Field(default_factory=list)
    response_types_supported: list[str] = Field(default_factory=list)
    subject_types_supported: list[str] = Field(default_factory=list)
    id_token_signing_alg_values_supported: list[str] = Field(default_factory=list)
    code_challenge_methods_supported: list[str] = Field(default_factory=list)

    @field_validator(
        "authorization_endpoint",
        "jwks_uri",
        "token_endpoint",
        "userinfo_endpoint",
        "registration_endpoint",
        "end_session_endpoint",
    )
    @classmethod
    def validate_endpoint(cls, v: str | None) -> str | None:
        """
        Ensures that endpoints are absolute http(s) URLs with a host.
        """
        if v is None:
            return v
        try:
            url = httpx.URL(v)
        except httpx.InvalidURL as e:
            raise ValueError(f"Invalid endpoint URL {v!r}: {e}") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise ValueError(f"Endpoint must be an absolute http(s) URL: {v!r}")
        return v


class ServiceEndpointConfig(BaseModel):
    """
    Endpoints of an authorization service, ready to build authorization requests against.

    Produced either from a fetched discovery document (``discovery_doc`` populated) or from
    explicitly configured endpoints (``discovery_doc`` is None).
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    authorization_endpoint: httpx.URL
    token_endpoint: httpx.URL | None = None
    registration_endpoint: httpx.URL | None = None
    end_session_endpoint: httpx.URL | None = None
    discovery_doc: DiscoveryDocument | None = None

    @classmethod
    def from_endpoints(
        cls,
        authorization_endpoint: httpx.URL,
        token_endpoint: httpx.URL,
        registration_endpoint: httpx.URL | None = None,
    ) -> "ServiceEndpointConfig":
        return cls(
            authorization_endpoint=authorization_endpoint,
            token_endpoint=token_endpoint,
            registration_endpoint=registration_endpoint,
        )

    @classmethod
    def from_discovery(cls, doc: DiscoveryDocument) -> "ServiceEndpointConfig":
        def _url(value: str | None) -> httpx.URL | None:
            return httpx.URL(value) if value else None

        return cls(
            authorization_endpoint=httpx.URL(doc.authorization_endpoint),
            token_endpoint=_url(doc.token_endpoint),
            registration_endpoint=_url(doc.registration_endpoint),
            end_session_endpoint=_url(doc.end_session_endpoint),
            discovery_doc=doc,
        )


class ResolvedProviderConfig(BaseModel):
    """
    Concrete configuration values of an identity provider, read once from a configuration source.

    Attributes:
        enabled (bool): Whether the provider is offered to users.
        discovery_endpoint (httpx.URL | None): OpenID Connect discovery document URI.
        auth_endpoint (httpx.URL | None): Explicit authorization endpoint.
        token_endpoint (httpx.URL | None): Explicit token endpoint.
        client_id (str): The OAuth2 client ID.
        client_secret (SecretStr | None): The client secret; None for public clients.
        redirect_uri (httpx.URL): Where the provider sends the authorization response.
        scope (str): Space-delimited scope list.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    enabled: bool
    discovery_endpoint: httpx.URL | None = None
    auth_endpoint: httpx.URL | None = None
    token_endpoint: httpx.URL | None = None
    client_id: str
    client_secret: SecretStr | None = None
    redirect_uri: httpx.URL
    scope: str


class AuthorizationRequest(BaseModel):
    """
    An authorization-code request ready to be opened in a browser.

    Attributes:
        url (str): The full authorization URL including query parameters.
        state (str): The opaque value the redirect must echo back.
        client_id (str): The client the request was made for.
        redirect_uri (str): The redirect URI sent to the provider.
        scope (str): The requested scopes.
    """

    model_config = ConfigDict(frozen=True)

    url: str
    state: str
    client_id: str
    redirect_uri: str
    scope: str
