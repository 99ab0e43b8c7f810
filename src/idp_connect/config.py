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
Runtime settings for the idp-connect package.
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class IdpConnectSettings(BaseSettings):
    """
    Settings for idp-connect, read from ``IDP_CONNECT_*`` environment variables.

    Attributes:
        http_timeout (float): Timeout in seconds for discovery document fetches.
        unsafe_local_dev (bool): Allows plain HTTP and private addresses. Local testing only.
        max_response_bytes (int): Upper bound on the size of a discovery document.
        resource_file (Path | None): Resource bundle (TOML or JSON) holding provider values.
    """

    model_config = SettingsConfigDict(
        env_prefix="IDP_CONNECT_",
        case_sensitive=False,
    )

    http_timeout: float = Field(default=10.0, gt=0, description="Timeout in seconds for all IdP network operations.")
    unsafe_local_dev: bool = False
    max_response_bytes: int = Field(default=1_000_000, gt=0)
    resource_file: Path | None = None

    @field_validator("resource_file")
    @classmethod
    def validate_resource_file(cls, v: Path | None) -> Path | None:
        """
        Ensures the resource bundle, when given, has a supported extension.
        """
        if v is not None and v.suffix.lower() not in (".toml", ".json"):
            raise ValueError(f"Unsupported resource file type '{v.suffix}'. Use .toml or .json.")
        return v
