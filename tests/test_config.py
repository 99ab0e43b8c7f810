# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/idp_connect

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from idp_connect.config import IdpConnectSettings


def test_defaults() -> None:
    with patch.dict(os.environ, {}, clear=True):
        settings = IdpConnectSettings()

    assert settings.http_timeout == 10.0
    assert settings.unsafe_local_dev is False
    assert settings.max_response_bytes == 1_000_000
    assert settings.resource_file is None


def test_loading_from_environment() -> None:
    """Test loading settings from environment variables."""
    with patch.dict(
        os.environ,
        {
            "IDP_CONNECT_HTTP_TIMEOUT": "3.5",
            "IDP_CONNECT_UNSAFE_LOCAL_DEV": "true",
            "IDP_CONNECT_MAX_RESPONSE_BYTES": "2048",
            "IDP_CONNECT_RESOURCE_FILE": "config/providers.toml",
        },
    ):
        settings = IdpConnectSettings()

    assert settings.http_timeout == 3.5
    assert settings.unsafe_local_dev is True
    assert settings.max_response_bytes == 2048
    assert settings.resource_file == Path("config/providers.toml")


def test_case_insensitive() -> None:
    """Environment variables are case-insensitive (pydantic-settings default behavior)."""
    with patch.dict(os.environ, {"idp_connect_http_timeout": "7"}):
        assert IdpConnectSettings().http_timeout == 7.0


@pytest.mark.parametrize("field", ["http_timeout", "max_response_bytes"])
def test_positive_values_required(field: str) -> None:
    with pytest.raises(ValidationError) as exc:
        IdpConnectSettings(**{field: 0})
    assert field in str(exc.value)


def test_resource_file_extension() -> None:
    assert IdpConnectSettings(resource_file=Path("providers.JSON")).resource_file == Path("providers.JSON")

    with pytest.raises(ValidationError, match="Unsupported resource file type"):
        IdpConnectSettings(resource_file=Path("providers.xml"))
