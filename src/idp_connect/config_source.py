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
Configuration sources that provider definitions read their values from.
"""

import json
import tomllib
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Protocol

from idp_connect.exceptions import ConfigurationError


class ConfigSource(Protocol):
    """Key-based lookup of boolean and string resource values."""

    def get_bool(self, key: str) -> bool:
        """Returns the boolean stored under ``key``."""
        ...

    def get_string(self, key: str) -> str:
        """Returns the string stored under ``key``."""
        ...


class ResourceBundle:
    """
    Immutable, mapping-backed resource bundle.

    Values are booleans or strings. Booleans may also be spelled ``"true"`` / ``"false"`` so that
    bundles assembled from environment variables work unchanged.
    """

    def __init__(self, values: Mapping[str, bool | str]) -> None:
        self._values = MappingProxyType(dict(values))

    @classmethod
    def from_file(cls, path: str | Path) -> "ResourceBundle":
        """
        Loads a bundle from a TOML or JSON file whose top level is a table of key/value pairs.

        Args:
            path: Path to a ``.toml`` or ``.json`` file.

        Returns:
            ResourceBundle: The loaded bundle.

        Raises:
            ConfigurationError: If the file cannot be read or parsed, or is not a flat table.
        """
        path = Path(path)
        suffix = path.suffix.lower()
        try:
            if suffix == ".toml":
                with path.open("rb") as f:
                    data = tomllib.load(f)
            elif suffix == ".json":
                with path.open("r", encoding="utf-8") as f:
                    data = json.load(f)
            else:
                raise ConfigurationError(f"Unsupported resource file type: {path}")
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"Failed to load resource bundle {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Resource bundle {path} must contain a table of values")

        for key, value in data.items():
            if not isinstance(value, (bool, str)):
                raise ConfigurationError(
                    f"Resource '{key}' in {path} must be a boolean or a string, got {type(value).__name__}"
                )
        return cls(data)

    def _lookup(self, key: str) -> bool | str:
        try:
            return self._values[key]
        except KeyError:
            raise ConfigurationError(f"Resource '{key}' not found") from None

    def get_bool(self, key: str) -> bool:
        value = self._lookup(key)
        if isinstance(value, bool):
            return value
        lowered = value.strip().lower()
        if lowered in ("true", "false"):
            return lowered == "true"
        raise ConfigurationError(f"Resource '{key}' is not a boolean: {value!r}")

    def get_string(self, key: str) -> str:
        value = self._lookup(key)
        if isinstance(value, bool):
            raise ConfigurationError(f"Resource '{key}' is a boolean, expected a string")
        return value

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)
