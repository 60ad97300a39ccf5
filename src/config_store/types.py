"""Core value types for the configuration store."""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import ValidationError, field_validator
from pydantic.dataclasses import dataclass

from config_store.errors import ConfigStoreError, UnsupportedFormatError


class ConfigFormat(str, Enum):
    """Supported configuration file formats."""

    JSON = "json"
    YAML = "yaml"

    @classmethod
    def from_path(cls, path: str | Path) -> ConfigFormat:
        """Derive the format from a file extension.

        The extension is lower-cased and compared without its dot, so
        "settings.JSON" is JSON. Only "json" and "yaml" are recognized.

        Args:
            path: Path to the configuration file

        Returns:
            The matching format

        Raises:
            UnsupportedFormatError: If the extension is missing or unknown
        """
        extension = Path(path).suffix.lower().removeprefix(".")
        try:
            return cls(extension)
        except ValueError as err:
            raise UnsupportedFormatError(extension, context={"path": str(path)}) from err


@dataclass(frozen=True)
class FileStamp:
    """Last observed on-disk state of a file.

    Only metadata is compared, never content: a rewrite that keeps
    both values is not seen, a touch that changes mtime is.
    """

    mtime_ns: int
    size: int

    @classmethod
    def from_stat(cls, st: os.stat_result) -> FileStamp:
        """Create a stamp from an os.stat()/os.fstat() result."""
        return cls(mtime_ns=st.st_mtime_ns, size=st.st_size)


@dataclass
class StoreOptions:
    """Tunables for a ConfigStore.

    Attributes:
        poll_interval: Seconds between file checks while watching
        create_if_missing: Create an empty file instead of failing on load
        encoding: Text encoding of the configuration file
    """

    poll_interval: float = 1.0
    create_if_missing: bool = False
    encoding: str = "utf-8"

    @field_validator("poll_interval")
    @classmethod
    def validate_poll_interval(cls, v: float) -> float:
        """Ensure the poll interval is positive."""
        if v <= 0:
            raise ValueError("poll_interval must be positive")
        return v

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StoreOptions:
        """Create options from a dictionary.

        Args:
            data: Option values keyed by attribute name

        Returns:
            StoreOptions instance

        Raises:
            ConfigStoreError: If an option is unknown or invalid
        """
        try:
            return cls(**data)
        except (TypeError, ValidationError) as err:
            raise ConfigStoreError(
                f"Invalid store options: {err}",
                context={"options": dict(data)},
            ) from err
