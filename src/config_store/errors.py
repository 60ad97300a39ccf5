"""Exception hierarchy for configuration store errors.

All errors raised by the store inherit from ConfigStoreError, allowing
callers to catch every failure mode with a single except clause. Each
error type carries the context needed for logging.

Error categories:
- InvalidModelKindError: Model object cannot be updated in place
- UnsupportedFormatError: File extension is not a known format
- ConfigIOError: Reading or writing the file failed
- CodecError: Translating between bytes and the model failed
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class ConfigStoreError(Exception):
    """Base exception for all configuration store errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        """Initialize with message and optional context.

        Args:
            message: Human-readable error description
            context: Additional structured data for logging/debugging
        """
        super().__init__(message)
        self.context = context or {}


class InvalidModelKindError(ConfigStoreError):
    """Model cannot be mutated in place.

    Raised at construction when the model is not a mutable mapping,
    a non-frozen pydantic model, or a non-frozen dataclass instance.
    """

    def __init__(
        self,
        model_type: type,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the rejected model type.

        Args:
            model_type: Type of the object that was passed as model
            context: Additional structured data
        """
        super().__init__(
            f"Model must be a mutable mapping, pydantic model or dataclass "
            f"instance, got {model_type.__name__}",
            context,
        )
        self.model_type = model_type


class UnsupportedFormatError(ConfigStoreError):
    """File extension does not map to a supported format."""

    def __init__(
        self,
        extension: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the unrecognized extension.

        Args:
            extension: Lower-cased extension without the dot (may be empty)
            context: Additional structured data
        """
        super().__init__(f"Format not supported: {extension!r}", context)
        self.extension = extension


class ConfigIOError(ConfigStoreError):
    """Reading or writing the configuration file failed."""

    def __init__(
        self,
        message: str,
        path: str | Path | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with message and file path.

        Args:
            message: Human-readable error description
            path: The configuration file involved
            context: Additional structured data
        """
        super().__init__(message, context)
        self.path = Path(path) if path is not None else None


class ConfigFileNotFoundError(ConfigIOError):
    """Configuration file does not exist."""

    def __init__(self, path: str | Path, context: dict[str, Any] | None = None) -> None:
        super().__init__(f"Config file not found: {path}", path, context)


class CodecError(ConfigStoreError):
    """Base class for format translation errors.

    Stores the format name when available.
    """

    def __init__(
        self,
        message: str,
        format: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with message and format.

        Args:
            message: Human-readable error description
            format: Format being decoded or encoded ("json", "yaml")
            context: Additional structured data
        """
        super().__init__(message, context)
        self.format = format


class DecodeError(CodecError):
    """File content could not be decoded into the model.

    Raised when:
    - The bytes are not valid JSON/YAML
    - The top-level document is not a mapping
    - The decoded values fail the model's own validation
    """


class EncodeError(CodecError):
    """Model could not be encoded into the file format."""
