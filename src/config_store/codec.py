"""Format codecs.

Translates between file bytes and model state for JSON and YAML. The
codec is pluggable: the store only talks to the Codec interface.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any

import yaml
from pydantic import ValidationError

from config_store.binding import ModelBinding
from config_store.errors import DecodeError, EncodeError
from config_store.types import ConfigFormat


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge two dictionaries.

    Nested dictionaries are merged key by key; every other value in
    override (lists included) replaces the value in base.
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


class Codec(ABC):
    """Marshal/unmarshal capability consumed by the store."""

    @abstractmethod
    def loads(self, fmt: ConfigFormat, blob: bytes) -> dict[str, Any]:
        """Parse bytes into a mapping.

        Raises:
            DecodeError: If the bytes cannot be parsed into a mapping
        """
        pass

    @abstractmethod
    def dumps(self, fmt: ConfigFormat, data: dict[str, Any]) -> bytes:
        """Serialize a mapping into bytes.

        Raises:
            EncodeError: If the data cannot be serialized
        """
        pass

    def decode(
        self,
        fmt: ConfigFormat,
        blob: bytes,
        target: ModelBinding,
        *,
        merge: bool = True,
    ) -> None:
        """Decode bytes into a bound model.

        Args:
            fmt: Format of the bytes
            blob: Raw file content
            target: Binding of the model to update
            merge: Overlay the decoded keys on the model's current state
                instead of replacing it

        Raises:
            DecodeError: If parsing or model validation fails
        """
        data = target.normalize(self.loads(fmt, blob))
        try:
            if merge:
                data = deep_merge(target.dump(), data)
            target.assign(data)
        except (ValidationError, TypeError, ValueError) as e:
            raise DecodeError(
                f"Cannot apply {fmt.value} data to {type(target.model).__name__}: {e}",
                format=fmt.value,
            ) from e

    def encode(self, fmt: ConfigFormat, source: ModelBinding) -> bytes:
        """Encode a bound model into bytes.

        Raises:
            EncodeError: If the model state cannot be serialized
        """
        try:
            data = source.dump()
        except (TypeError, ValueError) as e:
            raise EncodeError(
                f"Cannot serialize {type(source.model).__name__}: {e}",
                format=fmt.value,
            ) from e
        return self.dumps(fmt, data)


class DefaultCodec(Codec):
    """JSON (stdlib) and YAML (PyYAML) codec."""

    def __init__(self, encoding: str = "utf-8") -> None:
        """Initialize codec.

        Args:
            encoding: Text encoding of the file content
        """
        self._encoding = encoding

    @property
    def encoding(self) -> str:
        """Get text encoding."""
        return self._encoding

    def loads(self, fmt: ConfigFormat, blob: bytes) -> dict[str, Any]:
        try:
            text = blob.decode(self._encoding)
            if fmt == ConfigFormat.JSON:
                data = json.loads(text)
            else:
                data = yaml.safe_load(text)
        except (UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
            raise DecodeError(f"Invalid {fmt.value}: {e}", format=fmt.value) from e

        # Empty or comment-only YAML documents parse to None
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise DecodeError(
                f"Top-level {fmt.value} value must be a mapping, got {type(data).__name__}",
                format=fmt.value,
            )
        return data

    def dumps(self, fmt: ConfigFormat, data: dict[str, Any]) -> bytes:
        try:
            if fmt == ConfigFormat.JSON:
                text = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
            else:
                text = yaml.safe_dump(
                    data,
                    default_flow_style=False,
                    sort_keys=False,
                    allow_unicode=True,
                )
            return text.encode(self._encoding)
        except (TypeError, ValueError, yaml.YAMLError) as e:
            raise EncodeError(f"Cannot encode {fmt.value}: {e}", format=fmt.value) from e
