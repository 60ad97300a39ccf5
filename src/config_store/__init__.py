"""Live-reloading configuration binder.

Loads a JSON or YAML file into a caller-owned model, merges it over the
model's defaults, and keeps it in sync by polling the file.
"""

from config_store.binding import (
    DataclassBinding,
    MappingBinding,
    ModelBinding,
    PydanticModelBinding,
    bind_model,
)
from config_store.codec import Codec, DefaultCodec, deep_merge
from config_store.errors import (
    CodecError,
    ConfigFileNotFoundError,
    ConfigIOError,
    ConfigStoreError,
    DecodeError,
    EncodeError,
    InvalidModelKindError,
    UnsupportedFormatError,
)
from config_store.store import ConfigStore, bind_config
from config_store.types import ConfigFormat, FileStamp, StoreOptions

__version__ = "0.1.0"

__all__ = [
    "Codec",
    "CodecError",
    "ConfigFileNotFoundError",
    "ConfigFormat",
    "ConfigIOError",
    "ConfigStore",
    "ConfigStoreError",
    "DataclassBinding",
    "DecodeError",
    "DefaultCodec",
    "EncodeError",
    "FileStamp",
    "InvalidModelKindError",
    "MappingBinding",
    "ModelBinding",
    "PydanticModelBinding",
    "StoreOptions",
    "UnsupportedFormatError",
    "bind_config",
    "bind_model",
    "deep_merge",
]
