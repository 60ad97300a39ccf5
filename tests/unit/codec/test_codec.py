"""Tests for format codecs."""

import json

import pytest
import yaml
from pydantic import BaseModel

from config_store.binding import bind_model
from config_store.codec import DefaultCodec, deep_merge
from config_store.errors import DecodeError, EncodeError
from config_store.types import ConfigFormat


class PortSettings(BaseModel):
    port: int = 9999
    cert: str = ""


class TestDeepMerge:
    """Tests for deep_merge."""

    def test_nested_merge(self) -> None:
        """Nested dicts merge key by key."""
        base = {"a": 1, "nested": {"x": 1, "y": 2}}
        override = {"nested": {"y": 3}}

        assert deep_merge(base, override) == {"a": 1, "nested": {"x": 1, "y": 3}}

    def test_lists_replaced(self) -> None:
        """Lists are replaced, not concatenated."""
        assert deep_merge({"items": [1, 2]}, {"items": [3]}) == {"items": [3]}

    def test_inputs_untouched(self) -> None:
        """Neither input is mutated."""
        base = {"nested": {"x": 1}}
        deep_merge(base, {"nested": {"x": 2}})
        assert base == {"nested": {"x": 1}}


class TestDefaultCodecLoads:
    """Tests for DefaultCodec.loads."""

    @pytest.fixture
    def codec(self) -> DefaultCodec:
        return DefaultCodec()

    def test_json(self, codec: DefaultCodec) -> None:
        """JSON bytes parse into a dict."""
        assert codec.loads(ConfigFormat.JSON, b'{"hello": "world"}') == {"hello": "world"}

    def test_yaml(self, codec: DefaultCodec) -> None:
        """YAML bytes parse into a dict."""
        assert codec.loads(ConfigFormat.YAML, b'port: 8888\ncert: ""') == {
            "port": 8888,
            "cert": "",
        }

    def test_empty_yaml_is_empty_mapping(self, codec: DefaultCodec) -> None:
        """Comment-only YAML documents are an empty mapping."""
        assert codec.loads(ConfigFormat.YAML, b"# nothing here\n") == {}

    def test_invalid_json(self, codec: DefaultCodec) -> None:
        """Malformed JSON raises DecodeError."""
        with pytest.raises(DecodeError) as exc_info:
            codec.loads(ConfigFormat.JSON, b"{not json")
        assert exc_info.value.format == "json"

    def test_invalid_yaml(self, codec: DefaultCodec) -> None:
        """Malformed YAML raises DecodeError."""
        with pytest.raises(DecodeError):
            codec.loads(ConfigFormat.YAML, b"key: [unclosed")

    def test_non_mapping_document(self, codec: DefaultCodec) -> None:
        """A top-level list is not a config document."""
        with pytest.raises(DecodeError, match="mapping"):
            codec.loads(ConfigFormat.JSON, b"[1, 2]")

    def test_bad_encoding(self, codec: DefaultCodec) -> None:
        """Undecodable bytes raise DecodeError."""
        with pytest.raises(DecodeError):
            codec.loads(ConfigFormat.JSON, b"\xff\xfe\xfa")


class TestDefaultCodecDumps:
    """Tests for DefaultCodec.dumps."""

    def test_json(self) -> None:
        """JSON output is indented and newline-terminated."""
        blob = DefaultCodec().dumps(ConfigFormat.JSON, {"a": [1, 2]})
        assert blob.endswith(b"\n")
        assert json.loads(blob) == {"a": [1, 2]}

    def test_yaml_keeps_key_order(self) -> None:
        """YAML output keeps insertion order in block style."""
        blob = DefaultCodec().dumps(ConfigFormat.YAML, {"z": 1, "a": [1]})
        assert blob.decode().splitlines() == ["z: 1", "a:", "- 1"]

    def test_unserializable_json(self) -> None:
        """Values JSON cannot represent raise EncodeError."""
        with pytest.raises(EncodeError):
            DefaultCodec().dumps(ConfigFormat.JSON, {"a": object()})

    def test_unserializable_yaml(self) -> None:
        """Values YAML cannot represent raise EncodeError."""
        with pytest.raises(EncodeError):
            DefaultCodec().dumps(ConfigFormat.YAML, {"a": object()})


class TestCodecModelIO:
    """Tests for decode/encode against bound models."""

    def test_decode_merges_over_current_state(self) -> None:
        """Keys absent from the bytes keep the model's values."""
        model = PortSettings(cert="default.pem")

        DefaultCodec().decode(ConfigFormat.YAML, b"port: 8888", bind_model(model))

        assert model.port == 8888
        assert model.cert == "default.pem"

    def test_decode_replace(self) -> None:
        """merge=False replaces the whole mapping state."""
        model = {"stale": True}

        DefaultCodec().decode(ConfigFormat.JSON, b'{"fresh": 1}', bind_model(model), merge=False)

        assert model == {"fresh": 1}

    def test_decode_validation_failure(self) -> None:
        """Model validation errors surface as DecodeError."""
        with pytest.raises(DecodeError) as exc_info:
            DefaultCodec().decode(ConfigFormat.JSON, b'{"port": "abc"}', bind_model(PortSettings()))
        assert exc_info.value.format == "json"

    def test_encode_model(self) -> None:
        """Encoding a model serializes its fields."""
        blob = DefaultCodec().encode(ConfigFormat.YAML, bind_model(PortSettings()))
        assert yaml.safe_load(blob) == {"port": 9999, "cert": ""}

    def test_encode_unserializable_mapping(self) -> None:
        """A mapping holding arbitrary objects cannot be encoded."""
        with pytest.raises(EncodeError):
            DefaultCodec().encode(ConfigFormat.JSON, bind_model({"handler": object()}))
