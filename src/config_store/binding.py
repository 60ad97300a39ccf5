"""Model bindings.

A binding adapts one caller-owned model object so the codec can read its
state as plain data and write new state back without replacing the object.
Callers keep their reference; every load rebinds its fields in place.

Supported model kinds:
- Mutable mappings (dict and friends)
- pydantic BaseModel instances with no frozen config or fields
- Dataclass instances (stdlib or pydantic) that are not frozen
"""

from __future__ import annotations

import copy
import dataclasses
import typing
from abc import ABC, abstractmethod
from collections.abc import MutableMapping
from typing import Any

from pydantic import BaseModel, TypeAdapter

from config_store.errors import InvalidModelKindError


class ModelBinding(ABC):
    """Read/write access to a bound model."""

    def __init__(self, model: Any) -> None:
        self._model = model

    @property
    def model(self) -> Any:
        """Return the bound model object."""
        return self._model

    @abstractmethod
    def dump(self) -> dict[str, Any]:
        """Return a JSON-compatible snapshot of the model's state."""
        pass

    @abstractmethod
    def assign(self, data: dict[str, Any]) -> None:
        """Replace the model's state in place.

        Args:
            data: Complete new state, keyed by field name

        Raises:
            pydantic.ValidationError: If the model type rejects the data
        """
        pass

    def normalize(self, data: dict[str, Any]) -> dict[str, Any]:
        """Map incoming keys onto the model's field names."""
        return _fold_keys(type(self._model), data)


class MappingBinding(ModelBinding):
    """Binding for mutable mappings.

    Keys are kept verbatim. Assigning clears the mapping first so keys
    missing from the new state do not survive.
    """

    def dump(self) -> dict[str, Any]:
        return copy.deepcopy(dict(self._model))

    def assign(self, data: dict[str, Any]) -> None:
        self._model.clear()
        self._model.update(data)


class PydanticModelBinding(ModelBinding):
    """Binding for pydantic models."""

    def dump(self) -> dict[str, Any]:
        return self._model.model_dump(mode="json", by_alias=True)

    def assign(self, data: dict[str, Any]) -> None:
        model_cls = type(self._model)
        validated = model_cls.model_validate(data)
        # Extras live outside model_fields when extra="allow"
        object.__setattr__(self._model, "__pydantic_extra__", validated.__pydantic_extra__)
        for name in model_cls.model_fields:
            setattr(self._model, name, getattr(validated, name))
        object.__setattr__(
            self._model, "__pydantic_fields_set__", set(validated.model_fields_set)
        )


class DataclassBinding(ModelBinding):
    """Binding for dataclass instances.

    Serialization and validation go through a pydantic TypeAdapter, so
    field types are coerced the same way for stdlib and pydantic
    dataclasses.
    """

    def __init__(self, model: Any) -> None:
        super().__init__(model)
        self._adapter: TypeAdapter[Any] = TypeAdapter(type(model))

    def dump(self) -> dict[str, Any]:
        data: dict[str, Any] = self._adapter.dump_python(self._model, mode="json")
        return data

    def assign(self, data: dict[str, Any]) -> None:
        validated = self._adapter.validate_python(data)
        for field in dataclasses.fields(self._model):
            setattr(self._model, field.name, getattr(validated, field.name))


def bind_model(model: Any) -> ModelBinding:
    """Create the binding for a model object.

    Args:
        model: Caller-owned model instance

    Returns:
        Binding matching the model's kind

    Raises:
        InvalidModelKindError: If the model cannot be updated in place
    """
    if isinstance(model, type):
        raise InvalidModelKindError(model, context={"reason": "class, not instance"})

    if isinstance(model, MutableMapping):
        return MappingBinding(model)

    if isinstance(model, BaseModel):
        if type(model).model_config.get("frozen", False):
            raise InvalidModelKindError(type(model), context={"reason": "frozen model"})
        frozen_fields = [
            name for name, info in type(model).model_fields.items() if info.frozen
        ]
        if frozen_fields:
            raise InvalidModelKindError(
                type(model),
                context={"reason": "frozen fields", "fields": frozen_fields},
            )
        return PydanticModelBinding(model)

    if dataclasses.is_dataclass(model):
        if type(model).__dataclass_params__.frozen:  # type: ignore[attr-defined]
            raise InvalidModelKindError(type(model), context={"reason": "frozen dataclass"})
        return DataclassBinding(model)

    raise InvalidModelKindError(type(model))


def _field_specs(cls: Any) -> dict[str, tuple[str, Any]]:
    """Return case-folded key -> (field key, annotation) for a model class."""
    if not isinstance(cls, type) or typing.get_origin(cls) is not None:
        return {}

    specs: dict[str, tuple[str, Any]] = {}
    if issubclass(cls, BaseModel):
        for name, info in cls.model_fields.items():
            key = info.alias or name
            specs[name.casefold()] = (key, info.annotation)
            specs[key.casefold()] = (key, info.annotation)
    elif dataclasses.is_dataclass(cls):
        try:
            hints = typing.get_type_hints(cls)
        except (NameError, TypeError):
            # Unresolvable forward refs; fold top level only
            hints = {}
        for field in dataclasses.fields(cls):
            specs[field.name.casefold()] = (field.name, hints.get(field.name))
    return specs


def _nested_model_type(annotation: Any) -> Any:
    """Find the model class inside an annotation such as `Sub | None`."""
    if _field_specs(annotation):
        return annotation
    for arg in typing.get_args(annotation):
        if _field_specs(arg):
            return arg
    return None


def _fold_keys(cls: Any, data: dict[str, Any]) -> dict[str, Any]:
    specs = _field_specs(cls)
    if not specs:
        return data

    folded: dict[str, Any] = {}
    for key, value in data.items():
        spec = specs.get(str(key).casefold())
        if spec is None:
            folded[key] = value
            continue
        target, annotation = spec
        if isinstance(value, dict):
            nested = _nested_model_type(annotation)
            if nested is not None:
                value = _fold_keys(nested, value)
        folded[target] = value
    return folded
