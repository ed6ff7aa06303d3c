from typing import Any, Mapping, Optional, TypeVar

from .exceptions import RequiredFieldMissingError
from .helpers import (
    MISSING,
    format_date,
    get_nested_value,
    is_composite_value,
    is_date_string,
    is_date_value,
    is_falsy,
    is_mapping,
    is_sequence,
    parse_date_string,
    set_nested_value,
    split_nested_path,
)
from .registry import Registry, default_registry
from .types import Correspondence, MapperConfig, RequiredMode

T = TypeVar("T")

# frozenset of model fields the raw data never provided
UNSET_FIELDS_ATTR = "__unset_fields__"


class Mapper:
    """
    Builds model instances from raw nested data and turns them back into it,
    driven by the correspondences in `registry`.
    """
    def __init__(self, registry: Optional[Registry] = None, config: Optional[MapperConfig] = None):
        self.registry = registry if registry is not None else default_registry
        self.config = config if config is not None else MapperConfig()

    ### DESERIALIZATION

    def from_data(self, model_type: type[T], data: Any) -> T | list[T]:
        # a top-level array maps element-wise, like a nested one
        if is_sequence(data):
            return [self.from_data(model_type, item) for item in data]
        instance = model_type.__new__(model_type)
        self.populate(instance, data)
        return instance

    def populate(self, instance: Any, data: Optional[Mapping[str, Any]]) -> None:
        if data is None:
            data = {}
        if not is_mapping(data):
            raise TypeError(f"Cannot map {type(data).__name__} onto {type(instance).__qualname__}, expected a mapping")
        unset = set()
        for correspondence in self.registry.lookup(type(instance)):
            value = self._deserialize_value(self._find_value(data, correspondence), correspondence)
            # absent keys read as None but are remembered, so to_data leaves them out
            if value is MISSING:
                unset.add(correspondence.model_field)
                value = None
            else:
                unset.discard(correspondence.model_field)
            setattr(instance, correspondence.model_field, value)
        setattr(instance, UNSET_FIELDS_ATTR, frozenset(unset))

    def _find_value(self, data: Mapping[str, Any], correspondence: Correspondence) -> Any:
        segments = split_nested_path(correspondence.data_field)
        if len(segments) > 1:
            return get_nested_value(data, segments)
        return data.get(correspondence.data_field, MISSING)

    def _deserialize_value(self, value: Any, correspondence: Correspondence) -> Any:
        if is_sequence(value):
            return [self._deserialize_value(item, correspondence) for item in value]
        if is_mapping(value) and correspondence.is_composite():
            if correspondence.builder is not None:
                return correspondence.builder(value)
            return mapper_for(correspondence.target_type, self).from_data(correspondence.target_type, value)
        if self.config.parse_dates and is_date_string(value):
            return parse_date_string(value)
        if correspondence.required and self._is_missing(value):
            raise RequiredFieldMissingError(correspondence.data_field, split_nested_path(correspondence.data_field))
        return value

    def _is_missing(self, value: Any) -> bool:
        if self.config.required_mode is RequiredMode.STRICT:
            return value is None or value is MISSING
        return is_falsy(value)

    ### SERIALIZATION

    def to_data(self, instance: Any) -> dict[str, Any] | list[dict[str, Any]]:
        if is_sequence(instance):
            return [self.to_data(item) for item in instance]
        unset = getattr(instance, UNSET_FIELDS_ATTR, frozenset())
        result: dict[str, Any] = {}
        for correspondence in self.registry.lookup(type(instance)):
            value = getattr(instance, correspondence.model_field, MISSING)
            if value is MISSING or (value is None and correspondence.model_field in unset):
                continue
            serialized = self._serialize_value(value)
            if serialized is None and self.config.exclude_none:
                continue
            segments = split_nested_path(correspondence.data_field)
            if len(segments) > 1:
                set_nested_value(result, segments, serialized)
            else:
                result[correspondence.data_field] = serialized
        return result

    def _serialize_value(self, value: Any) -> Any:
        if is_sequence(value):
            return [self._serialize_value(item) for item in value]
        if is_date_value(value):
            return format_date(value, self.config.date_timespec)
        if is_mapping(value):
            return {key: self._serialize_value(item) for key, item in value.items()}
        # nested models serialize through their own correspondences
        if is_composite_value(value):
            return mapper_for(type(value), self).to_data(value)
        return value


default_mapper = Mapper()


def mapper_for(model_type: type, fallback: Optional[Mapper] = None) -> Mapper:
    """The mapper a model type asked for via `__mapper__`, else `fallback` or the default one"""
    mapper = getattr(model_type, "__mapper__", None)
    if isinstance(mapper, Mapper):
        return mapper
    return fallback if fallback is not None else default_mapper


def from_data(model_type: type[T], data: Any) -> T | list[T]:
    return mapper_for(model_type).from_data(model_type, data)


def to_data(instance: Any) -> dict[str, Any] | list[dict[str, Any]]:
    if is_sequence(instance):
        return [to_data(item) for item in instance]
    return mapper_for(type(instance)).to_data(instance)
