import inspect
import logging
import typing
import types
from typing import Annotated, Any, Callable, ClassVar, Dict, Optional, Union, get_args, get_origin

from .helpers import MISSING
from .mapper import UNSET_FIELDS_ATTR, Mapper, mapper_for
from .registry import Registry, declare_field
from .types import Correspondence

logger = logging.getLogger(__name__)


class Mapped:
    """ Hold the raw-data side of one model field: key or dotted path, nested type, required-ness """
    def __init__(self,
                 source_field: str = "",
                 target_type: Optional[type] = None,
                 required: bool = False,
                 builder: Optional[Callable[[Any], Any]] = None):
        self.source_field = source_field
        self.target_type = target_type
        self.required = required
        self.builder = builder

    def __repr__(self) -> str:
        return f"Mapped({self.source_field!r}, target_type={self.target_type!r}, required={self.required!r})"

    def declare(self, model_type: type, model_field: str, registry: Registry, hint: Any = None) -> Correspondence:
        target_type = self.target_type
        if target_type is None and self.builder is None and hint is not None:
            target_type = infer_target_type(hint, registry)
        return declare_field(
            model_type,
            model_field,
            source_field=self.source_field,
            target_type=target_type,
            required=self.required,
            builder=self.builder,
            registry=registry,
        )


def infer_target_type(hint: Any, registry: Registry) -> Optional[type]:
    """Registered class named by `hint`, looking through list[...], Optional[...] and unions"""
    if isinstance(hint, type) and get_origin(hint) is None:
        return hint if hint in registry else None
    origin = get_origin(hint)
    if origin is Annotated:
        return infer_target_type(get_args(hint)[0], registry)
    if origin in (list, tuple, set, frozenset, Union, types.UnionType):
        for arg in get_args(hint):
            target_type = infer_target_type(arg, registry)
            if target_type is not None:
                return target_type
    return None


def _resolve_hint(cls: type, name: str, hint: Any) -> Any:
    """Evaluate a string annotation of `cls` the way typing does, the class itself in scope"""
    if not isinstance(hint, str):
        return hint
    holder = type(cls.__name__, (), {"__module__": cls.__module__, "__annotations__": {name: hint}})
    return typing.get_type_hints(holder, localns={cls.__name__: cls, **vars(cls)}, include_extras=True)[name]


def _own_annotations(cls: type) -> Dict[str, Any]:
    resolved = {}
    for name, hint in inspect.get_annotations(cls).items():
        try:
            hint = _resolve_hint(cls, name, hint)
        except NameError as e:
            logger.warning(f"Cannot resolve annotation of {cls.__qualname__}.{name} yet, retrying on first use: {e}")
        resolved[name] = hint
    return resolved


class ForwardTarget:
    """
    Builder for a field annotated with a class that does not exist yet when the model is declared.
    The annotation is resolved on first use, mappings stay plain dicts if it still names no mapped class.
    """
    def __init__(self, owner: type, field: str, hint: str):
        self.owner = owner
        self.field = field
        self.hint = hint
        self._target_type: Optional[type] = None

    def __repr__(self) -> str:
        return f"ForwardTarget({self.owner.__qualname__}.{self.field}: {self.hint!r})"

    def resolve(self) -> Optional[type]:
        if self._target_type is None:
            registry = mapper_for(self.owner).registry
            try:
                self._target_type = infer_target_type(_resolve_hint(self.owner, self.field, self.hint), registry)
            except NameError as e:
                logger.warning(f"Annotation of {self.owner.__qualname__}.{self.field} still unresolved: {e}")
        return self._target_type

    def __call__(self, raw: Any) -> Any:
        target_type = self.resolve()
        if target_type is None:
            return raw
        return mapper_for(target_type, mapper_for(self.owner)).from_data(target_type, raw)


def _is_class_var(hint: Any) -> bool:
    if hint is ClassVar or get_origin(hint) is ClassVar:
        return True
    return isinstance(hint, str) and hint.startswith(("ClassVar", "typing.ClassVar"))


class MappedModel:
    """
    Base class for mapped models.
    Every annotated attribute becomes a mapped field, `Annotated[..., Mapped(...)]`
    renames it, points it into nested data, marks it required or sets its nested type.

    >>> class City(MappedModel):
    ...     name: str
    ...     zip_code: Annotated[str, Mapped("zipCode", required=True)]
    >>> City({"name": "Gdynia", "zipCode": "81-001"}).to_data()
    {'name': 'Gdynia', 'zipCode': '81-001'}
    """
    __mapper__: ClassVar[Optional[Mapper]] = None

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        registry = mapper_for(cls).registry
        registry.ensure(cls)

        # inherited fields come first, in the order the bases declared them
        for base in cls.__bases__:
            if issubclass(base, MappedModel) and base is not MappedModel and base in registry:
                for correspondence in registry.lookup(base):
                    registry.register(cls, correspondence)

        for name, hint in _own_annotations(cls).items():
            if name.startswith("_") or _is_class_var(hint):
                continue
            if isinstance(hint, str):
                Mapped(builder=ForwardTarget(cls, name, hint)).declare(cls, name, registry)
                continue
            mapped = None
            base_hint = hint
            if get_origin(hint) is Annotated:
                base_hint = get_args(hint)[0]
                # field.metadata may carry other markers, only ours matters
                for meta in hint.__metadata__:
                    if isinstance(meta, Mapped):
                        mapped = meta
            (mapped or Mapped()).declare(cls, name, registry, hint=base_hint)

    def __init__(self, data: Optional[Dict[str, Any]] = None, /, **attrs: Any):
        if data is not None:
            if attrs:
                raise TypeError("Pass either raw data or field values, not both")
            mapper_for(type(self)).populate(self, data)
            return

        fields = self.model_fields()
        unknown = set(attrs) - set(fields)
        if unknown:
            raise TypeError(f"{type(self).__qualname__} has no mapped fields {sorted(unknown)}")
        unset = set()
        for name in fields:
            value = attrs.get(name, getattr(type(self), name, MISSING))
            if value is MISSING:
                unset.add(name)
                value = None
            setattr(self, name, value)
        setattr(self, UNSET_FIELDS_ATTR, frozenset(unset))

    @classmethod
    def correspondences(cls) -> tuple[Correspondence, ...]:
        return mapper_for(cls).registry.lookup(cls)

    @classmethod
    def model_fields(cls) -> list[str]:
        """Mapped attribute names in declaration order, without duplicates"""
        return list(dict.fromkeys(c.model_field for c in cls.correspondences()))

    @classmethod
    def from_data(cls, data: Any):
        return mapper_for(cls).from_data(cls, data)

    def to_data(self) -> Dict[str, Any]:
        return mapper_for(type(self)).to_data(self)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return all(getattr(self, name, None) == getattr(other, name, None) for name in self.model_fields())

    def __repr__(self) -> str:
        fields = ", ".join(f"{name}={getattr(self, name, None)!r}" for name in self.model_fields())
        return f"{type(self).__qualname__}({fields})"


def mapped(registry: Optional[Registry] = None, **fields: Mapped) -> Callable[[type], type]:
    """
    Class decorator registering plain classes, one keyword per model field, in keyword order.

    >>> @mapped(city=Mapped("address.city"), name=Mapped(required=True))
    ... class Person:
    ...     pass
    """
    def decorator(cls: type) -> type:
        target_registry = registry if registry is not None else mapper_for(cls).registry
        target_registry.ensure(cls)
        for name, field in fields.items():
            field.declare(cls, name, target_registry)
        return cls
    return decorator
