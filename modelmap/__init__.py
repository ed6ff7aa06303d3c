from .exceptions import MappingError, UnregisteredTypeError, RequiredFieldMissingError
from .helpers import MISSING
from .types import Correspondence, MapperConfig, RequiredMode
from .registry import Registry, default_registry, declare_field
from .mapper import Mapper, default_mapper, mapper_for, from_data, to_data
from .mapped_model import Mapped, MappedModel, mapped
from .codec import from_json, to_json, parse_json
from .client import MappedClient

__all__ = [
    "MappingError",
    "UnregisteredTypeError",
    "RequiredFieldMissingError",
    "MISSING",
    "Correspondence",
    "MapperConfig",
    "RequiredMode",
    "Registry",
    "default_registry",
    "declare_field",
    "Mapper",
    "default_mapper",
    "mapper_for",
    "from_data",
    "to_data",
    "Mapped",
    "MappedModel",
    "mapped",
    "from_json",
    "to_json",
    "parse_json",
    "MappedClient",
]
