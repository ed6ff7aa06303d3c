import logging
from typing import Any, Optional, TypeVar

import pydantic_core

from .exceptions import MappingError
from .mapper import Mapper, mapper_for

logger = logging.getLogger(__name__)

T = TypeVar("T")


def from_json(model_type: type[T], text: str | bytes, mapper: Optional[Mapper] = None) -> T | list[T]:
    data = pydantic_core.from_json(text)
    return (mapper or mapper_for(model_type)).from_data(model_type, data)


def to_json(instance: Any, mapper: Optional[Mapper] = None, indent: Optional[int] = None) -> str:
    if mapper is None:
        mapper = mapper_for(type(instance[0]) if isinstance(instance, (list, tuple)) and instance else type(instance))
    data = mapper.to_data(instance)
    return pydantic_core.to_json(data, indent=indent).decode("utf-8")


def parse_json(model_type: type[T], text: str | bytes, mapper: Optional[Mapper] = None) -> Optional[T | list[T]]:
    """Like `from_json`, but logs and returns None instead of raising"""
    try:
        return from_json(model_type, text, mapper=mapper)
    except MappingError as e:
        logger.error(f"Failed to map {model_type.__qualname__}: {e}")
        return None
    except (ValueError, TypeError) as e:
        logger.error(f"Error decoding JSON for {model_type.__qualname__}: {e}")
        return None
