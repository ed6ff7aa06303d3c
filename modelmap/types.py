from enum import Enum
from typing import Any, Callable, Literal, Optional

from pydantic import BaseModel, ConfigDict


class RequiredMode(Enum):
    FALSY = "falsy"
    STRICT = "strict"


class Correspondence(BaseModel):
    """ Link between one model field and its place in the raw data """
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model_field: str
    source_field: str = ""
    target_type: Optional[type] = None
    builder: Optional[Callable[[Any], Any]] = None
    required: bool = False

    @property
    def data_field(self) -> str:
        """Raw data key or path, falling back to the model field name"""
        return self.source_field or self.model_field

    def is_composite(self) -> bool:
        return self.builder is not None or self.target_type is not None


class MapperConfig(BaseModel):
    """
    `exclude_none` also drops fields explicitly holding None, fields that were never set are always dropped.
    `date_timespec` is the `isoformat` precision for dates, "auto" keeps milliseconds unless the
    value has sub-millisecond digits, "milliseconds" truncates them.
    """
    model_config = ConfigDict(frozen=True)

    required_mode: RequiredMode = RequiredMode.FALSY
    exclude_none: bool = False
    parse_dates: bool = True
    date_timespec: Literal["auto", "hours", "minutes", "seconds", "milliseconds", "microseconds"] = "auto"
