from typing import Optional, Sequence


class MappingError(Exception):
    pass


class UnregisteredTypeError(MappingError, LookupError):
    def __init__(self, model_type: type):
        self.model_type = model_type
        name = getattr(model_type, "__qualname__", repr(model_type))
        super().__init__(f"No field correspondences registered for {name}")


class RequiredFieldMissingError(MappingError, ValueError):
    """Raised when a required field resolves to a missing (or falsy) value"""
    def __init__(self, source_field: str, path: Optional[Sequence[str]] = None):
        self.source_field = source_field
        self.path = tuple(path) if path else (source_field,)
        super().__init__(f"Value for data field '{source_field}' not found")
