import logging
import threading
from typing import Any, Callable, Optional

from .exceptions import UnregisteredTypeError
from .types import Correspondence

logger = logging.getLogger(__name__)


class Registry:
    """
    Ordered field correspondences per model type.
    Keyed by the class object itself, so same-named classes never collide.
    Every write swaps in a new tuple under the lock, readers never see a half-built list.
    """
    def __init__(self):
        self._lock = threading.Lock()
        self._correspondences: dict[type, tuple[Correspondence, ...]] = {}

    def register(self, model_type: type, correspondence: Correspondence) -> None:
        with self._lock:
            current = self._correspondences.get(model_type, ())
            self._correspondences[model_type] = current + (correspondence,)
        logger.debug(f"Registered {model_type.__qualname__}.{correspondence.model_field} <- '{correspondence.data_field}'")

    def ensure(self, model_type: type) -> None:
        with self._lock:
            self._correspondences.setdefault(model_type, ())

    def lookup(self, model_type: type) -> tuple[Correspondence, ...]:
        try:
            return self._correspondences[model_type]
        except KeyError:
            raise UnregisteredTypeError(model_type) from None

    def is_registered(self, model_type: type) -> bool:
        return model_type in self._correspondences

    def unregister(self, model_type: type) -> None:
        with self._lock:
            self._correspondences.pop(model_type, None)

    def __contains__(self, model_type: object) -> bool:
        return model_type in self._correspondences

    def __len__(self) -> int:
        return len(self._correspondences)


default_registry = Registry()


def declare_field(model_type: type,
                  model_field: str,
                  source_field: str = "",
                  target_type: Optional[type] = None,
                  required: bool = False,
                  builder: Optional[Callable[[Any], Any]] = None,
                  registry: Optional[Registry] = None) -> Correspondence:
    correspondence = Correspondence(
        model_field=model_field,
        source_field=source_field,
        target_type=target_type,
        builder=builder,
        required=required,
    )
    if registry is None:
        registry = default_registry
    registry.register(model_type, correspondence)
    return correspondence
