"""Registry for dynamically registering and retrieving engines and storages."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, TypeVar

from docparse.core.errors import ConfigurationError

if TYPE_CHECKING:
    from docparse.engine.base import ParsingEngine
    from docparse.storage.base import Storage

T = TypeVar("T")


class _Registry(Generic[T]):
    """Generic registry for named components."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self._registry: dict[str, type[T]] = {}

    def register(self, name: str, cls: type[T]) -> None:
        self._registry[name] = cls

    def get(self, name: str) -> type[T]:
        if name not in self._registry:
            available = ", ".join(self._registry.keys())
            raise ConfigurationError(
                f"Unknown {self.kind} '{name}'. Available: {available}",
                {"available": self.list()},
            )
        return self._registry[name]

    def create(self, name: str, **kwargs: Any) -> T:
        return self.get(name)(**kwargs)

    def list(self) -> list[str]:
        return list(self._registry.keys())

    def __contains__(self, name: str) -> bool:
        return name in self._registry


EngineRegistry: _Registry[ParsingEngine] = _Registry("engine")
StorageRegistry: _Registry[Storage] = _Registry("storage")
