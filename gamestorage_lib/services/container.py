from typing import Any, Dict


class ServiceContainer:
    """A tiny, explicit DI container holding the process-wide services.

    Services are registered by name as ready instances, so every request
    shares the same backend and facade.
    """

    def __init__(self) -> None:
        self._singletons: Dict[str, Any] = {}

    def register_singleton(self, key: str, instance: Any) -> None:
        self._singletons[key] = instance

    def unregister(self, key: str) -> None:
        self._singletons.pop(key, None)

    def get(self, key: str) -> Any:
        if key in self._singletons:
            return self._singletons[key]
        raise KeyError(f"No service registered for key '{key}'")

    def __contains__(self, key: str) -> bool:
        return key in self._singletons
