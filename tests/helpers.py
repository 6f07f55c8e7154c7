from typing import Any
from starlette.testclient import TestClient
from gamestorage_lib.services.container import ServiceContainer


def register_service_on_client(client: TestClient, name: str, instance: Any) -> None:
    """Register a service instance into the app's DI container for tests.

    Usage in tests:
        from tests.helpers import register_service_on_client
        register_service_on_client(client, 'document_storage', fake_storage)
    """
    container = getattr(client.app.state, 'container', None)
    if container is None:
        container = ServiceContainer()
        client.app.state.container = container

    container.register_singleton(name, instance)


class RecordingBackend:
    """Backend double that records calls and returns canned results."""

    def __init__(self, result: Any = None, error: Exception | None = None) -> None:
        self.calls: list[tuple] = []
        self.result = result
        self.error = error

    def _record(self, *call):
        self.calls.append(call)
        if self.error is not None:
            raise self.error
        return self.result

    def get(self, key):
        return self._record('get', key)

    def create(self, key, document):
        return self._record('create', key, document)

    def update(self, key, document):
        return self._record('update', key, document)

    def update_fields(self, key, fields):
        return self._record('update_fields', key, fields)

    def update_and_set(self, key, document):
        return self._record('update_and_set', key, document)

    def delete(self, key):
        return self._record('delete', key)

    def clean(self):
        return self._record('clean')
