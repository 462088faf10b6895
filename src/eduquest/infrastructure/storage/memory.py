"""In-memory StorageBackend, for tests and throwaway sessions."""

from eduquest.domain.srs.ports import StorageBackend


class InMemoryStorage(StorageBackend):
    def __init__(self, initial: dict[str, str] | None = None):
        self._slots: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._slots.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._slots[key] = value

    def remove_item(self, key: str) -> None:
        self._slots.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._slots
