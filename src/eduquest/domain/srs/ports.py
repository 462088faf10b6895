"""
Ports (interfaces) for mastery persistence.

These define the contract that infrastructure adapters must implement.
The mastery store depends on this abstraction, not on a concrete backend.
"""

from abc import ABC, abstractmethod


class StorageBackend(ABC):
    """
    Port for a string key-value slot store.

    Implementations:
        - InMemoryStorage: Plain dict, used by tests and the ``memory`` backend.
        - JsonFileStorage: One JSON file per slot in a data directory.
    """

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        """
        Read a slot.

        Returns:
            The stored string, or None if the slot has never been written.
        """
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Replace the whole content of a slot."""
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete a slot. Removing a missing slot is not an error."""
        pass
