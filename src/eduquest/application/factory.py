"""
Storage Factory
Centralizes the logic for selecting the storage backend and wiring the store.
"""

import logging

from eduquest.application.config import AppConfig
from eduquest.application.srs.service import MasteryStore
from eduquest.domain.srs.ports import StorageBackend
from eduquest.infrastructure.storage.json_file import JsonFileStorage
from eduquest.infrastructure.storage.memory import InMemoryStorage

logger = logging.getLogger(__name__)


def get_storage_backend(config: AppConfig) -> StorageBackend:
    """
    Returns the StorageBackend implementation selected by config.
    """
    if config.storage_backend == "memory":
        logger.debug("Storage: in-memory (nothing is persisted)")
        return InMemoryStorage()

    logger.debug(f"Storage: {config.data_dir}")
    return JsonFileStorage(config.data_dir)


def get_mastery_store(config: AppConfig) -> MasteryStore:
    return MasteryStore(
        get_storage_backend(config),
        storage_key=config.storage_key,
        recover_corrupt=config.recover_corrupt_state,
    )
