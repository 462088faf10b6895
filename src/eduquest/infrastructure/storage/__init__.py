# Infrastructure Storage Adapters Package
from .json_file import JsonFileStorage
from .memory import InMemoryStorage

__all__ = ["JsonFileStorage", "InMemoryStorage"]
