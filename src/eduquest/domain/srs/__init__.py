# Domain SRS Package
from .models import CardMastery, Flashcard, MasteryTable
from .ports import StorageBackend

__all__ = ["CardMastery", "Flashcard", "MasteryTable", "StorageBackend"]
