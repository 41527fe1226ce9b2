from .storage import JsonFileStorage, KeyValueStorage, MemoryStorage, SessionStorage
from .store import FAVORITES_KEY, FavoritesStore

__all__ = [
    "FAVORITES_KEY",
    "FavoritesStore",
    "JsonFileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "SessionStorage",
]
