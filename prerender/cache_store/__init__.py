from .store import CacheStoreBase, InMemoryCacheStore, cache_store

__all__ = [
    "CacheStoreBase",
    "InMemoryCacheStore",
    "cache_store",
]
