"""
Analysis result cache.

Modules
-------
keys     : normalize_filters() + build_cache_key() — canonical addressing.
backends : CacheBackend contract, InMemoryCacheBackend, SQLiteCacheBackend.
errors   : CacheError hierarchy; the only exceptions backends raise.
"""
