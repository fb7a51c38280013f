from .cache import CacheEntry, TranslationCache
from .cancellation import CancellationToken
from .storage import JSONFileStorage, MemoryStorage, StorageError
from .text import deduplicate_texts, strip_code_fence
from .lang import detect_language, normalize_language

__all__ = [
    "CacheEntry",
    "TranslationCache",
    "CancellationToken",
    "JSONFileStorage",
    "MemoryStorage",
    "StorageError",
    "deduplicate_texts",
    "strip_code_fence",
    "detect_language",
    "normalize_language",
]
