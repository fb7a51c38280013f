from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict
import json
import time

from loguru import logger

from config import SETTINGS, SUPPORTED_LANGUAGES
from utils.storage import KeyValueStorage, StorageError
from utils.text import is_blank


Clock = Callable[[], float]
CacheData = Dict[str, Dict[str, "CacheEntry"]]


def now_millis(clock: Clock = time.time) -> int:
    return int(clock() * 1000)


@dataclass(frozen=True, slots=True)
class CacheEntry:
    value: str
    timestamp: int  # epoch millis

    def to_json(self) -> dict:
        return {"value": self.value, "timestamp": self.timestamp}

    @classmethod
    def from_json(cls, raw: object) -> "CacheEntry | None":
        if not isinstance(raw, dict):
            return None
        value = raw.get("value")
        timestamp = raw.get("timestamp")
        if not isinstance(value, str) or isinstance(timestamp, bool) or not isinstance(timestamp, int):
            return None
        return cls(value=value, timestamp=timestamp)


def empty_cache_data() -> CacheData:
    return {lang: {} for lang in SUPPORTED_LANGUAGES}


class TranslationCache:
    """Expiring, persisted memo of translated strings keyed by language and source text.

    Expired entries are purged only when the blob is loaded; lookups in
    between simply treat them as misses.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        key: str | None = None,
        version: int | None = None,
        ttl: float | None = None,
        clock: Clock = time.time,
    ) -> None:
        self.storage = storage
        self.key = key or SETTINGS.translation.cache_key
        self.version = version if version is not None else SETTINGS.translation.cache_version
        self.ttl_ms = int((ttl if ttl is not None else SETTINGS.translation.cache_ttl) * 1000)
        self._clock = clock
        self._data: CacheData = empty_cache_data()

    def _is_live(self, entry: CacheEntry, now: int) -> bool:
        return now - entry.timestamp <= self.ttl_ms

    def _read_persisted(self) -> CacheData:
        try:
            raw = self.storage.get_item(self.key)
        except StorageError as exc:
            logger.warning(f"Could not read translation cache: {exc}")
            return empty_cache_data()
        if raw is None:
            return empty_cache_data()
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Translation cache is corrupted, starting empty")
            return empty_cache_data()
        if not isinstance(payload, dict) or payload.get("version") != self.version:
            logger.info(f"Ignoring translation cache with unknown format under {self.key!r}")
            return empty_cache_data()

        data = empty_cache_data()
        stored = payload.get("data")
        if not isinstance(stored, dict):
            return data
        now = now_millis(self._clock)
        for lang in SUPPORTED_LANGUAGES:
            mapping = stored.get(lang)
            if not isinstance(mapping, dict):
                continue
            for text, raw_entry in mapping.items():
                entry = CacheEntry.from_json(raw_entry)
                if entry is not None and self._is_live(entry, now):
                    data[lang][text] = entry
        return data

    def load(self) -> CacheData:
        self._data = self._read_persisted()
        total = sum(len(mapping) for mapping in self._data.values())
        logger.debug(f"Loaded {total} cached translations")
        return self._data

    def save(self) -> None:
        # Merge with whatever another process persisted since we loaded.
        merged = self._read_persisted()
        for lang, mapping in self._data.items():
            target = merged.setdefault(lang, {})
            for text, entry in mapping.items():
                existing = target.get(text)
                if existing is None or existing.timestamp <= entry.timestamp:
                    target[text] = entry
        payload = {
            "version": self.version,
            "data": {
                lang: {text: entry.to_json() for text, entry in mapping.items()}
                for lang, mapping in merged.items()
            },
        }
        try:
            self.storage.set_item(self.key, json.dumps(payload, ensure_ascii=False))
        except StorageError as exc:
            logger.warning(f"Could not persist translation cache: {exc}")
            return
        self._data = merged

    def get(self, lang: str, text: str) -> str | None:
        if is_blank(text):
            return text
        entry = self._data.get(lang, {}).get(text)
        if entry is None or not self._is_live(entry, now_millis(self._clock)):
            return None
        return entry.value

    def put(self, lang: str, text: str, value: str) -> None:
        if is_blank(text):
            return
        self._data.setdefault(lang, {})[text] = CacheEntry(value=value, timestamp=now_millis(self._clock))

    def clear(self) -> None:
        self._data = empty_cache_data()
        try:
            self.storage.remove_item(self.key)
        except StorageError as exc:
            logger.warning(f"Could not clear translation cache: {exc}")

    def stats(self) -> Dict[str, int]:
        now = now_millis(self._clock)
        return {
            lang: sum(1 for entry in mapping.values() if self._is_live(entry, now))
            for lang, mapping in self._data.items()
        }
