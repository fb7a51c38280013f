from __future__ import annotations

from typing import Callable, List, Sequence

from loguru import logger

from config import DEFAULT_LANGUAGE, SETTINGS, AppSettings
from utils.cache import TranslationCache
from utils.cancellation import CancellationToken
from utils.lang import is_supported, normalize_language
from utils.storage import JSONFileStorage, KeyValueStorage, StorageError

from .base import BaseTranslator
from .gateway import Notifier, RateLimiter, TranslationGateway


LanguageListener = Callable[[str], None]


class TranslationContext:
    """Process-wide translation state: the active language plus cache and gateway.

    Build one with :meth:`create` at startup and release it with
    :meth:`dispose` (or use it as an async context manager).
    """

    def __init__(
        self,
        gateway: TranslationGateway,
        storage: KeyValueStorage,
        *,
        language_key: str | None = None,
    ) -> None:
        self.gateway = gateway
        self.storage = storage
        self.language_key = language_key or SETTINGS.translation.language_key
        self._language = self._load_language()
        self._listeners: List[LanguageListener] = []
        self._disposed = False

    @classmethod
    def create(
        cls,
        translator: BaseTranslator,
        *,
        storage: KeyValueStorage | None = None,
        settings: AppSettings | None = None,
        notifier: Notifier | None = None,
        rate_limiter: RateLimiter | None = None,
        cache: TranslationCache | None = None,
    ) -> "TranslationContext":
        settings = settings or SETTINGS
        storage = storage or JSONFileStorage(settings.storage_path)
        if cache is None:
            cache = TranslationCache(
                storage,
                key=settings.translation.cache_key,
                version=settings.translation.cache_version,
                ttl=settings.translation.cache_ttl,
            )
        cache.load()
        gateway = TranslationGateway(
            translator,
            cache,
            rate_limiter=rate_limiter or RateLimiter(settings.translation.min_request_interval),
            notifier=notifier,
            timeout=settings.translation.request_timeout,
        )
        return cls(gateway, storage, language_key=settings.translation.language_key)

    async def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._listeners.clear()
        self.gateway.cache.save()
        await self.gateway.translator.close()

    async def __aenter__(self) -> "TranslationContext":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.dispose()

    def _load_language(self) -> str:
        try:
            saved = self.storage.get_item(self.language_key)
        except StorageError as exc:
            logger.warning(f"Could not read saved language: {exc}")
            return DEFAULT_LANGUAGE
        return normalize_language(saved)

    @property
    def language(self) -> str:
        return self._language

    @property
    def cache(self) -> TranslationCache:
        return self.gateway.cache

    @property
    def is_translating(self) -> bool:
        return self.gateway.busy

    def set_language(self, lang: str) -> None:
        if not is_supported(lang):
            raise ValueError(f"Unsupported language: {lang!r}")
        try:
            self.storage.set_item(self.language_key, lang)
        except StorageError as exc:
            logger.warning(f"Could not persist language preference: {exc}")
        if lang == self._language:
            return
        self._language = lang
        logger.info(f"Site language set to {lang}")
        for listener in list(self._listeners):
            listener(lang)

    def subscribe(self, listener: LanguageListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def translate(
        self,
        text: str,
        target_lang: str | None = None,
        *,
        token: CancellationToken | None = None,
    ) -> str:
        [result] = await self.translate_batch([text], target_lang, token=token)
        return result

    async def translate_batch(
        self,
        texts: Sequence[str],
        target_lang: str | None = None,
        *,
        token: CancellationToken | None = None,
    ) -> List[str]:
        if target_lang is not None and not is_supported(target_lang):
            raise ValueError(f"Unsupported language: {target_lang!r}")
        lang = target_lang or self._language
        return await self.gateway.translate_batch(texts, lang, override=target_lang is not None, token=token)
