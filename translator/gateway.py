from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Sequence

from loguru import logger

from config import SETTINGS
from utils.cache import TranslationCache
from utils.cancellation import CancellationToken
from utils.text import deduplicate_texts, is_translatable, make_batch_key

from .base import BaseTranslator, ErrorKind, TranslationError, TranslationRequest


Notifier = Callable[[str, str], None]
Clock = Callable[[], float]
Sleeper = Callable[[float], Awaitable[None]]

FAILURE_TITLE = "Translation Error"
FAILURE_MESSAGE = "Failed to translate content. Showing original text."


def log_notifier(title: str, description: str) -> None:
    logger.warning(f"{title}: {description}")


class RateLimiter:
    """Keeps at least ``min_interval`` seconds between issued calls.

    The next slot is reserved before sleeping, so callers that arrive while
    another one is waiting line up behind it instead of sharing its slot.
    """

    def __init__(self, min_interval: float, *, clock: Clock = time.monotonic, sleep: Sleeper = asyncio.sleep) -> None:
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last_issued: float | None = None

    @property
    def last_issued(self) -> float | None:
        return self._last_issued

    async def acquire(self) -> float:
        now = self._clock()
        slot = now if self._last_issued is None else max(now, self._last_issued + self.min_interval)
        self._last_issued = slot
        delay = slot - now
        if delay > 0:
            logger.debug(f"Rate limiting translation call for {delay:.2f}s")
            await self._sleep(delay)
        return slot


@dataclass(slots=True)
class PendingBatch:
    task: "asyncio.Task[List[str]]"
    tokens: List[CancellationToken | None] = field(default_factory=list)

    def has_live_waiter(self) -> bool:
        return any(token is None or not token.cancelled for token in self.tokens)


class TranslationGateway:
    def __init__(
        self,
        translator: BaseTranslator,
        cache: TranslationCache,
        *,
        rate_limiter: RateLimiter | None = None,
        notifier: Notifier | None = None,
        timeout: float | None = None,
    ) -> None:
        self.translator = translator
        self.cache = cache
        self.rate_limiter = rate_limiter or RateLimiter(SETTINGS.translation.min_request_interval)
        self.notifier = notifier or log_notifier
        self.timeout = timeout if timeout is not None else SETTINGS.translation.request_timeout
        self._pending: Dict[str, PendingBatch] = {}

    @property
    def busy(self) -> bool:
        return bool(self._pending)

    async def translate(
        self,
        text: str,
        target_lang: str,
        *,
        override: bool = False,
        token: CancellationToken | None = None,
    ) -> str:
        [result] = await self.translate_batch([text], target_lang, override=override, token=token)
        return result

    async def translate_batch(
        self,
        texts: Sequence[str],
        target_lang: str,
        *,
        override: bool = False,
        token: CancellationToken | None = None,
    ) -> List[str]:
        """Translate texts, returning a list aligned index for index with the input.

        Never raises for translation failures; untranslated originals are
        returned in their place.
        """
        if target_lang == "en" and not override:
            return list(texts)

        results: List[str] = list(texts)
        missed_indexes: List[int] = []
        missed_texts: List[str] = []
        for idx, text in enumerate(texts):
            if not is_translatable(text):
                continue
            cached = self.cache.get(target_lang, text)
            if cached is not None:
                results[idx] = cached
            else:
                missed_indexes.append(idx)
                missed_texts.append(text)

        if not missed_texts:
            return results

        if token is not None and token.cancelled:
            logger.debug("Skipping translation for a cancelled request")
            return results

        dedup = deduplicate_texts(missed_texts)
        key = make_batch_key(target_lang, dedup.unique_texts)
        pending = self._pending.get(key)
        if pending is None:
            pending = PendingBatch(task=asyncio.ensure_future(self._fetch(key, dedup.unique_texts, target_lang)))
            self._pending[key] = pending
        else:
            logger.debug(f"Joining in-flight translation of {len(dedup.unique_texts)} texts")
        pending.tokens.append(token)

        translations = await asyncio.shield(pending.task)
        for translated, group in zip(translations, dedup.groups):
            for position in group:
                results[missed_indexes[position]] = translated
        return results

    async def _fetch(self, key: str, texts: List[str], target_lang: str) -> List[str]:
        try:
            await self.rate_limiter.acquire()
            pending = self._pending.get(key)
            if pending is not None and not pending.has_live_waiter():
                logger.debug(f"Dropping translation of {len(texts)} texts, every caller was cancelled")
                return list(texts)
            request = TranslationRequest(texts=texts, target_lang=target_lang)
            deadline = self.translator.deadline_for(texts, self.timeout)
            try:
                translations = await asyncio.wait_for(self.translator.translate_texts(request), deadline)
            except asyncio.TimeoutError as exc:
                raise TranslationError(ErrorKind.TIMEOUT, f"Translation timed out after {deadline}s") from exc
            if (
                not isinstance(translations, list)
                or len(translations) != len(texts)
                or not all(isinstance(item, str) for item in translations)
            ):
                raise TranslationError(ErrorKind.MALFORMED, "Translator returned a malformed result")
        except TranslationError as exc:
            self._report_failure(key, exc)
            return list(texts)
        except Exception as exc:  # noqa: BLE001
            logger.exception(f"Unexpected translation failure: {exc}")
            self._report_failure(key, TranslationError(ErrorKind.NETWORK_FAILURE, str(exc)))
            return list(texts)
        finally:
            self._pending.pop(key, None)

        for text, translated in zip(texts, translations):
            self.cache.put(target_lang, text, translated)
        self.cache.save()
        logger.debug(f"Translated {len(texts)} texts to {target_lang}")
        return translations

    def _report_failure(self, key: str, exc: TranslationError) -> None:
        if exc.kind is ErrorKind.RATE_LIMITED:
            logger.debug(f"Translation rate limited, showing original text: {exc}")
            return
        logger.error(f"Translation failed ({exc.kind.value}): {exc}")
        pending = self._pending.get(key)
        if pending is not None and not pending.has_live_waiter():
            return
        self.notifier(FAILURE_TITLE, FAILURE_MESSAGE)
