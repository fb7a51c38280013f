from __future__ import annotations

import asyncio
import heapq
import itertools
from typing import Callable, Dict, List, Tuple

import pytest

from translator.base import BaseTranslator, TranslationRequest
from translator.context import TranslationContext
from translator.gateway import RateLimiter, TranslationGateway
from utils.cache import TranslationCache
from utils.storage import MemoryStorage


class FakeClock:
    """Virtual time: sleepers wake in deadline order without real waiting."""

    settle_turns = 20

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start
        self.sleeps: List[float] = []
        self._timers: List[Tuple[float, int, asyncio.Future]] = []
        self._counter = itertools.count()
        self._advancing = False
        self._advancer: asyncio.Task | None = None

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, delay: float) -> None:
        self.sleeps.append(delay)
        loop = asyncio.get_running_loop()
        waiter = loop.create_future()
        heapq.heappush(self._timers, (self.now + delay, next(self._counter), waiter))
        if not self._advancing:
            self._advancing = True
            self._advancer = loop.create_task(self._advance())
        await waiter

    async def _advance(self) -> None:
        # Time only moves once woken tasks (and any tasks they spawn, such as
        # the one wait_for wraps a coroutine in) have run up to their next await.
        while self._timers:
            for _ in range(self.settle_turns):
                await asyncio.sleep(0)
            deadline, _, waiter = heapq.heappop(self._timers)
            self.now = max(self.now, deadline)
            if not waiter.done():
                waiter.set_result(None)
        self._advancing = False


class FakeTranslator(BaseTranslator):
    name = "fake"

    def __init__(
        self,
        translations: Dict[str, str] | None = None,
        *,
        clock: FakeClock | None = None,
        error: Exception | None = None,
        result: object = None,
    ) -> None:
        super().__init__(timeout=5.0)
        self.translations = translations or {}
        self.clock = clock
        self.error = error
        self.result = result
        self.gate: asyncio.Event | None = None
        self.calls: List[Tuple[List[str], str]] = []
        self.issued_at: List[float] = []
        self.closed = False

    def hold(self) -> asyncio.Event:
        self.gate = asyncio.Event()
        return self.gate

    async def translate_texts(self, request: TranslationRequest) -> List[str]:
        self.calls.append((list(request.texts), request.target_lang))
        if self.clock is not None:
            self.issued_at.append(self.clock())
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        if self.result is not None:
            return self.result  # type: ignore[return-value]
        return [self.translations.get(text, f"<{request.target_lang}:{text}>") for text in request.texts]

    async def close(self) -> None:
        self.closed = True


class Notices:
    def __init__(self) -> None:
        self.items: List[Tuple[str, str]] = []

    def __call__(self, title: str, description: str) -> None:
        self.items.append((title, description))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def notices() -> Notices:
    return Notices()


@pytest.fixture
def translator(clock: FakeClock) -> FakeTranslator:
    return FakeTranslator({"Home": "হোম", "About": "সম্পর্কে", "Hello": "নমস্কার"}, clock=clock)


@pytest.fixture
def cache(storage: MemoryStorage, clock: FakeClock) -> TranslationCache:
    cache = TranslationCache(storage, clock=clock)
    cache.load()
    return cache


@pytest.fixture
def make_gateway(cache: TranslationCache, clock: FakeClock, notices: Notices) -> Callable[..., TranslationGateway]:
    def factory(translator: BaseTranslator, **kwargs) -> TranslationGateway:
        kwargs.setdefault("rate_limiter", RateLimiter(1.0, clock=clock, sleep=clock.sleep))
        kwargs.setdefault("notifier", notices)
        return TranslationGateway(translator, cache, **kwargs)

    return factory


@pytest.fixture
def gateway(make_gateway, translator: FakeTranslator) -> TranslationGateway:
    return make_gateway(translator)


@pytest.fixture
def context(gateway: TranslationGateway, storage: MemoryStorage) -> TranslationContext:
    return TranslationContext(gateway, storage)
