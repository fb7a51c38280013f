from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Callable, Generic, Optional, TypeVar

from loguru import logger

from translator.context import TranslationContext
from utils.cancellation import CancellationToken


T = TypeVar("T")


class TranslationBinding(ABC, Generic[T]):
    """Keeps a displayed value in step with its source input and the site language.

    Each refresh cancels the previous request's token, so a result that
    arrives after the input changed or the binding was closed is dropped.
    Must be created while an event loop is running.
    """

    def __init__(self, context: TranslationContext, on_change: Optional[Callable[[T], None]] = None) -> None:
        self.context = context
        self.on_change = on_change
        self._loop = asyncio.get_running_loop()
        self._token: CancellationToken | None = None
        self._task: Optional[asyncio.Task[None]] = None
        self._closed = False
        self._value: T = self._original()
        self._unsubscribe = context.subscribe(lambda _lang: self.refresh())
        self.refresh()

    @abstractmethod
    def _original(self) -> T:
        """The untranslated value for the current input."""

    @abstractmethod
    async def _resolve(self, token: CancellationToken) -> T:
        """Translate the current input."""

    @property
    def value(self) -> T:
        return self._value

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def closed(self) -> bool:
        return self._closed

    def refresh(self) -> None:
        if self._token is not None:
            self._token.cancel()
            self._token = None
        if self._closed:
            return
        if self.context.language == "en":
            self._task = None
            self._commit(self._original())
            return
        token = CancellationToken()
        self._token = token
        self._task = self._loop.create_task(self._run(token))

    async def _run(self, token: CancellationToken) -> None:
        value = await self._resolve(token)
        if token.cancelled:
            logger.debug(f"Discarding stale translation for {type(self).__name__}")
            return
        self._commit(value)

    def _commit(self, value: T) -> None:
        changed = value != self._value
        self._value = value
        if changed and self.on_change is not None:
            self.on_change(value)

    async def wait(self) -> T:
        """Wait for the request in flight, if any, and return the current value."""
        if self._task is not None:
            await self._task
        return self._value

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._token is not None:
            self._token.cancel()
            self._token = None
        self._unsubscribe()
