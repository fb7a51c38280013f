from __future__ import annotations

from typing import Callable, List, Optional, Sequence

from translator.context import TranslationContext
from utils.cancellation import CancellationToken

from .base import TranslationBinding


class TranslatedText(TranslationBinding[str]):
    """A single UI string shown in the active site language."""

    def __init__(
        self,
        context: TranslationContext,
        text: str,
        on_change: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._text = text
        super().__init__(context, on_change)

    @property
    def text(self) -> str:
        return self._text

    def set_text(self, text: str) -> None:
        if text == self._text:
            return
        self._text = text
        self._commit(text)
        self.refresh()

    def _original(self) -> str:
        return self._text

    async def _resolve(self, token: CancellationToken) -> str:
        return await self.context.translate(self._text, token=token)


class TranslatedTexts(TranslationBinding[List[str]]):
    """A fixed list of static strings translated in one batch."""

    def __init__(
        self,
        context: TranslationContext,
        texts: Sequence[str],
        on_change: Optional[Callable[[List[str]], None]] = None,
    ) -> None:
        self._texts = list(texts)
        super().__init__(context, on_change)

    @property
    def texts(self) -> List[str]:
        return list(self._texts)

    def set_texts(self, texts: Sequence[str]) -> None:
        if list(texts) == self._texts:
            return
        self._texts = list(texts)
        self._commit(self._original())
        self.refresh()

    def _original(self) -> List[str]:
        return list(self._texts)

    async def _resolve(self, token: CancellationToken) -> List[str]:
        return await self.context.translate_batch(self._texts, token=token)
