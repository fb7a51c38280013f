from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from translator.context import TranslationContext
from utils.cancellation import CancellationToken
from utils.text import is_translatable

from .base import TranslationBinding


Record = Mapping[str, Any]


async def translate_records(
    context: TranslationContext,
    items: Sequence[Record],
    fields: Sequence[str],
    *,
    target_lang: str | None = None,
    token: CancellationToken | None = None,
) -> List[Dict[str, Any]]:
    """Translate the named string fields of every record in a single batch.

    Returns shallow copies of the records; empty and non-string field values
    are left as they were.
    """
    texts: List[str] = []
    slots: List[Tuple[int, str]] = []
    for row, item in enumerate(items):
        for name in fields:
            value = item.get(name)
            if is_translatable(value):
                slots.append((row, name))
                texts.append(value)

    results = [dict(item) for item in items]
    if not texts:
        return results

    translated = await context.translate_batch(texts, target_lang, token=token)
    for (row, name), value in zip(slots, translated):
        results[row][name] = value
    return results


class DynamicTranslation(TranslationBinding[List[Dict[str, Any]]]):
    """Database rows whose text fields follow the active site language."""

    def __init__(
        self,
        context: TranslationContext,
        items: Sequence[Record],
        fields: Sequence[str],
        on_change: Optional[Callable[[List[Dict[str, Any]]], None]] = None,
    ) -> None:
        self._items = list(items)
        self._fields = list(fields)
        super().__init__(context, on_change)

    @property
    def items(self) -> List[Dict[str, Any]]:
        return self._value

    def set_items(self, items: Sequence[Record]) -> None:
        self._items = list(items)
        self._commit(self._original())
        self.refresh()

    def _original(self) -> List[Dict[str, Any]]:
        return [dict(item) for item in self._items]

    async def _resolve(self, token: CancellationToken) -> List[Dict[str, Any]]:
        return await translate_records(self.context, self._items, self._fields, token=token)
