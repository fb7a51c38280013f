from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence


BATCH_KEY_SEPARATOR = "|||"


@dataclass(slots=True)
class DeduplicationResult:
    unique_texts: List[str]
    groups: List[List[int]]  # Each group contains indexes pointing back to the source list


def is_blank(text: object) -> bool:
    return isinstance(text, str) and not text.strip()


def is_translatable(text: object) -> bool:
    return isinstance(text, str) and bool(text.strip())


def deduplicate_texts(texts: Sequence[str]) -> DeduplicationResult:
    unique: List[str] = []
    groups: List[List[int]] = []
    positions: dict[str, int] = {}
    for idx, text in enumerate(texts):
        match_index = positions.get(text)
        if match_index is None:
            positions[text] = len(unique)
            unique.append(text)
            groups.append([idx])
        else:
            groups[match_index].append(idx)
    return DeduplicationResult(unique_texts=unique, groups=groups)


def make_batch_key(target_lang: str, texts: Sequence[str]) -> str:
    return f"{target_lang}:{BATCH_KEY_SEPARATOR.join(texts)}"


def strip_code_fence(content: str) -> str:
    """Remove a Markdown code fence wrapped around a model reply."""
    cleaned = content.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()
