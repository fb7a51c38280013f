from __future__ import annotations

from typing import Sequence

from langdetect import DetectorFactory, LangDetectException, detect

from config import DEFAULT_LANGUAGE, SUPPORTED_LANGUAGES
from utils.text import is_translatable

DetectorFactory.seed = 0

# Bengali script block, used before falling back to statistical detection.
_BENGALI_RANGE = (0x0980, 0x09FF)


def normalize_language(value: object, *, default: str = DEFAULT_LANGUAGE) -> str:
    if isinstance(value, str) and value.strip().lower() in SUPPORTED_LANGUAGES:
        return value.strip().lower()
    return default


def is_supported(value: object) -> bool:
    return isinstance(value, str) and value in SUPPORTED_LANGUAGES


def other_language(lang: str) -> str:
    return "en" if lang == "bn" else "bn"


def detect_language(texts: Sequence[object], *, max_chars: int = 2500) -> str | None:
    """Guess whether ``texts`` are Bengali or English; None when nothing is readable.

    Any non-Bengali script counts as English, the only other site language.
    """
    sample = _build_sample(texts, max_chars=max_chars)
    if not sample:
        return None
    if _bengali_ratio(sample) >= 0.3:
        return "bn"
    try:
        code = detect(sample)
    except LangDetectException:
        return None
    return "bn" if code == "bn" else "en"


def _bengali_ratio(sample: str) -> float:
    letters = [ch for ch in sample if ch.isalpha()]
    if not letters:
        return 0.0
    low, high = _BENGALI_RANGE
    return sum(1 for ch in letters if low <= ord(ch) <= high) / len(letters)


def _build_sample(texts: Sequence[object], *, max_chars: int) -> str:
    # Repeated labels (menu items, table headers) would skew the guess.
    unique = dict.fromkeys(text.strip() for text in texts if is_translatable(text))
    sample = "\n".join(unique)
    return sample[:max_chars].rstrip()
