from .base import TranslationBinding
from .records import DynamicTranslation, translate_records
from .text import TranslatedText, TranslatedTexts

__all__ = [
    "TranslationBinding",
    "DynamicTranslation",
    "translate_records",
    "TranslatedText",
    "TranslatedTexts",
]
