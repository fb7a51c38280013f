"""
Bangla translation layer

Engines:
- Hosted translate function (the site's edge function)
- Chat-completion AI gateway (what the function runs)
"""
from .base import BaseTranslator, ErrorKind, TranslationError, TranslationRequest
from .chat_completion import ChatCompletionTranslator
from .function_client import FunctionTranslator
from .factory import build_translator, get_available_engines, AVAILABLE_ENGINES
from .gateway import RateLimiter, TranslationGateway
from .context import TranslationContext

__all__ = [
    "BaseTranslator",
    "ErrorKind",
    "TranslationError",
    "TranslationRequest",
    "ChatCompletionTranslator",
    "FunctionTranslator",
    "build_translator",
    "get_available_engines",
    "AVAILABLE_ENGINES",
    "RateLimiter",
    "TranslationGateway",
    "TranslationContext",
]
