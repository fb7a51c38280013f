"""
Translator Factory

Factory for creating translator instances.
Supports: hosted translate function, direct chat-completion gateway.
"""
from __future__ import annotations

from typing import Optional

from config import SETTINGS
from .base import BaseTranslator
from .chat_completion import ChatCompletionTranslator
from .function_client import FunctionTranslator


# Available translation engines
AVAILABLE_ENGINES = {
    "function": "Hosted translate function",
    "chat": "AI gateway (chat completion)",
}


def get_available_engines() -> dict[str, str]:
    """Get available translation engines with display names."""
    return AVAILABLE_ENGINES.copy()


def build_translator(
    engine_name: str | None = None,
    *,
    functions_url: Optional[str] = None,
    anon_key: Optional[str] = None,
    api_key: Optional[str] = None,
) -> BaseTranslator:
    """Build a translator instance.

    Args:
        engine_name: Name of the engine (function, chat); defaults to settings
        functions_url: Base URL of the hosted functions (function engine)
        anon_key: Public key sent with function calls (function engine)
        api_key: AI gateway key (chat engine)

    Raises:
        ValueError: If engine is not supported or required params missing
    """
    engine = (engine_name or SETTINGS.default_engine).lower()

    if engine == "function":
        url = functions_url or SETTINGS.secrets.functions_url
        if not url:
            raise ValueError("Functions URL is required. Set BANGLA_FUNCTIONS_URL.")
        return FunctionTranslator(
            functions_url=url,
            anon_key=anon_key or SETTINGS.secrets.anon_key,
            timeout=SETTINGS.translation.request_timeout,
        )

    if engine == "chat":
        key = api_key or SETTINGS.secrets.ai_gateway_key
        if not key:
            raise ValueError("AI gateway API key is required. Set AI_GATEWAY_API_KEY.")
        return ChatCompletionTranslator(
            api_key=key,
            api_url=SETTINGS.secrets.ai_gateway_url,
            model=SETTINGS.chat.model,
            batch_char_limit=SETTINGS.chat.batch_char_limit,
            batch_size=SETTINGS.chat.batch_size,
            timeout=SETTINGS.chat.session_timeout,
        )

    raise ValueError(f"Unsupported translator engine: {engine_name}")
