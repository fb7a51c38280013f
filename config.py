from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
import os


BASE_DIR = Path(__file__).resolve().parent
DEFAULT_STORAGE_PATH = BASE_DIR / "storage" / "local_storage.json"

SUPPORTED_LANGUAGES = ("en", "bn")
DEFAULT_LANGUAGE = "en"


@dataclass(slots=True)
class TranslationSettings:
    cache_ttl: float = 24 * 60 * 60
    min_request_interval: float = 1.0
    request_timeout: float = field(default_factory=lambda: float(os.getenv("BANGLA_REQUEST_TIMEOUT", "30")))
    cache_key: str = "translation_cache_v2"
    cache_version: int = 2
    language_key: str = "siteLanguage"


@dataclass(slots=True)
class ChatSettings:
    batch_char_limit: int = 6000
    batch_size: int = 50
    model: str = field(default_factory=lambda: os.getenv("BANGLA_CHAT_MODEL", "google/gemini-3-flash-preview"))
    session_timeout: float = 60.0


@dataclass(slots=True)
class EngineSecrets:
    functions_url: str | None = field(default_factory=lambda: os.getenv("BANGLA_FUNCTIONS_URL"))
    anon_key: str | None = field(default_factory=lambda: os.getenv("BANGLA_ANON_KEY"))
    ai_gateway_url: str = field(
        default_factory=lambda: os.getenv("AI_GATEWAY_URL", "https://ai.gateway.lovable.dev/v1/chat/completions")
    )
    ai_gateway_key: str | None = field(default_factory=lambda: os.getenv("AI_GATEWAY_API_KEY"))


@dataclass(slots=True)
class AppSettings:
    translation: TranslationSettings = field(default_factory=TranslationSettings)
    chat: ChatSettings = field(default_factory=ChatSettings)
    secrets: EngineSecrets = field(default_factory=EngineSecrets)
    storage_path: Path = field(default_factory=lambda: Path(os.getenv("BANGLA_STORAGE", DEFAULT_STORAGE_PATH)))
    default_engine: str = field(default_factory=lambda: os.getenv("BANGLA_ENGINE", "function"))


SETTINGS = AppSettings()
