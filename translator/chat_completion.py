"""
Chat-completion translator

The translation function itself: forwards texts to an OpenAI-compatible
chat-completion endpoint with a fixed, structure-preserving prompt and parses
the JSON array the model returns.
"""
from __future__ import annotations

import asyncio
import json
import logging
from typing import List, Optional

import aiohttp

from utils.text import strip_code_fence

from .base import BaseTranslator, ErrorKind, TranslationError, TranslationRequest


BENGALI_PROMPT = """You are a professional translator. Translate the following English text to Indian Bengali (Kolkata style).
Rules:
- Use natural, conversational but respectful Indian Bengali
- Keep technical terms, proper nouns, and brand names in English
- Maintain the same formatting and structure
- Keep numbers as-is
- Do not add any explanations, just translate
- Return ONLY a JSON array of translated strings in the same order as input"""

ENGLISH_PROMPT = """You are a professional translator. Translate the following Bengali text to English.
Rules:
- Use clear, natural English
- Maintain the same formatting and structure
- Keep numbers as-is
- Do not add any explanations, just translate
- Return ONLY a JSON array of translated strings in the same order as input"""


def system_prompt(target_lang: str) -> str:
    return BENGALI_PROMPT if target_lang == "bn" else ENGLISH_PROMPT


def user_prompt(texts: List[str]) -> str:
    return (
        f"Translate these texts:\n{json.dumps(texts, ensure_ascii=False)}\n\n"
        "Return ONLY a JSON array of translated strings."
    )


def parse_translations(content: str | None) -> List[str]:
    """Parse the model reply into a list of strings.

    Raises TranslationError(MALFORMED) when the reply is empty, is not JSON,
    or is not an array of strings.
    """
    if not content:
        raise TranslationError(ErrorKind.MALFORMED, "No content in model response")
    try:
        parsed = json.loads(strip_code_fence(content))
    except json.JSONDecodeError as exc:
        raise TranslationError(ErrorKind.MALFORMED, f"Failed to parse translations: {content[:200]}") from exc
    if not isinstance(parsed, list) or not all(isinstance(item, str) for item in parsed):
        raise TranslationError(ErrorKind.MALFORMED, "Model response is not a JSON array of strings")
    return parsed


class ChatCompletionTranslator(BaseTranslator):
    name = "chat"

    def __init__(
        self,
        *,
        api_key: str,
        api_url: str,
        model: str,
        batch_char_limit: int = 6000,
        batch_size: int = 50,
        timeout: float = 60.0,
    ) -> None:
        if not api_key:
            raise ValueError("AI gateway API key is required")

        super().__init__(timeout=timeout)
        self.api_key = api_key
        self.api_url = api_url
        self.model = model
        self.batch_char_limit = batch_char_limit
        self.batch_size = batch_size
        self._session: Optional[aiohttp.ClientSession] = None
        self.logger = logging.getLogger(self.__class__.__name__)

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            headers = {
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            }
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            self._session = aiohttp.ClientSession(headers=headers, timeout=timeout)
        return self._session

    async def close(self) -> None:
        if self._session:
            await self._session.close()
            self._session = None

    async def _complete(self, texts: List[str], target_lang: str) -> List[str]:
        session = await self._get_session()
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt(target_lang)},
                {"role": "user", "content": user_prompt(texts)},
            ],
        }
        self.logger.info(f"Translating {len(texts)} texts to {target_lang}")

        try:
            async with session.post(self.api_url, json=payload) as resp:
                if resp.status == 429:
                    raise TranslationError.from_status(429, "Translation service is busy. Please try again later.")
                if resp.status == 402:
                    raise TranslationError.from_status(402, "Translation credits exhausted.")
                if resp.status != 200:
                    body = await resp.text()
                    self.logger.error(f"AI gateway error: {resp.status} {body[:200]}")
                    raise TranslationError.from_status(resp.status, "Translation failed")
                try:
                    data = await resp.json(content_type=None)
                except ValueError as exc:
                    raise TranslationError(ErrorKind.MALFORMED, "Invalid translation response") from exc
        except asyncio.TimeoutError as exc:
            raise TranslationError(ErrorKind.TIMEOUT, "AI gateway timed out") from exc
        except aiohttp.ClientError as exc:
            raise TranslationError(ErrorKind.NETWORK_FAILURE, f"AI gateway connection error: {exc}") from exc

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            content = None
        translations = parse_translations(content)
        if len(translations) != len(texts):
            raise TranslationError(
                ErrorKind.MALFORMED,
                f"Model returned {len(translations)} translations for {len(texts)} texts",
            )
        return translations

    def _build_chunks(self, texts: List[str]) -> List[List[str]]:
        # An oversized text still travels alone in its own chunk.
        chunks: List[List[str]] = [[]]
        size = 0
        for text in texts:
            current = chunks[-1]
            if current and (size + len(text) > self.batch_char_limit or len(current) >= self.batch_size):
                chunks.append([])
                size = 0
            chunks[-1].append(text)
            size += len(text)
        return chunks

    def deadline_for(self, texts, per_call: float) -> float:
        # Chunks go out one after another, each with its own budget.
        return per_call * max(1, len(self._build_chunks(list(texts))))

    async def translate_texts(self, request: TranslationRequest) -> List[str]:
        texts = list(request.texts)
        if not texts:
            return []

        results: List[str] = []
        for chunk in self._build_chunks(texts):
            results.extend(await self._complete(chunk, request.target_lang))

        self.logger.info(f"Successfully translated {len(results)} texts")
        return results
