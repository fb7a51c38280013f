"""
Hosted translate function client

Calls the site's `translate` edge function, which wraps the AI gateway.
"""
from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

import aiohttp

from .base import BaseTranslator, ErrorKind, TranslationError, TranslationRequest


class FunctionTranslator(BaseTranslator):
    """Client for the hosted `translate` function.

    Request body is ``{"texts": [...], "targetLanguage": "bn"}`` and a
    successful reply is ``{"translations": [...]}``. HTTP 429 and 402 are
    mapped to rate-limit and quota errors.
    """

    name = "function"
    FUNCTION_NAME = "translate"

    def __init__(
        self,
        *,
        functions_url: str,
        anon_key: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        if not functions_url:
            raise ValueError("Functions URL is required")

        super().__init__(timeout=timeout)
        self.endpoint = f"{functions_url.rstrip('/')}/{self.FUNCTION_NAME}"
        self.anon_key = anon_key
        self._session: Optional[aiohttp.ClientSession] = None
        self.logger = logging.getLogger(self.__class__.__name__)

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            headers = {"Content-Type": "application/json"}
            if self.anon_key:
                headers["Authorization"] = f"Bearer {self.anon_key}"
                headers["apikey"] = self.anon_key
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            self._session = aiohttp.ClientSession(headers=headers, timeout=timeout)
        return self._session

    async def close(self) -> None:
        if self._session:
            await self._session.close()
            self._session = None

    async def translate_texts(self, request: TranslationRequest) -> List[str]:
        texts = list(request.texts)
        if not texts:
            return []

        session = await self._get_session()
        payload = {"texts": texts, "targetLanguage": request.target_lang}

        try:
            async with session.post(self.endpoint, json=payload) as resp:
                if resp.status != 200:
                    body = await resp.text()
                    raise TranslationError.from_status(
                        resp.status, f"translate function: HTTP {resp.status} - {body[:200]}"
                    )
                try:
                    data = await resp.json(content_type=None)
                except ValueError as exc:
                    raise TranslationError(ErrorKind.MALFORMED, "translate function returned invalid JSON") from exc
        except asyncio.TimeoutError as exc:
            raise TranslationError(ErrorKind.TIMEOUT, "translate function timed out") from exc
        except aiohttp.ClientError as exc:
            raise TranslationError(ErrorKind.NETWORK_FAILURE, f"translate function connection error: {exc}") from exc

        translations = data.get("translations") if isinstance(data, dict) else None
        if not isinstance(translations, list):
            raise TranslationError(ErrorKind.MALFORMED, "translate function reply has no translations array")

        self.logger.debug(f"translate function returned {len(translations)} translations for {len(texts)} texts")
        return translations
