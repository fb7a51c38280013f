from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence


class ErrorKind(str, Enum):
    RATE_LIMITED = "rate_limited"
    QUOTA_EXCEEDED = "quota_exceeded"
    MALFORMED = "malformed"
    NETWORK_FAILURE = "network_failure"
    TIMEOUT = "timeout"


class TranslationError(RuntimeError):
    def __init__(self, kind: ErrorKind, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.status = status

    @classmethod
    def from_status(cls, status: int, message: str) -> "TranslationError":
        if status == 429:
            return cls(ErrorKind.RATE_LIMITED, message, status=status)
        if status == 402:
            return cls(ErrorKind.QUOTA_EXCEEDED, message, status=status)
        return cls(ErrorKind.NETWORK_FAILURE, message, status=status)


@dataclass(slots=True)
class TranslationRequest:
    texts: Sequence[str]
    target_lang: str


class BaseTranslator(ABC):
    name: str = "base"

    def __init__(self, *, timeout: float = 30.0) -> None:
        self.timeout = timeout

    @abstractmethod
    async def translate_texts(self, request: TranslationRequest) -> List[str]:
        """Translate a batch of texts and return the translated payloads.

        Implementations raise TranslationError on any failure.
        """

    def deadline_for(self, texts: Sequence[str], per_call: float) -> float:
        """Seconds a whole batch may take when one upstream call gets ``per_call``."""
        return per_call

    async def close(self) -> None:
        return None
