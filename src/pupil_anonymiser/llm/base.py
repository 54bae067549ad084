# src/pupil_anonymiser/llm/base.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol

from ..config import LLM_DEFAULT_MAX_RETRIES, LLM_DEFAULT_RETRY_DELAY


@dataclass
class LLMConfig:
    provider: str           # "openai"
    model: str
    base_url: str | None = None
    api_key: str | None = None
    timeout: int = 60
    max_retries: int = LLM_DEFAULT_MAX_RETRIES
    retry_delay: float = LLM_DEFAULT_RETRY_DELAY  # seconds
    extra: Dict[str, Any] | None = None  # provider specific parameters


@dataclass
class LLMMessage:
    role: str   # "system" | "user" | "assistant"
    content: str


@dataclass
class LLMResponse:
    content: str
    raw: Any | None = None  # keep the raw payload for debugging


class LLMClient(Protocol):
    """
    Everything that talks to a text-generation service.
    Only anonymised text may be passed in.
    """

    def chat(
        self,
        messages: List[LLMMessage],
        *,
        temperature: float = 0.0,
        max_tokens: Optional[int] = None,
        response_format: Optional[str] = None,  # "json"
    ) -> LLMResponse:
        ...
