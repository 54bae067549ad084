# src/pupil_anonymiser/llm/clients/openai.py
from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

import requests

from ...config import OPENAI_DEFAULT_BASE_URL
from ..base import LLMConfig, LLMMessage, LLMResponse

logger = logging.getLogger(__name__)


class OpenAIClient:
    """
    /chat/completions client for OpenAI (or any compatible endpoint).
    Retries a fixed number of times with a fixed delay.
    """

    def __init__(self, cfg: LLMConfig, session: Optional[requests.Session] = None):
        self.cfg = cfg
        self.base_url = (cfg.base_url or OPENAI_DEFAULT_BASE_URL).rstrip("/")
        if not cfg.api_key:
            raise ValueError("OpenAIClient requires api_key")
        self.session = session or requests.Session()

    def _build_payload(
        self,
        messages: List[LLMMessage],
        temperature: float,
        max_tokens: Optional[int],
        response_format: Optional[str],
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self.cfg.model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "temperature": temperature,
        }
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        if response_format == "json":
            payload["response_format"] = {"type": "json_object"}
        if self.cfg.extra:
            payload.update(self.cfg.extra)
        return payload

    def chat(
        self,
        messages: List[LLMMessage],
        *,
        temperature: float = 0.0,
        max_tokens: Optional[int] = None,
        response_format: Optional[str] = None,
    ) -> LLMResponse:
        headers = {
            "Authorization": f"Bearer {self.cfg.api_key}",
            "Content-Type": "application/json",
        }
        payload = self._build_payload(messages, temperature, max_tokens, response_format)
        url = f"{self.base_url}/chat/completions"
        attempts = max(1, self.cfg.max_retries)

        last_exc: Optional[Exception] = None
        for attempt in range(1, attempts + 1):
            try:
                logger.debug("Calling %s (attempt %d, model=%s)", url, attempt, self.cfg.model)
                resp = self.session.post(url, json=payload, headers=headers, timeout=self.cfg.timeout)
                resp.raise_for_status()
                data = resp.json()
                content = data["choices"][0]["message"]["content"]
                if not isinstance(content, str):
                    logger.warning("Unexpected content type from %s: %r", url, type(content))
                    content = "" if content is None else str(content)
                return LLMResponse(content=content.strip(), raw=data)
            except (requests.RequestException, KeyError, IndexError, ValueError) as e:
                last_exc = e
                logger.warning(
                    "chat/completions failed (attempt %d/%d): %s",
                    attempt,
                    attempts,
                    e,
                )
                if attempt == attempts:
                    break
                time.sleep(self.cfg.retry_delay)

        logger.error("Max retries for chat/completions reached. Giving up.")
        if last_exc:
            raise last_exc
        raise RuntimeError("chat/completions failed for unknown reasons")


__all__ = ["OpenAIClient"]
