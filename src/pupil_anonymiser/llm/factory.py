# src/pupil_anonymiser/llm/factory.py
from __future__ import annotations

import os

from ..config import LLM_PROFILES, OPENAI_DEFAULT_BASE_URL
from .base import LLMClient, LLMConfig
from .clients.openai import OpenAIClient


def _create_openai_client(model: str, profile: dict) -> OpenAIClient:
    """
    api_key comes from profile["api_key"] or the environment variable named
    by profile["api_key_env"].
    """
    base_url = profile.get("base_url") or OPENAI_DEFAULT_BASE_URL
    api_key = profile.get("api_key")

    api_key_env = profile.get("api_key_env")
    if api_key_env and not api_key:
        api_key = os.getenv(api_key_env)

    if not api_key:
        raise ValueError(
            f"OpenAI provider requires an API key (set {api_key_env or 'api_key'} in LLM_PROFILES)"
        )

    cfg = LLMConfig(
        provider="openai",
        model=model,
        base_url=base_url,
        api_key=api_key,
        timeout=int(profile.get("timeout", 60)),
    )
    return OpenAIClient(cfg)


def create_llm_client(role: str = "reports", model: str | None = None) -> LLMClient:
    """
    LLM client for a role in LLM_PROFILES, e.g.

    LLM_PROFILES = {
        "reports": {
            "provider": "openai",
            "model": "gpt-4o-mini",
            "api_key_env": "OPENAI_API_KEY",
        },
    }
    `model` overrides the profile's model.
    """
    if role not in LLM_PROFILES:
        raise KeyError(f"Unknown LLM role: {role}")

    profile = LLM_PROFILES[role]
    provider = profile["provider"]
    model = model or profile["model"]

    if provider == "openai":
        return _create_openai_client(model=model, profile=profile)

    raise ValueError(f"Unknown LLM provider: {provider}")
