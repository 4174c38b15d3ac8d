import os
from typing import Optional

from ai.service import AIService
from ai.openai_service import OpenAIService
from ai.gemini_service import GeminiService
from ai.claude_service import ClaudeService
from config.settings import DEFAULT_PROVIDER, ENV_PROVIDER

SUPPORTED_PROVIDERS = ("gemini", "openai", "claude")


def _make_service(provider: str) -> AIService:
    """Instantiate the appropriate AIService for a provider name."""
    provider = provider.lower().strip()
    if provider == "gemini":
        return GeminiService()
    if provider in ("claude", "anthropic"):
        return ClaudeService()
    if provider == "openai":
        return OpenAIService()
    raise ValueError(f"Unknown AI provider: {provider!r}")


def get_planning_service(provider: Optional[str] = None) -> AIService:
    """
    Return the AIService used to generate plans.

    When *provider* is not given it is read from the PLANNER_AI_PROVIDER
    env var:
      - "gemini"     → GeminiService  (default)
      - "openai"     → OpenAIService
      - "claude"     → ClaudeService
    """
    return _make_service(provider or os.getenv(ENV_PROVIDER, DEFAULT_PROVIDER))
