"""
AIService implementation backed by the Anthropic Claude API.

The system instructions go in the dedicated ``system`` parameter; the
user prompt is a single text message.  Claude has no JSON response
mode, so fenced or prose-wrapped answers are left to the response
parser.
"""

from __future__ import annotations

import logging
from typing import Optional

from anthropic import Anthropic, APIConnectionError, APIStatusError

from ai.service import AIService
from config.settings import (
    CLAUDE_CANDIDATE_MODELS,
    CLAUDE_DEFAULT_MODEL,
    CLAUDE_MAX_OUTPUT_TOKENS,
    GENERATION_TEMPERATURE,
    PING_PROMPT,
)
from planning.errors import ProviderError

logger = logging.getLogger(__name__)


class ClaudeService(AIService):
    """AIService backed by the Anthropic Claude API."""

    provider_name = "claude"
    candidate_models = CLAUDE_CANDIDATE_MODELS

    def __init__(self, default_model: str = CLAUDE_DEFAULT_MODEL):
        self._default_model = default_model

    def invoke(
        self,
        system_instructions: str,
        user_prompt: str,
        api_key: str,
        model: Optional[str] = None,
    ) -> str:
        model = model or self._default_model
        logger.info("  [Claude] Generating with %s (%d prompt chars)", model, len(user_prompt))
        message = self._create(
            api_key,
            model=model,
            max_tokens=CLAUDE_MAX_OUTPUT_TOKENS,
            temperature=GENERATION_TEMPERATURE,
            system=system_instructions,
            messages=[{"role": "user", "content": user_prompt}],
        )
        text = "".join(
            block.text for block in message.content if getattr(block, "type", "") == "text"
        )
        if not text:
            raise ProviderError("empty_response", "Claude returned no text", self.provider_name)
        return text

    def _probe(self, api_key: str, model: str) -> bool:
        message = self._create(
            api_key,
            model=model,
            max_tokens=5,
            messages=[{"role": "user", "content": PING_PROMPT}],
        )
        return bool(message.content)

    def _create(self, api_key: str, **kwargs):
        try:
            return Anthropic(api_key=api_key).messages.create(**kwargs)
        except APIStatusError as exc:
            raise ProviderError(exc.status_code, exc.message, self.provider_name) from exc
        except APIConnectionError as exc:
            raise ProviderError("connection", str(exc), self.provider_name) from exc
