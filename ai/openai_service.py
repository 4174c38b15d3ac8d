import logging
from typing import Optional

from openai import APIConnectionError, APIStatusError, APITimeoutError, OpenAI

from ai.service import AIService
from config.settings import (
    GENERATION_TEMPERATURE,
    OPENAI_CANDIDATE_MODELS,
    OPENAI_DEFAULT_MODEL,
    OPENAI_MAX_OUTPUT_TOKENS,
    PING_PROMPT,
)
from planning.errors import ProviderError

logger = logging.getLogger(__name__)


class OpenAIService(AIService):
    """AIService backed by the OpenAI chat completions API."""

    provider_name = "openai"
    candidate_models = OPENAI_CANDIDATE_MODELS

    def __init__(self, default_model: str = OPENAI_DEFAULT_MODEL):
        self._default_model = default_model

    def invoke(
        self,
        system_instructions: str,
        user_prompt: str,
        api_key: str,
        model: Optional[str] = None,
    ) -> str:
        # Verification probes with a small model; generation stays on the default.
        if not model or model in self.candidate_models:
            model = self._default_model
        logger.info("  [OpenAI] Generating with %s (%d prompt chars)", model, len(user_prompt))
        try:
            response = OpenAI(api_key=api_key).chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": system_instructions},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=GENERATION_TEMPERATURE,
                max_tokens=OPENAI_MAX_OUTPUT_TOKENS,
                response_format={"type": "json_object"},
            )
        except APIStatusError as exc:
            raise ProviderError(exc.status_code, exc.message, self.provider_name) from exc
        except (APIConnectionError, APITimeoutError) as exc:
            raise ProviderError("connection", str(exc), self.provider_name) from exc

        text = response.choices[0].message.content if response.choices else None
        if not text:
            raise ProviderError("empty_response", "OpenAI returned no text", self.provider_name)
        return text

    def _probe(self, api_key: str, model: str) -> bool:
        try:
            response = OpenAI(api_key=api_key).chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": PING_PROMPT}],
                max_tokens=5,
            )
        except APIStatusError as exc:
            raise ProviderError(exc.status_code, exc.message, self.provider_name) from exc
        except (APIConnectionError, APITimeoutError) as exc:
            raise ProviderError("connection", str(exc), self.provider_name) from exc
        return bool(response.choices and response.choices[0].message.content)
