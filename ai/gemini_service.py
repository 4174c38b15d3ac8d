import logging
from typing import Optional

import httpx
from google import genai
from google.genai import errors, types

from ai.service import AIService
from config.settings import (
    GEMINI_CANDIDATE_MODELS,
    GEMINI_DEFAULT_MODEL,
    GEMINI_MAX_OUTPUT_TOKENS,
    GENERATION_TEMPERATURE,
    PING_PROMPT,
)
from planning.errors import ProviderError

logger = logging.getLogger(__name__)


class GeminiService(AIService):
    """AIService backed by the Google Gemini API."""

    provider_name = "gemini"
    candidate_models = GEMINI_CANDIDATE_MODELS

    def __init__(self, default_model: str = GEMINI_DEFAULT_MODEL):
        self._default_model = default_model

    def invoke(
        self,
        system_instructions: str,
        user_prompt: str,
        api_key: str,
        model: Optional[str] = None,
    ) -> str:
        model = model or self._default_model
        logger.info("  [Gemini] Generating with %s (%d prompt chars)", model, len(user_prompt))
        response = self._generate(
            api_key,
            model,
            user_prompt,
            types.GenerateContentConfig(
                system_instruction=system_instructions,
                temperature=GENERATION_TEMPERATURE,
                max_output_tokens=GEMINI_MAX_OUTPUT_TOKENS,
                response_mime_type="application/json",
            ),
        )
        text = response.text
        if not text:
            raise ProviderError("empty_response", "Gemini returned no text", self.provider_name)
        return text

    def _probe(self, api_key: str, model: str) -> bool:
        response = self._generate(api_key, model, PING_PROMPT)
        return bool(response.text)

    def _generate(
        self,
        api_key: str,
        model: str,
        contents: str,
        config: Optional[types.GenerateContentConfig] = None,
    ) -> types.GenerateContentResponse:
        try:
            client = genai.Client(api_key=api_key)
            return client.models.generate_content(
                model=model,
                contents=contents,
                config=config,
            )
        except errors.APIError as exc:
            raise ProviderError(
                exc.code, exc.message or str(exc), self.provider_name
            ) from exc
        except httpx.TransportError as exc:
            raise ProviderError("transport", str(exc), self.provider_name) from exc
