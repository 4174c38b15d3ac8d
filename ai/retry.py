"""
Opt-in retry wrapper for an AIService.

Provider classes never retry on their own; a caller that wants a retry
policy wraps the service::

    service = RetryingService(get_planning_service("gemini"), attempts=3)

Only transient ``ProviderError``s (rate limit, server error, connection)
are retried, with exponential backoff via tenacity.  Verification
(``ping``) is delegated unchanged.
"""

from __future__ import annotations

import logging
from typing import Optional

from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from ai.service import AIService, VerificationResult
from planning.errors import ProviderError

logger = logging.getLogger(__name__)

_MIN_WAIT_SECONDS = 2
_MAX_WAIT_SECONDS = 60

_TRANSIENT_CODES = {"connection", "transport", 408, 429, 500, 502, 503, 504, 529}


def is_transient(exc: BaseException) -> bool:
    return isinstance(exc, ProviderError) and exc.code in _TRANSIENT_CODES


class RetryingService(AIService):
    """Delegates to *inner*, retrying transient failures of ``invoke``."""

    def __init__(
        self,
        inner: AIService,
        attempts: int,
        min_wait: float = _MIN_WAIT_SECONDS,
        max_wait: float = _MAX_WAIT_SECONDS,
    ):
        self._inner = inner
        self._attempts = max(1, attempts)
        self._min_wait = min_wait
        self._max_wait = max_wait
        self.provider_name = inner.provider_name
        self.candidate_models = inner.candidate_models

    def invoke(
        self,
        system_instructions: str,
        user_prompt: str,
        api_key: str,
        model: Optional[str] = None,
    ) -> str:
        retrying = Retrying(
            retry=retry_if_exception(is_transient),
            stop=stop_after_attempt(self._attempts),
            wait=wait_exponential(multiplier=1, min=self._min_wait, max=self._max_wait),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        return retrying(
            self._inner.invoke, system_instructions, user_prompt, api_key, model
        )

    def _probe(self, api_key: str, model: str) -> bool:
        return self._inner._probe(api_key, model)

    def ping(self, api_key: str) -> VerificationResult:
        return self._inner.ping(api_key)
