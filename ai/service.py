from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Literal, Optional, Sequence

from pydantic import BaseModel

from planning.errors import ProviderError

logger = logging.getLogger(__name__)


FAILURE_KINDS = Literal["invalid_credential", "quota_exhausted", "generic"]

_QUOTA_MARKERS = ("429", "quota", "resource_exhausted", "rate limit")
_CREDENTIAL_MARKERS = (
    "401",
    "403",
    "unauthorized",
    "api key",
    "api_key_invalid",
    "permission_denied",
    "authentication",
)

_FAILURE_MESSAGES = {
    "invalid_credential": "Invalid API key. Check that it was copied correctly.",
    "quota_exhausted": (
        "The API key is valid but has no quota available. Create it from "
        "aistudio.google.com/apikey (not Google Cloud Console) or wait a few "
        "minutes if the limit is temporary."
    ),
}


def classify_provider_failure(code: object, message: str) -> str:
    """
    Bucket a provider failure for user-facing messaging.

    Quota signals are checked first: a 429 body often mentions the API key.
    """
    if code in (429, "429", "rate_limited"):
        return "quota_exhausted"
    if code in (401, 403, "401", "403"):
        return "invalid_credential"
    text = f"{code} {message}".lower()
    if any(marker in text for marker in _QUOTA_MARKERS):
        return "quota_exhausted"
    if any(marker in text for marker in _CREDENTIAL_MARKERS):
        return "invalid_credential"
    return "generic"


class VerificationResult(BaseModel):
    success: bool
    model: Optional[str] = None
    error: Optional[str] = None
    failure_kind: Optional[FAILURE_KINDS] = None


class AIService(ABC):
    """
    Base class for AI providers used to generate plans.

    Subclasses implement ``invoke`` (system instructions + user prompt →
    raw text) and provide ``provider_name`` / ``candidate_models`` for key
    verification.  Provider failures surface as ``ProviderError``; no
    retries happen here.
    """

    provider_name: str = ""
    candidate_models: Sequence[str] = ()

    @abstractmethod
    def invoke(
        self,
        system_instructions: str,
        user_prompt: str,
        api_key: str,
        model: Optional[str] = None,
    ) -> str:
        """Send the prompt and return the model's raw text answer."""
        ...

    @abstractmethod
    def _probe(self, api_key: str, model: str) -> bool:
        """Send a minimal request to *model*; True if it answered."""
        ...

    def ping(self, api_key: str) -> VerificationResult:
        """
        Verify *api_key* by probing ``candidate_models`` in order.

        The first model that answers is returned so the caller can keep
        using it for generation.  Per-model failures are absorbed until
        every candidate has been tried.
        """
        if not api_key or not api_key.strip():
            return VerificationResult(
                success=False,
                error="The API key cannot be empty.",
                failure_kind="invalid_credential",
            )

        last_error: Optional[ProviderError] = None
        for model in self.candidate_models:
            try:
                if self._probe(api_key, model):
                    logger.info("  [%s] Key verified with model %s", self.provider_name, model)
                    return VerificationResult(success=True, model=model)
                last_error = ProviderError(
                    "empty_response", "No answer from the model", self.provider_name
                )
            except ProviderError as exc:
                logger.debug("  [%s] Model %s rejected: %s", self.provider_name, model, exc)
                last_error = exc

        if last_error is None:
            return VerificationResult(
                success=False,
                error="No candidate models configured.",
                failure_kind="generic",
            )

        kind = classify_provider_failure(last_error.code, last_error.message)
        logger.warning(
            "  [%s] Key verification failed (%s): %s",
            self.provider_name, kind, last_error.message,
        )
        return VerificationResult(
            success=False,
            error=_FAILURE_MESSAGES.get(kind, f"Error: {last_error.message}"),
            failure_kind=kind,
        )
