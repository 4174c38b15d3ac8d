from ai.service import AIService, VerificationResult, classify_provider_failure
from ai.factory import get_planning_service
from ai.response_parser import parse_plan_response
from ai.retry import RetryingService

__all__ = [
    "AIService",
    "VerificationResult",
    "classify_provider_failure",
    "get_planning_service",
    "parse_plan_response",
    "RetryingService",
]
