# Clients subpackage - External API clients
from .anthropic import (
    CROModelClient,
    FallbackPolicy,
    MissingCredentialError,
    ModelFallbackExhausted,
    ModelRequestError,
    ModelResult,
    call_anthropic_api_with_retry,
    extract_response_text,
    is_model_related_error,
)
from .email import EmailDeliveryError, send_report_email

__all__ = [
    "CROModelClient",
    "FallbackPolicy",
    "MissingCredentialError",
    "ModelFallbackExhausted",
    "ModelRequestError",
    "ModelResult",
    "call_anthropic_api_with_retry",
    "extract_response_text",
    "is_model_related_error",
    "EmailDeliveryError",
    "send_report_email",
]
