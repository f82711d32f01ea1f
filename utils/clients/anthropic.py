"""
Anthropic API client utilities for CRO Analyzer.

This module contains the model client used by every endpoint that talks to
Claude. Two independent retry layers live here:

- Transport retry (tenacity): the same model is retried on connection drops
  and rate limits.
- Model fallback (FallbackPolicy): when a model identifier is unknown or
  rejected, the next candidate in priority order is tried. Any other API
  error ends the loop immediately.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Tuple

import anthropic
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from analyzer.prompts import PROBE_SYSTEM_PROMPT, PROBE_USER_PROMPT
from utils.parsing.json import ModelOutputError

logger = logging.getLogger(__name__)

MODEL_ERROR_RE = re.compile(r"model", re.IGNORECASE)


class MissingCredentialError(RuntimeError):
    """Raised when no model API key is configured"""

    pass


class ModelRequestError(RuntimeError):
    """Raised when the model API fails with an error that is not model-related"""

    def __init__(self, model: str, error: Exception):
        status = getattr(error, "status_code", None) or "ERR"
        super().__init__(f"Model API HTTP {status} ({model}): {error}")
        self.model = model
        self.status = status


class ModelFallbackExhausted(RuntimeError):
    """Raised when every fallback candidate was rejected"""

    def __init__(self, tried: List[str], last_error: Optional[Exception]):
        detail = str(last_error) if last_error else "request failed"
        super().__init__(f"No model available (tried {', '.join(tried)}): {detail}")
        self.tried = tried
        self.last_error = last_error


def is_model_related_error(error: Exception) -> bool:
    """
    Decide whether an API error means "try the next model".

    Not found and bad request responses, or any status error whose message
    mentions the model, point at the identifier itself. Everything else
    (auth, permission, server errors) would fail the same way for every
    candidate.
    """
    if isinstance(error, (anthropic.NotFoundError, anthropic.BadRequestError)):
        return True
    if isinstance(error, anthropic.APIStatusError):
        return bool(MODEL_ERROR_RE.search(str(error)))
    return False


@dataclass(frozen=True)
class FallbackPolicy:
    """Ordered model candidates plus the predicate that decides try-next vs abort"""

    candidates: Tuple[str, ...]
    should_try_next: Callable[[Exception], bool] = is_model_related_error

    def __post_init__(self):
        if not self.candidates:
            raise ValueError("FallbackPolicy needs at least one model candidate")

    @classmethod
    def from_settings(cls, settings) -> "FallbackPolicy":
        return cls(candidates=tuple(settings.model_candidates))


def _field(obj: Any, name: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def extract_response_text(response: Any) -> str:
    """
    Single adapter over provider response shapes.

    Contract, checked in order:
    1. a top-level ``output_text`` or ``text`` string
    2. the ``text`` of every ``type == "text"`` block in a nested ``content``
       array, joined (Anthropic Messages shape)
    3. ``choices[0].message.content`` (chat-completions shape)

    Works on SDK objects and plain dicts alike.

    Raises:
        ModelOutputError: when none of the shapes yields text
    """
    for name in ("output_text", "text"):
        value = _field(response, name)
        if isinstance(value, str) and value.strip():
            return value.strip()

    content = _field(response, "content")
    if isinstance(content, list):
        parts = []
        for block in content:
            block_type = _field(block, "type")
            text = _field(block, "text")
            if isinstance(text, str) and block_type in (None, "text"):
                parts.append(text)
        joined = "".join(parts).strip()
        if joined:
            return joined

    choices = _field(response, "choices")
    if isinstance(choices, list) and choices:
        message = _field(choices[0], "message")
        text = _field(message, "content") if message is not None else None
        if isinstance(text, str) and text.strip():
            return text.strip()

    raise ModelOutputError("model response contained no text")


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type(
        (anthropic.APIConnectionError, anthropic.RateLimitError)
    ),
    reraise=True,
)
def call_anthropic_api_with_retry(client, **kwargs):
    """
    Calls messages.create with automatic retry logic for transient failures.

    Retries up to 3 times for:
    - APIConnectionError (network issues)
    - RateLimitError (rate limit exceeded)

    Does NOT retry for:
    - NotFoundError / BadRequestError (handled by the fallback policy)
    - AuthenticationError and other permanent errors
    """
    return client.messages.create(**kwargs)


@dataclass
class ModelResult:
    model: str
    text: str
    tried: List[str] = field(default_factory=list)


class CROModelClient:
    """
    Claude client with an explicit model fallback policy.

    The client is synchronous, the same way the analysis tasks always called
    Claude. Async callers run it in a worker thread.
    """

    def __init__(
        self,
        api_key: str,
        policy: FallbackPolicy,
        max_tokens: int = 4000,
        temperature: float = 0.2,
        client=None,
    ):
        self.api_key = api_key
        self.policy = policy
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._client = client

    @classmethod
    def from_settings(cls, settings, client=None) -> "CROModelClient":
        return cls(
            api_key=settings.ANTHROPIC_API_KEY,
            policy=FallbackPolicy.from_settings(settings),
            max_tokens=settings.MAX_TOKENS,
            temperature=settings.MODEL_TEMPERATURE,
            client=client,
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def get_client(self):
        """Get or create the Anthropic client instance."""
        if not self.api_key:
            raise MissingCredentialError("ANTHROPIC_API_KEY is not set")
        if self._client is None:
            self._client = anthropic.Anthropic(api_key=self.api_key)
        return self._client

    def complete(
        self,
        system: str,
        user: str,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> ModelResult:
        """
        Send one prompt, walking the fallback candidates in order.

        Returns:
            ModelResult with the identifier that answered and its text

        Raises:
            MissingCredentialError: no API key, raised before any request
            ModelRequestError: a non model-related API error (no further candidates)
            ModelFallbackExhausted: every candidate signalled try-next
            ModelOutputError: the answering model returned no text
        """
        client = self.get_client()
        tried: List[str] = []
        last_error: Optional[Exception] = None

        for model in self.policy.candidates:
            tried.append(model)
            logger.info(f"🤖 Calling {model} (attempt {len(tried)}/{len(self.policy.candidates)})")
            try:
                message = call_anthropic_api_with_retry(
                    client,
                    model=model,
                    max_tokens=max_tokens or self.max_tokens,
                    temperature=self.temperature if temperature is None else temperature,
                    system=system,
                    messages=[{"role": "user", "content": user}],
                )
            except anthropic.APIError as e:
                if self.policy.should_try_next(e):
                    logger.warning(f"⚠️ {model} unavailable, trying next candidate: {e}")
                    last_error = e
                    continue
                logger.error(f"❌ {model} failed, aborting fallback: {e}")
                raise ModelRequestError(model, e) from e

            text = extract_response_text(message)
            logger.info(f"✅ {model} answered ({len(text)} chars)")
            return ModelResult(model=model, text=text, tried=tried)

        raise ModelFallbackExhausted(tried, last_error)

    def probe(self) -> dict:
        """Report which configured model currently answers"""
        tried = list(self.policy.candidates)
        try:
            result = self.complete(
                PROBE_SYSTEM_PROMPT, PROBE_USER_PROMPT, max_tokens=16, temperature=0
            )
        except (MissingCredentialError, ModelRequestError, ModelFallbackExhausted, ModelOutputError) as e:
            return {"ok": False, "tried": tried, "error": str(e)}
        return {
            "ok": True,
            "chosen_model": result.model,
            "tried": tried,
            "sample": result.text,
        }
