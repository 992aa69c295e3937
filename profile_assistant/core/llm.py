"""Language-model client for chat completions.

The model is treated as a stateless text-completion function: prompt in,
reply text out. Provider errors are classified into the service's error
taxonomy so the HTTP layer can tell credential problems from quota problems
from everything else. Nothing here retries.
"""

from functools import lru_cache

import anthropic

from profile_assistant.core.config import Settings, get_settings
from profile_assistant.core.exceptions import (
    AuthenticationFailure,
    ProfileAssistantError,
    RateLimited,
    UpstreamFailure,
    UpstreamTimeout,
)
from profile_assistant.core.logging import get_logger

logger = get_logger(__name__)

# Provider messages that mean "out of quota or credit" whatever the status code
QUOTA_MARKERS = ("quota", "rate limit", "credit balance", "billing")


def _mentions_quota(error: Exception) -> bool:
    text = str(error).lower()
    return any(marker in text for marker in QUOTA_MARKERS)


class CompletionClient:
    """Interface for prompt -> reply text completion."""

    def complete(self, prompt: str) -> str:
        raise NotImplementedError


def classify_llm_error(error: Exception) -> ProfileAssistantError:
    """
    Map a provider exception to the service error taxonomy.

    Args:
        error: Exception raised while calling the model

    Returns:
        AuthenticationFailure, RateLimited, UpstreamTimeout or UpstreamFailure
    """
    if isinstance(error, ProfileAssistantError):
        return error
    if isinstance(error, (anthropic.AuthenticationError, anthropic.PermissionDeniedError)):
        return AuthenticationFailure("Invalid or missing model API key")
    if isinstance(error, anthropic.RateLimitError):
        return RateLimited("Model API rate limit exceeded. Please try again later.")
    if isinstance(error, anthropic.APIStatusError) and _mentions_quota(error):
        return RateLimited("Model API quota exhausted. Please try again later.")
    if isinstance(error, anthropic.APITimeoutError):
        return UpstreamTimeout("Model API request timed out")
    if isinstance(error, anthropic.APIError):
        return UpstreamFailure(f"Model API error: {error.__class__.__name__}")

    # Non-provider errors: fall back to the message text
    text = str(error).lower()
    if "api key" in text or "api_key" in text:
        return AuthenticationFailure("Invalid or missing model API key")
    if _mentions_quota(error):
        return RateLimited("Model API rate limit exceeded. Please try again later.")
    return UpstreamFailure("Failed to get AI response")


class AnthropicCompletionClient(CompletionClient):
    """Completion client backed by the Anthropic Messages API."""

    def __init__(
        self,
        api_key: str,
        model: str,
        max_tokens: int = 1024,
        temperature: float = 0.7,
        timeout: float = 60.0,
    ):
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._client = anthropic.Anthropic(api_key=api_key, timeout=timeout, max_retries=0)

    def complete(self, prompt: str) -> str:
        """
        Send one prompt and return the reply text.

        Raises:
            AuthenticationFailure, RateLimited, UpstreamTimeout, UpstreamFailure
        """
        try:
            response = self._client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                messages=[{"role": "user", "content": prompt}],
            )
        except Exception as e:
            classified = classify_llm_error(e)
            logger.error(f"Model call failed ({classified.kind}): {e}")
            raise classified from e

        # Extract text from response
        text = ""
        for block in response.content:
            if hasattr(block, "text"):
                text += block.text

        if not text.strip():
            raise UpstreamFailure("Model returned an empty response")
        return text.strip()


def build_completion_client(settings: Settings) -> CompletionClient | None:
    """Return a client, or None when no credential is configured (demo mode)."""
    if not settings.model_configured:
        return None
    return AnthropicCompletionClient(
        api_key=settings.ANTHROPIC_API_KEY,
        model=settings.CHAT_MODEL,
        max_tokens=settings.CHAT_MAX_TOKENS,
        temperature=settings.CHAT_TEMPERATURE,
        timeout=settings.LLM_TIMEOUT_SECONDS,
    )


@lru_cache(maxsize=1)
def get_completion_client() -> CompletionClient | None:
    """Get the process-wide completion client (cached singleton)."""
    return build_completion_client(get_settings())
