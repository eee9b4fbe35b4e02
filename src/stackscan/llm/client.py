"""Async completion client using LiteLLM.

Provides a consistent interface for multiple LLM providers with linear
retry/backoff, plus the three call sites stackscan needs: tech stack
descriptions, AI categorization and technology filtering.

The client never guarantees structured output. Callers decode responses
themselves through the tolerant JSON helpers in this module.
"""

import asyncio
import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import litellm

from stackscan.llm.prompts import (
    CATEGORIZATION_SYSTEM_PROMPT,
    DESCRIPTION_SYSTEM_PROMPT,
    FILTER_SYSTEM_PROMPT,
    build_categorization_prompt,
    build_description_prompt,
)
from stackscan.models.analysis import CategoryMap
from stackscan.models.dependency import CanonicalDependency, Ecosystem
from stackscan.models.llm_config import LLMConfig

logger = logging.getLogger(__name__)

# Decoding parameters per call site
DESCRIPTION_TEMPERATURE = 0.7
DESCRIPTION_MAX_TOKENS = 1000
CATEGORIZATION_TEMPERATURE = 0.3
CATEGORIZATION_MAX_TOKENS = 500
FILTER_TEMPERATURE = 0.3
FILTER_MAX_TOKENS = 500

_DECODER = json.JSONDecoder()


class LLMError(Exception):
    """Base exception for completion failures."""


class CompletionTransportError(LLMError):
    """Raised when the service could not produce content within the retry budget.

    Attributes:
        attempts: Number of attempts made before giving up
    """

    def __init__(self, message: str, attempts: int = 0) -> None:
        super().__init__(message)
        self.attempts = attempts


class CompletionParseError(LLMError):
    """Raised when a response cannot be interpreted as the expected shape."""

    def __init__(self, message: str, raw_response: str = "") -> None:
        super().__init__(message)
        self.raw_response = raw_response


# =============================================================================
# Response decoding
# =============================================================================


@dataclass(frozen=True)
class JsonDecodeResult:
    """Outcome of decoding a JSON value out of a model response.

    Attributes:
        ok: Whether a value of the expected shape was found
        value: Decoded value (None on failure)
        error: Reason for failure
    """

    ok: bool
    value: Any = None
    error: str | None = None


def _decode_json(text: str, expected: type, opener: str) -> JsonDecodeResult:
    """Decode ``expected`` from text: whole text first, then from the first ``opener``."""
    shape = expected.__name__
    last_error = f"no JSON {shape} found in response"

    try:
        value = json.loads(text.strip())
    except json.JSONDecodeError as e:
        last_error = f"invalid JSON: {e}"
    else:
        if isinstance(value, expected):
            return JsonDecodeResult(ok=True, value=value)
        last_error = f"expected JSON {shape}, got {type(value).__name__}"

    start = text.find(opener)
    if start == -1:
        return JsonDecodeResult(ok=False, error=last_error)

    # raw_decode stops at the end of the first value, ignoring trailing prose
    try:
        value, _ = _DECODER.raw_decode(text, start)
    except json.JSONDecodeError as e:
        return JsonDecodeResult(ok=False, error=f"invalid JSON: {e}")
    if isinstance(value, expected):
        return JsonDecodeResult(ok=True, value=value)
    return JsonDecodeResult(ok=False, error=f"expected JSON {shape}, got {type(value).__name__}")


def decode_json_array(text: str) -> JsonDecodeResult:
    """Decode a JSON array from a response that may wrap it in prose.

    Examples:
        >>> decode_json_array('Here you go: ["react", "vue"]').value
        ['react', 'vue']
    """
    return _decode_json(text, list, "[")


def decode_json_object(text: str) -> JsonDecodeResult:
    """Decode a JSON object from a response that may wrap it in prose or code fences."""
    return _decode_json(text, dict, "{")


# =============================================================================
# Client
# =============================================================================


class CompletionClient:
    """Async completion client using LiteLLM.

    Supports multiple providers through a single interface:
    - OpenAI
    - Claude (Anthropic)
    - Gemini (Google)
    - Ollama (local)
    - Bedrock (AWS)

    Every call owns its own retry counter; nothing is shared between calls.
    """

    def __init__(self, config: LLMConfig) -> None:
        """Initialize completion client with configuration.

        Args:
            config: LLM configuration with provider, model, credentials and retry policy
        """
        self.config = config

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        operation: str = "complete request",
        temperature: float = 0.0,
        max_tokens: int | None = None,
        json_mode: bool = False,
    ) -> str:
        """Generate a completion, retrying transport failures with linear backoff.

        Args:
            system_prompt: System instruction
            user_prompt: User prompt
            operation: Human-readable name used in the failure message
            temperature: Sampling temperature
            max_tokens: Override max_tokens from config
            json_mode: Request strict JSON object output

        Returns:
            Raw response text (never empty)

        Raises:
            CompletionTransportError: If every attempt failed or returned no content
        """
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        completion_kwargs: dict[str, Any] = {
            "model": self.config.get_litellm_model_name(),
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens or self.config.max_tokens,
        }
        if self.config.api_key:
            completion_kwargs["api_key"] = self.config.api_key
        if self.config.api_base:
            completion_kwargs["api_base"] = self.config.api_base
        if json_mode:
            completion_kwargs["response_format"] = {"type": "json_object"}

        attempts = self.config.max_attempts
        last_error: Exception | None = None

        for attempt in range(1, attempts + 1):
            try:
                return await self._request(completion_kwargs)
            except Exception as e:
                last_error = e
                if attempt == attempts:
                    break
                delay = attempt * self.config.retry_base_delay
                logger.warning(
                    "Failed to %s (attempt %d/%d), retrying in %.1fs: %s",
                    operation,
                    attempt,
                    attempts,
                    delay,
                    e,
                    extra={
                        "fields": {
                            "operation": operation,
                            "attempt": attempt,
                            "max_attempts": attempts,
                            "retry_delay": delay,
                        }
                    },
                )
                await asyncio.sleep(delay)

        raise CompletionTransportError(
            f"Failed to {operation} after {attempts} attempts: {last_error}",
            attempts=attempts,
        ) from last_error

    async def _request(self, completion_kwargs: dict[str, Any]) -> str:
        """Make a single completion request and extract its text content."""
        response = await litellm.acompletion(**completion_kwargs)

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError):
            content = None

        if not content or not content.strip():
            raise CompletionTransportError("No content in completion response")

        usage = getattr(response, "usage", None)
        if usage:
            tokens = {
                "prompt_tokens": getattr(usage, "prompt_tokens", 0),
                "completion_tokens": getattr(usage, "completion_tokens", 0),
            }
            logger.debug(
                "Completion used %s prompt + %s completion tokens",
                tokens["prompt_tokens"],
                tokens["completion_tokens"],
                extra={"fields": tokens},
            )

        return content

    async def generate_description(
        self,
        ecosystem: Ecosystem,
        dependencies: Iterable[CanonicalDependency],
        categories: CategoryMap | None = None,
        output_format: str = "markdown",
    ) -> str:
        """Generate a prose description of one ecosystem's tech stack.

        Raises:
            CompletionTransportError: If the service fails after all retries
        """
        prompt = build_description_prompt(ecosystem, dependencies, categories, output_format)
        description = await self.complete(
            DESCRIPTION_SYSTEM_PROMPT,
            prompt,
            operation="generate tech stack description",
            temperature=DESCRIPTION_TEMPERATURE,
            max_tokens=DESCRIPTION_MAX_TOKENS,
        )
        return description.strip()

    async def categorize_dependencies(
        self,
        dependencies: Iterable[CanonicalDependency],
    ) -> CategoryMap:
        """Group dependencies into categories chosen by the model.

        Returns:
            Category name -> dependency names

        Raises:
            CompletionTransportError: If the service fails after all retries
            CompletionParseError: If the answer is not an object of name lists
        """
        content = await self.complete(
            CATEGORIZATION_SYSTEM_PROMPT,
            build_categorization_prompt(dependencies),
            operation="categorize dependencies",
            temperature=CATEGORIZATION_TEMPERATURE,
            max_tokens=CATEGORIZATION_MAX_TOKENS,
            json_mode=True,
        )

        result = decode_json_object(content)
        if not result.ok:
            raise CompletionParseError(
                f"Could not parse categorization response: {result.error}", content
            )

        categories: CategoryMap = {}
        for category, names in result.value.items():
            if not isinstance(names, list):
                raise CompletionParseError(
                    f"Category '{category}' must map to a list of names", content
                )
            categories[str(category)] = [str(name) for name in names]
        return categories

    async def filter_technologies(self, prompt: str) -> list[str]:
        """Ask the model for the subset of technologies matching a filter prompt.

        Args:
            prompt: Rendered focus-area or tech-focus prompt

        Returns:
            Technology names selected by the model (may be empty)

        Raises:
            CompletionTransportError: If the service fails after all retries
            CompletionParseError: If no JSON array can be found in the answer
        """
        content = await self.complete(
            FILTER_SYSTEM_PROMPT,
            prompt,
            operation="filter technologies",
            temperature=FILTER_TEMPERATURE,
            max_tokens=FILTER_MAX_TOKENS,
        )

        result = decode_json_array(content)
        if not result.ok:
            raise CompletionParseError(
                f"Could not parse filter response: {result.error}", content
            )
        return [str(item).strip() for item in result.value if str(item).strip()]

    async def check_available(self) -> bool:
        """Check if the provider is reachable with a minimal request."""
        try:
            await self.complete("Reply with 'ok'.", "ok", operation="reach provider", max_tokens=5)
            return True
        except LLMError:
            return False


def create_client(config: LLMConfig) -> CompletionClient:
    """Create a completion client from configuration.

    Args:
        config: LLM configuration

    Returns:
        Configured CompletionClient instance

    Raises:
        ValueError: If AI features are disabled in config
    """
    if not config.enabled:
        raise ValueError("LLM is disabled in configuration")

    return CompletionClient(config)
