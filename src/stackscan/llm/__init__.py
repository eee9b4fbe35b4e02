"""LLM integration module for stackscan.

Provides an async completion client using LiteLLM for multi-provider support.
Supports OpenAI, Claude, Gemini, Ollama and Bedrock providers.

Transport failures are retried with linear backoff; malformed answers are
reported as parse errors and never retried.
"""

from stackscan.llm.client import (
    CompletionClient,
    CompletionParseError,
    CompletionTransportError,
    JsonDecodeResult,
    LLMError,
    create_client,
    decode_json_array,
    decode_json_object,
)
from stackscan.llm.prompts import (
    CATEGORIZATION_PROMPT,
    FOCUS_AREA_PROMPT,
    NODE_ANALYSIS_PROMPT,
    PYTHON_ANALYSIS_PROMPT,
    TECH_FOCUS_PROMPT,
    build_categorization_prompt,
    build_description_prompt,
    build_focus_area_prompt,
    build_tech_focus_prompt,
    format_prompt,
)
from stackscan.models.llm_config import VALID_PROVIDERS, LLMConfig

__all__ = [
    "CATEGORIZATION_PROMPT",
    "CompletionClient",
    "CompletionParseError",
    "CompletionTransportError",
    "FOCUS_AREA_PROMPT",
    "JsonDecodeResult",
    "LLMConfig",
    "LLMError",
    "NODE_ANALYSIS_PROMPT",
    "PYTHON_ANALYSIS_PROMPT",
    "TECH_FOCUS_PROMPT",
    "VALID_PROVIDERS",
    "build_categorization_prompt",
    "build_description_prompt",
    "build_focus_area_prompt",
    "build_tech_focus_prompt",
    "create_client",
    "decode_json_array",
    "decode_json_object",
    "format_prompt",
]
