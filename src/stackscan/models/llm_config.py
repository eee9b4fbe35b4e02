"""LLM Configuration entity for stackscan.

Defines the configuration for the completion service used for tech stack
descriptions, AI categorization and technology filtering.
Supports multiple providers through LiteLLM: OpenAI, Claude, Gemini, Ollama
and Bedrock.
"""

from dataclasses import dataclass, field

# Valid LLM providers
VALID_PROVIDERS = frozenset({"openai", "claude", "gemini", "ollama", "bedrock"})

# Providers that authenticate with an API key
_KEYED_PROVIDERS = frozenset({"openai", "claude", "gemini"})

# LiteLLM model prefix per provider
_LITELLM_PREFIXES = {
    "openai": "openai",
    "claude": "anthropic",
    "gemini": "gemini",
    "ollama": "ollama",
    "bedrock": "bedrock",
}


@dataclass
class LLMConfig:
    """Configuration for the completion service.

    Attributes:
        provider: LLM provider (openai, claude, gemini, ollama, bedrock)
        model: Model identifier (e.g., "gpt-4o-mini")
        api_key: API key (not required for Ollama or Bedrock)
        api_base: API base URL (required for Ollama)
        max_tokens: Default maximum response tokens
        max_attempts: Total attempts per completion call
        retry_base_delay: Linear backoff unit in seconds (attempt * delay)
        enabled: Whether AI features are enabled
    """

    provider: str = "openai"
    model: str = "gpt-4o-mini"
    api_key: str | None = None
    api_base: str | None = None
    max_tokens: int = field(default=1000)
    max_attempts: int = field(default=3)
    retry_base_delay: float = field(default=1.0)
    enabled: bool = field(default=True)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self.provider = self.provider.lower().strip()

        if self.provider not in VALID_PROVIDERS:
            raise ValueError(
                f"Invalid provider '{self.provider}'. "
                f"Must be one of: {sorted(VALID_PROVIDERS)}"
            )

        if not self.model or not self.model.strip():
            raise ValueError("Model identifier cannot be empty")
        self.model = self.model.strip()

        if self.max_tokens <= 0:
            raise ValueError(f"max_tokens must be positive. Got: {self.max_tokens}")

        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1. Got: {self.max_attempts}")

        if self.retry_base_delay < 0:
            raise ValueError(
                f"retry_base_delay cannot be negative. Got: {self.retry_base_delay}"
            )

        # Credentials only matter once AI features are switched on
        if not self.enabled:
            return

        if self.provider == "ollama":
            if not self.api_base:
                self.api_base = "http://localhost:11434"
        elif self.provider in _KEYED_PROVIDERS and not self.api_key:
            raise ValueError(f"api_key is required for {self.provider} provider")

    def to_dict(self) -> dict[str, str | int | float | bool | None]:
        """Convert to dictionary for serialization.

        The API key is masked so the result is safe to log.
        """
        return {
            "provider": self.provider,
            "model": self.model,
            "api_key": "***" if self.api_key else None,
            "api_base": self.api_base,
            "max_tokens": self.max_tokens,
            "max_attempts": self.max_attempts,
            "retry_base_delay": self.retry_base_delay,
            "enabled": self.enabled,
        }

    @classmethod
    def from_dict(cls, data: dict[str, str | int | float | bool | None]) -> "LLMConfig":
        """Create LLMConfig from dictionary.

        Args:
            data: Dictionary with configuration values

        Returns:
            LLMConfig instance
        """
        return cls(
            provider=str(data.get("provider", "openai")),
            model=str(data.get("model", "gpt-4o-mini")),
            api_key=data.get("api_key") if data.get("api_key") else None,  # type: ignore[arg-type]
            api_base=data.get("api_base") if data.get("api_base") else None,  # type: ignore[arg-type]
            max_tokens=int(data.get("max_tokens", 1000)),  # type: ignore[arg-type]
            max_attempts=int(data.get("max_attempts", 3)),  # type: ignore[arg-type]
            retry_base_delay=float(data.get("retry_base_delay", 1.0)),  # type: ignore[arg-type]
            enabled=bool(data.get("enabled", True)),
        )

    def get_litellm_model_name(self) -> str:
        """Get the model name in LiteLLM provider/model format."""
        return f"{_LITELLM_PREFIXES[self.provider]}/{self.model}"
