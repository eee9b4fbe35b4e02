"""stackscan configuration system.

Configuration is YAML-based with per-run CLI overrides (--format, --show-versions).
Supports environment variable substitution (${VAR}) in config files.

Configuration file discovery (in priority order):
1. CLI --config argument
2. ./.stackscan/config.yaml
3. ./stackscan.yaml

Without a config file, AI features use OpenAI with the key from
OPENAI_API_KEY, and are disabled when that variable is not set. The same
holds for a config file whose llm api_key names an unset variable.
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from stackscan.models.llm_config import LLMConfig
from stackscan.utils.logging import get_logger

logger = get_logger(__name__)

# Environment variable holding the default provider's key
DEFAULT_API_KEY_ENV = "OPENAI_API_KEY"

# Output formats accepted in config and on the command line
VALID_OUTPUT_FORMATS = frozenset({"markdown", "text", "inline", "json"})

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")

# =============================================================================
# Configuration Dataclasses
# =============================================================================


@dataclass
class OutputConfig:
    """Output configuration.

    Attributes:
        format: Output format (markdown, text, inline, json)
        show_versions: Append major versions to technology names
    """

    format: str = "markdown"
    show_versions: bool = False

    def __post_init__(self) -> None:
        """Validate output configuration."""
        if self.format not in VALID_OUTPUT_FORMATS:
            raise ValueError(
                f"Invalid output format: {self.format}. Valid: {sorted(VALID_OUTPUT_FORMATS)}"
            )


def default_llm_config() -> LLMConfig:
    """Build the LLM config used when no llm section is configured.

    AI features stay disabled unless OPENAI_API_KEY is set.
    """
    api_key = os.environ.get(DEFAULT_API_KEY_ENV) or None
    return LLMConfig(provider="openai", api_key=api_key, enabled=api_key is not None)


@dataclass
class StackscanConfig:
    """Top-level stackscan configuration.

    Attributes:
        output: Output format settings
        llm: Completion service settings
    """

    output: OutputConfig = field(default_factory=OutputConfig)
    llm: LLMConfig = field(default_factory=default_llm_config)

    # Set by load_config
    _config_path: Path | None = field(default=None, repr=False)

    @property
    def config_path(self) -> Path | None:
        """Get the path to the config file that was loaded."""
        return self._config_path


# =============================================================================
# Environment Variable Substitution
# =============================================================================


def substitute_env_vars(value: Any) -> Any:
    """Substitute environment variables in config values.

    Supports ${VAR} syntax for environment variable substitution.
    Example: ${ANTHROPIC_API_KEY} -> value of ANTHROPIC_API_KEY

    Args:
        value: Config value (string, dict, list, or other)

    Returns:
        Value with environment variables substituted

    Raises:
        ValueError: If a referenced variable is not set
    """
    if isinstance(value, str):

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            env_value = os.environ.get(var_name)
            if env_value is None:
                raise ValueError(f"Environment variable not set: {var_name}")
            return env_value

        return _ENV_VAR_PATTERN.sub(replace_var, value)

    elif isinstance(value, dict):
        return {k: substitute_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [substitute_env_vars(v) for v in value]

    return value


# =============================================================================
# Config File Discovery
# =============================================================================


def find_config_file(start_path: Path | None = None) -> Path | None:
    """Find configuration file in standard locations.

    Search order:
    1. ./.stackscan/config.yaml
    2. ./stackscan.yaml

    Args:
        start_path: Starting directory for search (defaults to cwd)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_path is None:
        start_path = Path.cwd()

    start_path = start_path.resolve()

    candidates = [
        start_path / ".stackscan" / "config.yaml",
        start_path / "stackscan.yaml",
    ]

    for candidate in candidates:
        if candidate.exists():
            return candidate

    return None


# =============================================================================
# Config Loading
# =============================================================================


def load_config_from_dict(data: dict[str, Any]) -> StackscanConfig:
    """Load configuration from a dictionary.

    Args:
        data: Configuration dictionary

    Returns:
        StackscanConfig instance

    Raises:
        ValueError: If a value is invalid or a referenced variable is unset.
            An unset api_key variable disables AI features instead.
    """
    config = StackscanConfig()

    if "output" in data:
        output_data = substitute_env_vars(data["output"] or {})
        config.output = OutputConfig(
            format=output_data.get("format", config.output.format),
            show_versions=bool(output_data.get("show_versions", config.output.show_versions)),
        )

    if "llm" in data:
        config.llm = _load_llm_config(data["llm"] or {})

    return config


def _load_llm_config(llm_data: dict[str, Any]) -> LLMConfig:
    """Build the llm section, disabling AI when its key variable is unset."""
    llm_data = dict(llm_data)
    api_key = llm_data.pop("api_key", None)
    llm_data = substitute_env_vars(llm_data)

    try:
        llm_data["api_key"] = substitute_env_vars(api_key)
    except ValueError as e:
        logger.debug("AI features disabled: %s", e)
        llm_data["api_key"] = None
        llm_data["enabled"] = False

    return LLMConfig.from_dict(llm_data)


def load_config(
    config_path: Path | None = None,
    auto_discover: bool = True,
) -> StackscanConfig:
    """Load configuration from file.

    Args:
        config_path: Explicit path to config file
        auto_discover: Whether to search for config file if not specified

    Returns:
        StackscanConfig instance

    Raises:
        FileNotFoundError: If config_path specified but doesn't exist
        ValueError: If the file does not contain a YAML mapping
    """
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        found_path = config_path
    elif auto_discover:
        found_path = find_config_file()
    else:
        found_path = None

    if found_path is None:
        return StackscanConfig()

    with open(found_path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {found_path}")

    config = load_config_from_dict(data)
    config._config_path = found_path
    return config


def create_default_config() -> str:
    """Create default configuration YAML content.

    Returns:
        YAML string with default configuration and comments
    """
    return '''# stackscan configuration

# Output settings
output:
  format: "markdown"    # markdown, text, inline, json
  show_versions: false

# Completion service used for descriptions and focus filtering
llm:
  provider: "openai"    # openai, claude, gemini, ollama, bedrock
  model: "gpt-4o-mini"
  api_key: "${OPENAI_API_KEY}"
  # api_base: "http://localhost:11434"  # Ollama server URL
  max_tokens: 1000
  max_attempts: 3
  retry_base_delay: 1.0
  enabled: true
'''
