"""Unit tests for configuration system."""

from pathlib import Path

import pytest
import yaml

from stackscan.config import (
    OutputConfig,
    StackscanConfig,
    create_default_config,
    find_config_file,
    load_config,
    load_config_from_dict,
    substitute_env_vars,
)


class TestSubstituteEnvVars:
    """Tests for environment variable substitution."""

    def test_substitute_string(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test substituting env var in string."""
        monkeypatch.setenv("TEST_VAR", "test_value")

        result = substitute_env_vars("prefix_${TEST_VAR}_suffix")

        assert result == "prefix_test_value_suffix"

    def test_substitute_nested(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test substituting env vars in nested dicts and lists."""
        monkeypatch.setenv("API_KEY", "secret123")

        result = substitute_env_vars({"llm": {"api_key": "${API_KEY}"}, "tags": ["${API_KEY}", 3]})

        assert result == {"llm": {"api_key": "secret123"}, "tags": ["secret123", 3]}

    def test_missing_var_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test an unset variable is an error."""
        monkeypatch.delenv("NOT_SET_ANYWHERE", raising=False)

        with pytest.raises(ValueError, match="Environment variable not set: NOT_SET_ANYWHERE"):
            substitute_env_vars("${NOT_SET_ANYWHERE}")


class TestFindConfigFile:
    """Tests for config file discovery."""

    def test_dot_directory_first(self, tmp_path: Path) -> None:
        """Test .stackscan/config.yaml wins over stackscan.yaml."""
        (tmp_path / ".stackscan").mkdir()
        (tmp_path / ".stackscan" / "config.yaml").write_text("{}")
        (tmp_path / "stackscan.yaml").write_text("{}")

        assert find_config_file(tmp_path) == (tmp_path / ".stackscan" / "config.yaml").resolve()

    def test_root_file(self, tmp_path: Path) -> None:
        """Test stackscan.yaml is found."""
        (tmp_path / "stackscan.yaml").write_text("{}")

        assert find_config_file(tmp_path) == (tmp_path / "stackscan.yaml").resolve()

    def test_none(self, tmp_path: Path) -> None:
        """Test nothing is found in an empty directory."""
        assert find_config_file(tmp_path) is None


class TestLoadConfig:
    """Tests for loading configuration."""

    def test_defaults_without_key(self, no_api_key: None) -> None:
        """Test AI is disabled by default when OPENAI_API_KEY is absent."""
        config = StackscanConfig()

        assert config.output.format == "markdown"
        assert config.llm.provider == "openai"
        assert config.llm.enabled is False

    def test_defaults_with_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the default config picks up OPENAI_API_KEY."""
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

        config = StackscanConfig()

        assert config.llm.enabled is True
        assert config.llm.api_key == "sk-test"

    def test_from_dict(self, no_api_key: None) -> None:
        """Test output and llm sections are applied."""
        config = load_config_from_dict(
            {
                "output": {"format": "inline", "show_versions": True},
                "llm": {"provider": "ollama", "model": "llama3.2", "max_attempts": 2},
            }
        )

        assert config.output == OutputConfig(format="inline", show_versions=True)
        assert config.llm.provider == "ollama"
        assert config.llm.api_base == "http://localhost:11434"
        assert config.llm.max_attempts == 2

    def test_invalid_format(self, no_api_key: None) -> None:
        """Test unknown output formats are rejected."""
        with pytest.raises(ValueError, match="Invalid output format"):
            load_config_from_dict({"output": {"format": "html"}})

    def test_load_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test loading a YAML file with env substitution."""
        monkeypatch.setenv("ANTHROPIC_API_KEY", "ak-test")
        path = tmp_path / "stackscan.yaml"
        path.write_text(
            yaml.safe_dump(
                {
                    "llm": {
                        "provider": "claude",
                        "model": "claude-3-haiku",
                        "api_key": "${ANTHROPIC_API_KEY}",
                    }
                }
            )
        )

        config = load_config(path)

        assert config.llm.api_key == "ak-test"
        assert config.config_path == path

    def test_unset_key_variable_disables_ai(self, no_api_key: None) -> None:
        """Test an llm api_key naming an unset variable turns AI off."""
        config = load_config_from_dict(
            {"llm": {"provider": "openai", "model": "gpt-4o", "api_key": "${OPENAI_API_KEY}"}}
        )

        assert config.llm.enabled is False
        assert config.llm.api_key is None
        assert config.llm.model == "gpt-4o"

    def test_unset_variable_outside_key_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test other unset variables still fail the load."""
        monkeypatch.delenv("STACKSCAN_MODEL", raising=False)

        with pytest.raises(ValueError, match="STACKSCAN_MODEL"):
            load_config_from_dict({"llm": {"model": "${STACKSCAN_MODEL}", "api_key": "k"}})

    def test_missing_explicit_file(self, tmp_path: Path) -> None:
        """Test an explicit path that does not exist raises."""
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_non_mapping_file(self, tmp_path: Path) -> None:
        """Test a YAML list is rejected."""
        path = tmp_path / "stackscan.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ValueError, match="mapping"):
            load_config(path)

    def test_default_config_is_loadable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the generated default config parses back into a valid config."""
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

        config = load_config_from_dict(yaml.safe_load(create_default_config()))

        assert config.llm.model == "gpt-4o-mini"
        assert config.llm.api_key == "sk-test"
        assert config.output.format == "markdown"
