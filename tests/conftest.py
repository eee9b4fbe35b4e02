"""Shared pytest fixtures for stackscan tests.

Fixtures are organized by category:
- Project fixtures: Temporary project directories with manifests
- Configuration fixtures: LLM configs with retries made instant
- Completion fixtures: Fake LiteLLM responses
"""

import json
import logging
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from stackscan.models.llm_config import LLMConfig
from stackscan.utils.logging import ROOT_LOGGER

# =============================================================================
# Manifest content
# =============================================================================

NODE_MANIFEST: dict[str, Any] = {
    "name": "sample-app",
    "dependencies": {
        "react": "^17.0.2",
        "express": "~4.18.1",
        "lodash": "4.17.21",
    },
    "devDependencies": {
        "jest": "^29.0.0",
        "typescript": ">=4.9.0",
        "left-pad": "1.3.0",
    },
}

PYTHON_REQUIREMENTS = """\
# Web
flask==2.0.1
sqlalchemy>=1.4

pytest
numpy~=1.20.0
requests
"""


# =============================================================================
# Logging isolation
# =============================================================================


@pytest.fixture(autouse=True)
def reset_stackscan_logger() -> Iterator[None]:
    """Drop handlers installed by CLI runs so later tests log cleanly."""
    yield
    logger = logging.getLogger(ROOT_LOGGER)
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


# =============================================================================
# Project Fixtures
# =============================================================================


@pytest.fixture
def node_project(tmp_path: Path) -> Path:
    """Create a project with only a package.json."""
    (tmp_path / "package.json").write_text(json.dumps(NODE_MANIFEST))
    return tmp_path


@pytest.fixture
def python_project(tmp_path: Path) -> Path:
    """Create a project with only a requirements.txt."""
    (tmp_path / "requirements.txt").write_text(PYTHON_REQUIREMENTS)
    return tmp_path


@pytest.fixture
def fullstack_project(tmp_path: Path) -> Path:
    """Create a project with both manifests."""
    (tmp_path / "package.json").write_text(json.dumps(NODE_MANIFEST))
    (tmp_path / "requirements.txt").write_text(PYTHON_REQUIREMENTS)
    return tmp_path


@pytest.fixture
def empty_project(tmp_path: Path) -> Path:
    """Create a project with no manifest at all."""
    return tmp_path


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def llm_config() -> LLMConfig:
    """OpenAI config with zero backoff so retry tests run instantly."""
    return LLMConfig(
        provider="openai",
        model="gpt-4o-mini",
        api_key="test-key",
        retry_base_delay=0.0,
    )


@pytest.fixture
def no_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure the default config keeps AI disabled."""
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)


# =============================================================================
# Completion Fixtures
# =============================================================================


def make_completion(content: str | None) -> MagicMock:
    """Build a fake LiteLLM completion response carrying content."""
    response = MagicMock()
    response.choices = [MagicMock(message=MagicMock(content=content))]
    response.usage = MagicMock(prompt_tokens=10, completion_tokens=5)
    return response


@pytest.fixture
def completion() -> Callable[[str | None], MagicMock]:
    """Factory for fake LiteLLM completion responses."""
    return make_completion
