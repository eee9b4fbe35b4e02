"""Unit tests for the completion client with mocked LiteLLM responses."""

import logging
from collections.abc import Callable
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from stackscan.llm.client import (
    CompletionClient,
    CompletionParseError,
    CompletionTransportError,
    LLMError,
    create_client,
    decode_json_array,
    decode_json_object,
)
from stackscan.models.dependency import CanonicalDependency, Ecosystem
from stackscan.models.llm_config import LLMConfig

CompletionFactory = Callable[[str | None], MagicMock]


class TestDecodeJson:
    """Tests for the two-stage JSON decoding."""

    def test_array_direct(self) -> None:
        """Test a bare JSON array decodes in the first stage."""
        result = decode_json_array('["react", "vue"]')

        assert result.ok
        assert result.value == ["react", "vue"]

    def test_array_embedded(self) -> None:
        """Test an array wrapped in prose is extracted."""
        result = decode_json_array('Sure! Here it is:\n["express"]\nHope that helps.')

        assert result.ok
        assert result.value == ["express"]

    def test_array_followed_by_brackets(self) -> None:
        """Test bracketed prose after the array does not break extraction."""
        result = decode_json_array('["react", "vue"]\n\nNote: [1] see docs')

        assert result.ok
        assert result.value == ["react", "vue"]

    def test_object_followed_by_braces(self) -> None:
        """Test only the first object is decoded when prose has braces."""
        result = decode_json_object('{"Testing": ["jest"]} and {more} text')

        assert result.ok
        assert result.value == {"Testing": ["jest"]}

    def test_array_absent(self) -> None:
        """Test prose without an array fails with a reason."""
        result = decode_json_array("I cannot help with that.")

        assert not result.ok
        assert result.value is None
        assert result.error

    def test_array_wrong_shape(self) -> None:
        """Test an object is not accepted where an array is expected."""
        result = decode_json_array('{"a": 1}')

        assert not result.ok
        assert "expected JSON list" in result.error

    def test_object_in_code_fence(self) -> None:
        """Test an object inside a markdown code fence is extracted."""
        result = decode_json_object('```json\n{"Testing": ["jest"]}\n```')

        assert result.ok
        assert result.value == {"Testing": ["jest"]}


class TestCreateClient:
    """Tests for client creation."""

    def test_create_client(self, llm_config: LLMConfig) -> None:
        """Test the config is injected into the client."""
        client = create_client(llm_config)

        assert client.config is llm_config

    def test_create_client_disabled_raises_error(self) -> None:
        """Test a disabled config cannot build a client."""
        with pytest.raises(ValueError, match="LLM is disabled"):
            create_client(LLMConfig(enabled=False))


class TestComplete:
    """Tests for CompletionClient.complete and its retry policy."""

    @pytest.mark.asyncio
    async def test_success(self, llm_config: LLMConfig, completion: CompletionFactory) -> None:
        """Test a successful call returns the content and passes the request through."""
        client = CompletionClient(llm_config)

        with patch("litellm.acompletion", new_callable=AsyncMock) as mock_completion:
            mock_completion.return_value = completion("hello")
            result = await client.complete("sys", "user", temperature=0.3, max_tokens=50)

        assert result == "hello"
        kwargs = mock_completion.call_args.kwargs
        assert kwargs["model"] == "openai/gpt-4o-mini"
        assert kwargs["messages"] == [
            {"role": "system", "content": "sys"},
            {"role": "user", "content": "user"},
        ]
        assert kwargs["temperature"] == 0.3
        assert kwargs["max_tokens"] == 50
        assert kwargs["api_key"] == "test-key"
        assert "response_format" not in kwargs

    @pytest.mark.asyncio
    async def test_json_mode(self, llm_config: LLMConfig, completion: CompletionFactory) -> None:
        """Test strict JSON mode sets response_format."""
        client = CompletionClient(llm_config)

        with patch("litellm.acompletion", new_callable=AsyncMock) as mock_completion:
            mock_completion.return_value = completion("{}")
            await client.complete("sys", "user", json_mode=True)

        assert mock_completion.call_args.kwargs["response_format"] == {"type": "json_object"}

    @pytest.mark.asyncio
    async def test_always_failing_attempted_three_times(self, llm_config: LLMConfig) -> None:
        """Test a permanently failing service is tried exactly max_attempts times."""
        client = CompletionClient(llm_config)

        with patch("litellm.acompletion", new_callable=AsyncMock) as mock_completion:
            mock_completion.side_effect = ConnectionError("connection refused")

            with pytest.raises(CompletionTransportError) as exc_info:
                await client.complete("sys", "user", operation="filter technologies")

        assert mock_completion.await_count == 3
        assert exc_info.value.attempts == 3
        assert str(exc_info.value) == (
            "Failed to filter technologies after 3 attempts: connection refused"
        )
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    @pytest.mark.asyncio
    async def test_recovers_after_transient_failure(
        self, llm_config: LLMConfig, completion: CompletionFactory
    ) -> None:
        """Test a failure followed by success returns the successful content."""
        client = CompletionClient(llm_config)

        with patch("litellm.acompletion", new_callable=AsyncMock) as mock_completion:
            mock_completion.side_effect = [TimeoutError("slow"), completion("ok")]
            result = await client.complete("sys", "user")

        assert result == "ok"
        assert mock_completion.await_count == 2

    @pytest.mark.asyncio
    async def test_empty_content_is_retried(
        self, llm_config: LLMConfig, completion: CompletionFactory
    ) -> None:
        """Test an empty response counts as a failed attempt."""
        client = CompletionClient(llm_config)

        with patch("litellm.acompletion", new_callable=AsyncMock) as mock_completion:
            mock_completion.side_effect = [completion(""), completion(None), completion("done")]
            result = await client.complete("sys", "user")

        assert result == "done"
        assert mock_completion.await_count == 3

    @pytest.mark.asyncio
    async def test_missing_choices_exhausts_budget(self, llm_config: LLMConfig) -> None:
        """Test responses without choices fail after all attempts."""
        client = CompletionClient(llm_config)
        response = MagicMock()
        response.choices = []

        with patch("litellm.acompletion", new_callable=AsyncMock) as mock_completion:
            mock_completion.return_value = response

            with pytest.raises(CompletionTransportError, match="No content"):
                await client.complete("sys", "user")

        assert mock_completion.await_count == 3

    @pytest.mark.asyncio
    async def test_linear_backoff(self, completion: CompletionFactory) -> None:
        """Test the wait before retry n is n * retry_base_delay."""
        client = CompletionClient(LLMConfig(api_key="k", retry_base_delay=1.0))

        with (
            patch("litellm.acompletion", new_callable=AsyncMock) as mock_completion,
            patch("stackscan.llm.client.asyncio.sleep", new_callable=AsyncMock) as mock_sleep,
        ):
            mock_completion.side_effect = RuntimeError("boom")

            with pytest.raises(CompletionTransportError):
                await client.complete("sys", "user")

        assert [c.args[0] for c in mock_sleep.await_args_list] == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_retry_warning_carries_fields(
        self, llm_config: LLMConfig, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test each retry warning attaches structured fields for JSON logs."""
        client = CompletionClient(llm_config)

        with patch("litellm.acompletion", new_callable=AsyncMock) as mock_completion:
            mock_completion.side_effect = RuntimeError("boom")

            with (
                caplog.at_level(logging.WARNING, logger="stackscan"),
                pytest.raises(CompletionTransportError),
            ):
                await client.complete("sys", "user", operation="categorize dependencies")

        retries = [r for r in caplog.records if r.name == "stackscan.llm.client"]
        assert [r.fields["attempt"] for r in retries] == [1, 2]
        assert retries[0].fields == {
            "operation": "categorize dependencies",
            "attempt": 1,
            "max_attempts": 3,
            "retry_delay": 0.0,
        }

    @pytest.mark.asyncio
    async def test_single_attempt(self) -> None:
        """Test max_attempts=1 never sleeps."""
        client = CompletionClient(LLMConfig(api_key="k", max_attempts=1))

        with (
            patch("litellm.acompletion", new_callable=AsyncMock) as mock_completion,
            patch("stackscan.llm.client.asyncio.sleep", new_callable=AsyncMock) as mock_sleep,
        ):
            mock_completion.side_effect = RuntimeError("boom")

            with pytest.raises(CompletionTransportError, match="after 1 attempts"):
                await client.complete("sys", "user")

        mock_sleep.assert_not_awaited()


class TestCallSites:
    """Tests for description, categorization and filtering."""

    @pytest.mark.asyncio
    async def test_generate_description(
        self, llm_config: LLMConfig, completion: CompletionFactory
    ) -> None:
        """Test descriptions use the description decoding parameters."""
        client = CompletionClient(llm_config)

        with patch("litellm.acompletion", new_callable=AsyncMock) as mock_completion:
            mock_completion.return_value = completion("  A React app.  \n")
            result = await client.generate_description(
                Ecosystem.NODE, [CanonicalDependency("react", "17.0.2")]
            )

        assert result == "A React app."
        kwargs = mock_completion.call_args.kwargs
        assert kwargs["temperature"] == 0.7
        assert kwargs["max_tokens"] == 1000

    @pytest.mark.asyncio
    async def test_generate_description_failure(self, llm_config: LLMConfig) -> None:
        """Test the description operation is named in the failure."""
        client = CompletionClient(llm_config)

        with patch("litellm.acompletion", new_callable=AsyncMock) as mock_completion:
            mock_completion.side_effect = RuntimeError("down")

            with pytest.raises(LLMError, match="Failed to generate tech stack description"):
                await client.generate_description(Ecosystem.PYTHON, [])

    @pytest.mark.asyncio
    async def test_categorize_dependencies(
        self, llm_config: LLMConfig, completion: CompletionFactory
    ) -> None:
        """Test an embedded JSON object is decoded into a category map."""
        client = CompletionClient(llm_config)

        with patch("litellm.acompletion", new_callable=AsyncMock) as mock_completion:
            mock_completion.return_value = completion(
                'Here:\n{"Frontend": ["react"], "Testing": ["jest"]}'
            )
            result = await client.categorize_dependencies(
                [CanonicalDependency("react"), CanonicalDependency("jest")]
            )

        assert result == {"Frontend": ["react"], "Testing": ["jest"]}
        kwargs = mock_completion.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["temperature"] == 0.3
        assert kwargs["max_tokens"] == 500

    @pytest.mark.asyncio
    async def test_categorize_parse_error_not_retried(
        self, llm_config: LLMConfig, completion: CompletionFactory
    ) -> None:
        """Test an unparseable answer raises immediately after one call."""
        client = CompletionClient(llm_config)

        with patch("litellm.acompletion", new_callable=AsyncMock) as mock_completion:
            mock_completion.return_value = completion("no json here")

            with pytest.raises(CompletionParseError) as exc_info:
                await client.categorize_dependencies([CanonicalDependency("react")])

        assert mock_completion.await_count == 1
        assert exc_info.value.raw_response == "no json here"

    @pytest.mark.asyncio
    async def test_categorize_rejects_non_list_values(
        self, llm_config: LLMConfig, completion: CompletionFactory
    ) -> None:
        """Test category values must be lists of names."""
        client = CompletionClient(llm_config)

        with patch("litellm.acompletion", new_callable=AsyncMock) as mock_completion:
            mock_completion.return_value = completion('{"Frontend": "react"}')

            with pytest.raises(CompletionParseError, match="Frontend"):
                await client.categorize_dependencies([CanonicalDependency("react")])

    @pytest.mark.asyncio
    async def test_filter_technologies(
        self, llm_config: LLMConfig, completion: CompletionFactory
    ) -> None:
        """Test a prose-wrapped array is decoded and items stripped."""
        client = CompletionClient(llm_config)

        with patch("litellm.acompletion", new_callable=AsyncMock) as mock_completion:
            mock_completion.return_value = completion('Result: [" react ", "typescript", ""]')
            result = await client.filter_technologies("prompt")

        assert result == ["react", "typescript"]

    @pytest.mark.asyncio
    async def test_filter_technologies_parse_error(
        self, llm_config: LLMConfig, completion: CompletionFactory
    ) -> None:
        """Test an answer without an array raises CompletionParseError."""
        client = CompletionClient(llm_config)

        with patch("litellm.acompletion", new_callable=AsyncMock) as mock_completion:
            mock_completion.return_value = completion("react and typescript")

            with pytest.raises(CompletionParseError):
                await client.filter_technologies("prompt")

        assert mock_completion.await_count == 1

    @pytest.mark.asyncio
    async def test_check_available(
        self, llm_config: LLMConfig, completion: CompletionFactory
    ) -> None:
        """Test availability reflects whether the provider answers."""
        client = CompletionClient(llm_config)

        with patch("litellm.acompletion", new_callable=AsyncMock) as mock_completion:
            mock_completion.return_value = completion("ok")
            assert await client.check_available() is True

            mock_completion.return_value = None
            mock_completion.side_effect = RuntimeError("down")
            assert await client.check_available() is False
