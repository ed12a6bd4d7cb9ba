"""Tests for LLM backend implementations."""

from types import SimpleNamespace

import pytest

from .base import (
    AuthenticationError,
    ContextLengthError,
    GenerationConfig,
    GenerationResult,
    ImagePart,
    MalformedResponseError,
    Message,
    MessageRole,
    ModelCallError,
    RateLimitError,
    TextPart,
    ToolDefinition,
)
from .factory import create_llm_backend
from .model_spec import (
    DEFAULT_MODEL,
    LLMCapability,
    LLMModel,
    LLMProviderType,
    LLMSpec,
    default_model_for,
    get_llm_spec,
)

LAYOUT_TOOL = ToolDefinition(
    name="layout_designer",
    description="Design layouts",
    input_schema={"type": "object", "properties": {}},
)


class _FakeAsyncCreate:
    """Records create() kwargs and returns a canned response or raises."""

    def __init__(self, response=None, error: Exception | None = None):
        self.response = response
        self.error = error
        self.calls: list[dict] = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


def _anthropic_response(*blocks, stop_reason="end_turn"):
    return SimpleNamespace(
        content=list(blocks),
        stop_reason=stop_reason,
        usage=SimpleNamespace(input_tokens=12, output_tokens=8),
        model="claude-sonnet-4-5",
    )


def _openai_response(content="", tool_calls=None, finish_reason="stop"):
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(
        choices=[SimpleNamespace(message=message, finish_reason=finish_reason)],
        usage=SimpleNamespace(prompt_tokens=10, completion_tokens=4, total_tokens=14),
        model="gpt-4.1-mini",
    )


# =============================================================================
# Model registry
# =============================================================================


class TestLLMSpec:
    """Tests for LLMSpec dataclass."""

    @pytest.mark.unit
    def test_spec_creation(self):
        spec = LLMSpec(
            name="test-model",
            provider=LLMProviderType.OPENAI,
            context_window=128000,
            max_output_tokens=4096,
        )
        assert spec.name == "test-model"
        assert spec.provider == LLMProviderType.OPENAI
        assert spec.capabilities == frozenset()

    @pytest.mark.unit
    def test_spec_capabilities(self):
        """Registered models support tool calls and images."""
        spec = LLMModel.CLAUDE_SONNET_4_5.spec
        assert spec.supports(LLMCapability.FUNCTION_CALLING)
        assert spec.supports(LLMCapability.VISION)
        assert spec.supports(LLMCapability.PROMPT_CACHING)
        assert not LLMModel.GPT_4_1.spec.supports(LLMCapability.PROMPT_CACHING)


class TestLLMModel:
    """Tests for LLMModel enum registry."""

    @pytest.mark.unit
    def test_by_name_lookup(self):
        assert LLMModel.by_name("gpt-4.1-mini") == LLMModel.GPT_4_1_MINI
        assert LLMModel.by_name("claude-sonnet-4-5") == LLMModel.CLAUDE_SONNET_4_5
        assert LLMModel.by_name("nonexistent") is None

    @pytest.mark.unit
    def test_list_by_provider(self):
        openai_models = LLMModel.list_by_provider(LLMProviderType.OPENAI)
        assert len(openai_models) >= 2
        assert all(m.spec.provider == LLMProviderType.OPENAI for m in openai_models)

    @pytest.mark.unit
    def test_defaults(self):
        assert DEFAULT_MODEL == LLMModel.CLAUDE_SONNET_4_5
        assert default_model_for(LLMProviderType.OPENAI) == LLMModel.GPT_4_1_MINI


class TestGetLLMSpec:
    """Tests for get_llm_spec helper."""

    @pytest.mark.unit
    def test_from_string(self):
        assert get_llm_spec("gpt-4.1-mini").name == "gpt-4.1-mini"

    @pytest.mark.unit
    def test_from_enum(self):
        assert get_llm_spec(LLMModel.GPT_4_1_MINI).name == "gpt-4.1-mini"

    @pytest.mark.unit
    def test_from_spec(self):
        original = LLMModel.GPT_4_1_MINI.spec
        assert get_llm_spec(original) is original

    @pytest.mark.unit
    def test_unknown_model_raises(self):
        with pytest.raises(ValueError, match="Unknown model"):
            get_llm_spec("nonexistent-model")


# =============================================================================
# Message types
# =============================================================================


class TestMessages:
    """Tests for provider-neutral message types."""

    @pytest.mark.unit
    def test_plain_text_parts(self):
        message = Message.user("hello")
        assert message.parts == (TextPart("hello"),)
        assert message.text == "hello"

    @pytest.mark.unit
    def test_mixed_parts_keep_order(self):
        message = Message.user([ImagePart("https://x/a.png"), TextPart("describe")])
        assert isinstance(message.parts[0], ImagePart)
        assert message.text == "describe"

    @pytest.mark.unit
    def test_generation_defaults(self):
        config = GenerationConfig()
        assert config.temperature == 0.0
        assert config.max_tokens == 4096
        result = GenerationResult(content="", finish_reason="stop", usage={}, model="m")
        assert result.tool_calls == []
        assert result.raw_response is None


# =============================================================================
# Anthropic
# =============================================================================


class TestAnthropicBackend:
    """Tests for Anthropic backend."""

    @pytest.mark.unit
    def test_requires_api_key(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        from .anthropic import AnthropicBackend

        with pytest.raises(AuthenticationError, match="API key required"):
            AnthropicBackend()

    @pytest.mark.unit
    def test_creates_with_api_key(self):
        from .anthropic import AnthropicBackend

        backend = AnthropicBackend(api_key="test-key-12345")
        assert backend.provider == "anthropic"
        assert backend.model_name == "claude-sonnet-4-5"
        assert backend.name == "anthropic:claude-sonnet-4-5"
        assert backend.context_window == 200000

    @pytest.mark.unit
    def test_build_request_translates_messages(self):
        """System text goes to system blocks, cache hints and images are kept."""
        from .anthropic import AnthropicBackend

        backend = AnthropicBackend(api_key="k")
        messages = [
            Message(MessageRole.SYSTEM, "You design layouts", cache_control="ephemeral"),
            Message.user(
                [ImagePart("https://img/1.png"), TextPart("Hero", cache_control="ephemeral")]
            ),
        ]
        kwargs = backend.build_request(messages, tools=[LAYOUT_TOOL])

        assert kwargs["system"] == [
            {
                "type": "text",
                "text": "You design layouts",
                "cache_control": {"type": "ephemeral"},
            }
        ]
        content = kwargs["messages"][0]["content"]
        assert content[0] == {
            "type": "image",
            "source": {"type": "url", "url": "https://img/1.png"},
        }
        assert content[1]["cache_control"] == {"type": "ephemeral"}
        assert "cache_control" not in content[0]
        assert kwargs["tools"][0]["name"] == "layout_designer"
        assert kwargs["tools"][0]["input_schema"] == {"type": "object", "properties": {}}
        assert kwargs["temperature"] == 0.0
        assert kwargs["max_tokens"] == 4096

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_generate_collects_text_and_tool_use(self):
        from .anthropic import AnthropicBackend

        backend = AnthropicBackend(api_key="k")
        fake = _FakeAsyncCreate(
            _anthropic_response(
                SimpleNamespace(type="text", text="Designing. "),
                SimpleNamespace(
                    type="tool_use",
                    name="layout_designer",
                    input={"layouts": []},
                    id="toolu_1",
                ),
                stop_reason="tool_use",
            )
        )
        backend._client = SimpleNamespace(messages=fake)

        result = await backend.generate([Message.user("x")], tools=[LAYOUT_TOOL])

        assert result.content == "Designing. "
        assert result.finish_reason == "tool_use"
        assert result.usage["total_tokens"] == 20
        assert len(result.tool_calls) == 1
        assert result.tool_calls[0].name == "layout_designer"
        assert result.tool_calls[0].arguments == {"layouts": []}
        assert result.tool_calls[0].id == "toolu_1"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_errors_are_converted(self):
        from .anthropic import AnthropicBackend

        backend = AnthropicBackend(api_key="k")
        backend._client = SimpleNamespace(
            messages=_FakeAsyncCreate(error=RuntimeError("rate_limit_error: slow down"))
        )
        with pytest.raises(RateLimitError):
            await backend.generate([Message.user("x")])

        backend._client = SimpleNamespace(
            messages=_FakeAsyncCreate(error=RuntimeError("prompt is too long"))
        )
        with pytest.raises(ContextLengthError):
            await backend.generate([Message.user("x")])

        backend._client = SimpleNamespace(
            messages=_FakeAsyncCreate(error=RuntimeError("overloaded"))
        )
        with pytest.raises(ModelCallError, match="overloaded"):
            await backend.generate([Message.user("x")])


# =============================================================================
# OpenAI
# =============================================================================


class TestOpenAIBackend:
    """Tests for OpenAI backend."""

    @pytest.mark.unit
    def test_requires_api_key(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        from .openai import OpenAIBackend

        with pytest.raises(AuthenticationError, match="API key required"):
            OpenAIBackend()

    @pytest.mark.unit
    def test_build_request_translates_messages(self):
        from .openai import OpenAIBackend

        backend = OpenAIBackend(api_key="k")
        kwargs = backend.build_request(
            [
                Message.system("You design layouts"),
                Message.user([ImagePart("https://img/1.png"), TextPart("Hero")]),
            ],
            tools=[LAYOUT_TOOL],
        )
        assert kwargs["messages"][0] == {"role": "system", "content": "You design layouts"}
        assert kwargs["messages"][1]["content"] == [
            {"type": "image_url", "image_url": {"url": "https://img/1.png"}},
            {"type": "text", "text": "Hero"},
        ]
        assert kwargs["tools"][0]["type"] == "function"
        assert kwargs["tools"][0]["function"]["name"] == "layout_designer"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_generate_decodes_tool_arguments(self):
        from .openai import OpenAIBackend

        backend = OpenAIBackend(api_key="k")
        call = SimpleNamespace(
            id="call_1",
            function=SimpleNamespace(name="layout_designer", arguments='{"layouts": []}'),
        )
        backend._client = SimpleNamespace(
            chat=SimpleNamespace(
                completions=_FakeAsyncCreate(_openai_response(tool_calls=[call]))
            )
        )
        result = await backend.generate([Message.user("x")], tools=[LAYOUT_TOOL])
        assert result.tool_calls[0].arguments == {"layouts": []}
        assert result.usage["total_tokens"] == 14

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_invalid_tool_arguments_raise(self):
        from .openai import OpenAIBackend

        backend = OpenAIBackend(api_key="k")
        call = SimpleNamespace(
            id="call_1",
            function=SimpleNamespace(name="layout_designer", arguments="{not json"),
        )
        backend._client = SimpleNamespace(
            chat=SimpleNamespace(
                completions=_FakeAsyncCreate(_openai_response(tool_calls=[call]))
            )
        )
        with pytest.raises(MalformedResponseError, match="invalid JSON"):
            await backend.generate([Message.user("x")])


class TestCreateLLMBackend:
    """Tests for create_llm_backend factory."""

    @pytest.mark.unit
    def test_creates_openai_backend(self):
        backend = create_llm_backend(LLMModel.GPT_4_1_MINI, api_key="test-key")
        assert backend.provider == "openai"

    @pytest.mark.unit
    def test_creates_anthropic_backend(self):
        backend = create_llm_backend(LLMModel.CLAUDE_SONNET_4_5, api_key="test-key")
        assert backend.provider == "anthropic"

    @pytest.mark.unit
    def test_creates_from_string_name(self):
        backend = create_llm_backend("gpt-4.1", api_key="test-key")
        assert backend.model_name == "gpt-4.1"
