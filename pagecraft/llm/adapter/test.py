"""Tests for the model adapter."""

import pytest

from pagecraft.llm.adapter import CACHE_CONTROL, ModelAdapter, mark_cacheable
from pagecraft.llm.backend.base import (
    GenerationConfig,
    ImagePart,
    MalformedResponseError,
    Message,
    ModelCallError,
    RateLimitError,
    TextPart,
    ToolDefinition,
)

# =============================================================================
# Cache marking
# =============================================================================


class TestMarkCacheable:
    """Tests for mark_cacheable."""

    @pytest.mark.unit
    def test_string_messages_get_message_hint(self):
        messages = [Message.system("guidance"), Message.user("request")]
        marked = mark_cacheable(messages)
        assert [m.cache_control for m in marked] == [CACHE_CONTROL, CACHE_CONTROL]

    @pytest.mark.unit
    def test_text_parts_marked_images_untouched(self):
        image = ImagePart("https://example.com/a.png")
        message = Message.user([image, TextPart("describe")])
        (marked,) = mark_cacheable([message])
        assert marked.parts[0] is image
        assert marked.parts[1].cache_control == CACHE_CONTROL
        assert marked.parts[1].text == "describe"

    @pytest.mark.unit
    def test_input_not_mutated(self):
        messages = [Message.system("guidance"), Message.user([TextPart("x")])]
        mark_cacheable(messages)
        assert messages[0].cache_control is None
        assert messages[1].parts[0].cache_control is None


# =============================================================================
# call_model
# =============================================================================


class TestModelAdapter:
    """Tests for ModelAdapter.call_model."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_returns_response_text(self, adapter, status_sink):
        adapter.backend.replies.append('{"props": {}}')
        response = await adapter.call_model(
            "heading-generation", [Message.user("hello")], emit=status_sink
        )
        assert response.text == '{"props": {}}'
        assert response.model == "scripted-model"
        assert response.usage["total_tokens"] == 15

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_status_events_around_call(self, adapter, status_sink):
        adapter.backend.replies.append("ok")
        await adapter.call_model("layout-processing", [Message.user("hi")], emit=status_sink)
        assert status_sink.prefixes == ["layout-processing", "layout-processing"]
        assert status_sink.messages() == [
            "Calling model scripted-model",
            "Model response received",
        ]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_sends_marked_messages_and_fixed_config(self, make_backend, status_sink):
        backend = make_backend(["ok"])
        config = GenerationConfig(temperature=0.0, max_tokens=4096)
        adapter = ModelAdapter(backend, config)
        tools = [ToolDefinition("layout_designer", "Design", {"type": "object"})]

        await adapter.call_model(
            "layout-design", [Message.system("s"), Message.user("u")], emit=status_sink, tools=tools
        )

        (request,) = backend.requests
        assert request.config is config
        assert request.tools == tools
        assert all(m.cache_control == CACHE_CONTROL for m in request.messages)

    @pytest.mark.unit
    def test_default_config_from_environment(self, make_backend, monkeypatch):
        monkeypatch.delenv("LLM_TEMPERATURE", raising=False)
        monkeypatch.setenv("LLM_MAX_TOKENS", "2048")
        adapter = ModelAdapter(make_backend())
        assert adapter.config.temperature == 0.0
        assert adapter.config.max_tokens == 2048

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unknown_error_wrapped(self, make_backend, status_sink):
        adapter = ModelAdapter(make_backend([RuntimeError("socket closed")]))
        with pytest.raises(ModelCallError, match="socket closed") as exc_info:
            await adapter.call_model("text-generation", [Message.user("u")], emit=status_sink)
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert status_sink.events[-1].status_prefix == "error"
        assert status_sink.events[-1].message == "Error calling model: socket closed"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_provider_errors_pass_through(self, make_backend, status_sink):
        error = RateLimitError("slow down", retry_after=3.0)
        adapter = ModelAdapter(make_backend([error]))
        with pytest.raises(RateLimitError) as exc_info:
            await adapter.call_model("text-generation", [Message.user("u")], emit=status_sink)
        assert exc_info.value is error
        assert "Model response received" not in status_sink.messages()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_malformed_response_passes_through(self, make_backend, status_sink):
        adapter = ModelAdapter(make_backend([MalformedResponseError("bad tool args")]))
        with pytest.raises(MalformedResponseError):
            await adapter.call_model("layout-design", [Message.user("u")], emit=status_sink)
        assert status_sink.prefixes[-1] == "error"
