"""Root pytest configuration and fixtures.

This module provides:
- Environment setup (loads .env)
- ScriptedBackend, a deterministic LLM backend for tests without API keys
- Adapter and status sink fixtures shared by the generator tests
"""

from __future__ import annotations

import json
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import pytest
from dotenv import load_dotenv

from pagecraft.llm import (
    GenerationConfig,
    GenerationResult,
    LLMBackend,
    Message,
    MessageRole,
    ModelAdapter,
    ToolCall,
    ToolDefinition,
)
from pagecraft.schema import LAYOUT_DESIGNER_TOOL_NAME
from pagecraft.status import CollectingStatusSink

# Load environment variables from .env file
load_dotenv()


# =============================================================================
# Scripted Backend
# =============================================================================

# Markers identifying each system prompt
DESIGN_MARKER = "page layout designer"
LAYOUT_MARKER = "layout engineer"

DEFAULT_ELEMENT_REPLIES: dict[str, dict[str, Any]] = {
    "heading component": {
        "props": {"text": "Welcome", "fontSize": 40, "level": 1, "color": "#111111"}
    },
    "paragraph component": {
        "props": {"text": "Some body copy.", "fontSize": 16, "lineHeight": 1.6}
    },
    "text component": {"props": {"text": "Label", "fontSize": 14, "fontWeight": "500"}},
    "button component": {
        "props": {"text": "Sign up", "size": "large", "variant": "contained", "color": "primary"}
    },
    "divider component": {"props": {"width": "100%", "thickness": 1, "style": "solid"}},
    "image component": {
        "props": {"src": "https://example.com/a.png", "alt": "Photo", "width": 320, "height": 240}
    },
}

DEFAULT_LAYOUT_REPLY: dict[str, Any] = {"props": {"padding": 20, "margin": 0}}

Reply = Any  # str | dict | GenerationResult | Exception | Callable[[list[Message]], Reply]


@dataclass
class ScriptedRequest:
    """One recorded backend call."""

    messages: list[Message]
    tools: list[ToolDefinition] | None
    config: GenerationConfig | None

    @property
    def system(self) -> str:
        return next((m.text for m in self.messages if m.role == MessageRole.SYSTEM), "")

    @property
    def user(self) -> Message:
        return next(m for m in self.messages if m.role == MessageRole.USER)


def text_result(content: str, model: str = "scripted-model") -> GenerationResult:
    """Plain text GenerationResult."""
    return GenerationResult(
        content=content,
        finish_reason="stop",
        usage={"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
        model=model,
    )


def design_result(layouts: list[dict[str, Any]], **extra: Any) -> GenerationResult:
    """GenerationResult carrying one ``layout_designer`` tool call."""
    result = text_result("")
    result.finish_reason = "tool_use"
    result.tool_calls = [
        ToolCall(
            name=LAYOUT_DESIGNER_TOOL_NAME,
            arguments={"layouts": layouts, **extra},
            id="call_1",
        )
    ]
    return result


class ScriptedBackend(LLMBackend):
    """LLM backend that answers from a script.

    Queued replies are consumed first, in order. Once the queue is empty
    the reply is chosen by the first route whose marker appears in the
    system prompt. A reply may be a string, a dict (sent as JSON text), a
    GenerationResult, an exception to raise, or a callable taking the
    messages and returning any of these.

    Every call is recorded in ``requests``.
    """

    def __init__(
        self,
        replies: list[Reply] | None = None,
        *,
        routes: dict[str, Reply] | None = None,
        model: str = "scripted-model",
    ):
        self.replies: deque[Reply] = deque(replies or [])
        self.routes: dict[str, Reply] = dict(DEFAULT_ELEMENT_REPLIES)
        self.routes[LAYOUT_MARKER] = DEFAULT_LAYOUT_REPLY
        self.routes.update(routes or {})
        self.requests: list[ScriptedRequest] = []
        self._model = model

    def with_design(self, layouts: list[dict[str, Any]]) -> ScriptedBackend:
        """Answer the layout designer prompt with ``layouts``."""
        self.routes[DESIGN_MARKER] = design_result(layouts)
        return self

    def requests_for(self, marker: str) -> list[ScriptedRequest]:
        """Recorded requests whose system prompt contains ``marker``."""
        return [r for r in self.requests if marker in r.system]

    async def generate(
        self,
        messages: list[Message],
        *,
        tools: list[ToolDefinition] | None = None,
        config: GenerationConfig | None = None,
    ) -> GenerationResult:
        request = ScriptedRequest(list(messages), tools, config)
        self.requests.append(request)

        reply = self.replies.popleft() if self.replies else self._route(request.system)
        if callable(reply) and not isinstance(reply, type):
            reply = reply(messages)
        if isinstance(reply, BaseException):
            raise reply
        if isinstance(reply, GenerationResult):
            return reply
        if isinstance(reply, dict):
            reply = json.dumps(reply)
        return text_result(reply, self._model)

    def _route(self, system: str) -> Reply:
        for marker, reply in self.routes.items():
            if marker in system:
                return reply
        raise AssertionError(f"No scripted reply for system prompt: {system[:80]!r}")

    @property
    def model_name(self) -> str:
        return self._model

    @property
    def provider(self) -> str:
        return "scripted"

    @property
    def context_window(self) -> int:
        return 200000


def fail_on_call(number: int, error: Exception, reply: Reply) -> Callable[[list[Message]], Reply]:
    """Route reply that raises ``error`` on its ``number``-th use (1-based)."""
    calls = {"count": 0}

    def answer(messages: list[Message]) -> Reply:
        calls["count"] += 1
        if calls["count"] == number:
            return error
        return reply

    return answer


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def scripted_backend() -> ScriptedBackend:
    """ScriptedBackend with the default element and layout replies."""
    return ScriptedBackend()


@pytest.fixture
def adapter(scripted_backend: ScriptedBackend) -> ModelAdapter:
    """ModelAdapter over the scripted backend with fixed parameters."""
    return ModelAdapter(scripted_backend, GenerationConfig(temperature=0.0, max_tokens=4096))


@pytest.fixture
def status_sink() -> CollectingStatusSink:
    """Status sink that keeps every event."""
    return CollectingStatusSink()


@pytest.fixture
def make_backend() -> type[ScriptedBackend]:
    """The ScriptedBackend class, for tests that script their own replies."""
    return ScriptedBackend


@pytest.fixture
def design_reply() -> Callable[..., GenerationResult]:
    """Builder for ``layout_designer`` tool call results."""
    return design_result


@pytest.fixture
def failing_reply() -> Callable[[int, Exception, Reply], Callable[[list[Message]], Reply]]:
    """Builder for route replies that fail on a given call."""
    return fail_on_call
