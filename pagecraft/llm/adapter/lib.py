"""Model adapter: the single call contract between generators and a backend.

The adapter marks messages for provider-side prompt caching, applies the
fixed generation parameters and reports start, completion and failure of
every call on the caller's status emitter.
"""

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Any

from pagecraft.config import EnvVar, get_environment
from pagecraft.llm.backend.base import (
    GenerationConfig,
    LLMBackend,
    MalformedResponseError,
    Message,
    ModelCallError,
    TextPart,
    ToolCall,
    ToolDefinition,
)
from pagecraft.status import StatusEmitter

logger = logging.getLogger(__name__)

CACHE_CONTROL = "ephemeral"


@dataclass
class ModelResponse:
    """Provider-neutral answer to one model call.

    Attributes:
        text: Concatenated text output.
        tool_calls: Tool invocations in emission order.
        usage: Token usage reported by the provider.
        model: Model identifier that answered.
    """

    text: str
    tool_calls: list[ToolCall] = field(default_factory=list)
    usage: dict[str, int] = field(default_factory=dict)
    model: str = ""

    def find_tool_call(self, name: str) -> ToolCall | None:
        """First tool call with the given name, if any."""
        for call in self.tool_calls:
            if call.name == name:
                return call
        return None


def default_generation_config() -> GenerationConfig:
    """Fixed generation parameters, read from the environment."""
    return GenerationConfig(
        temperature=get_environment(EnvVar.LLM_TEMPERATURE),
        max_tokens=get_environment(EnvVar.LLM_MAX_TOKENS),
    )


def mark_cacheable(messages: list[Message]) -> list[Message]:
    """Copies of ``messages`` with every text segment marked cacheable.

    Plain-text messages get a message-level hint; list content gets a hint
    on each text part. Image parts are left as they are.
    """
    marked = []
    for message in messages:
        if isinstance(message.content, str):
            marked.append(dataclasses.replace(message, cache_control=CACHE_CONTROL))
            continue
        parts = tuple(
            dataclasses.replace(part, cache_control=CACHE_CONTROL)
            if isinstance(part, TextPart)
            else part
            for part in message.content
        )
        marked.append(dataclasses.replace(message, content=parts))
    return marked


class ModelAdapter:
    """Uniform model call contract over an ``LLMBackend``.

    The adapter holds no per-request state: the status emitter is passed to
    every call, so one adapter can serve concurrent requests.

    Example:
        >>> adapter = ModelAdapter(create_llm_backend("claude-sonnet-4-5"))
        >>> response = await adapter.call_model(
        ...     "heading-generation", messages, emit=LoggingStatusSink()
        ... )
        >>> response.text
    """

    def __init__(self, backend: LLMBackend, config: GenerationConfig | None = None):
        self.backend = backend
        self.config = config or default_generation_config()

    @property
    def model_name(self) -> str:
        return self.backend.model_name

    async def call_model(
        self,
        status_prefix: str,
        messages: list[Message],
        *,
        emit: StatusEmitter,
        tools: list[ToolDefinition] | None = None,
    ) -> ModelResponse:
        """Send one conversation to the model.

        Args:
            status_prefix: Status channel for start and completion events.
            messages: Ordered messages; not modified.
            emit: Request-scoped status emitter.
            tools: Optional tools the model may call.

        Returns:
            ModelResponse with text and tool calls.

        Raises:
            ModelCallError: If the provider call fails.
            MalformedResponseError: If the provider answer cannot be decoded.
        """
        emit(status_prefix, f"Calling model {self.backend.model_name}")
        logger.debug("Model call [%s] via %s", status_prefix, self.backend.name)

        try:
            result = await self.backend.generate(
                mark_cacheable(messages), tools=tools, config=self.config
            )
        except (ModelCallError, MalformedResponseError) as e:
            emit("error", f"Error calling model: {e}")
            raise
        except Exception as e:
            emit("error", f"Error calling model: {e}")
            raise ModelCallError(str(e)) from e

        emit(status_prefix, "Model response received")
        logger.debug("Model usage [%s]: %s", status_prefix, result.usage)
        return ModelResponse(
            text=result.content,
            tool_calls=list(result.tool_calls),
            usage=dict(result.usage),
            model=result.model,
        )


__all__ = [
    "CACHE_CONTROL",
    "ModelResponse",
    "ModelAdapter",
    "default_generation_config",
    "mark_cacheable",
]
