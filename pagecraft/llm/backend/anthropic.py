"""Anthropic Claude backend implementation.

Supports Claude 4.5 and earlier Claude models via the async Anthropic API,
including image inputs, tool use and prompt caching hints.
"""

import logging
from typing import Any

from ...config import EnvVar, get_environment
from .base import (
    AuthenticationError,
    ContextLengthError,
    GenerationConfig,
    GenerationResult,
    ImagePart,
    LLMBackend,
    Message,
    MessageRole,
    ModelCallError,
    RateLimitError,
    TextPart,
    ToolCall,
    ToolDefinition,
    retry_after_seconds,
)
from .model_spec import DEFAULT_ANTHROPIC_MODEL, get_llm_spec

logger = logging.getLogger(__name__)


class AnthropicBackend(LLMBackend):
    """Anthropic Claude backend.

    Uses the async Anthropic Messages API. System messages become system
    text blocks, cache hints become ``cache_control`` blocks and image
    parts are sent as URL image sources.

    Environment:
        ANTHROPIC_API_KEY: API key (required if not passed to constructor).

    Example:
        >>> backend = AnthropicBackend(model="claude-sonnet-4-5")
        >>> result = await backend.generate([Message.user("Design a footer")])
        >>> print(result.content)
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_ANTHROPIC_MODEL.spec.name,
        timeout: float = 120.0,
    ):
        """Initialize Anthropic backend.

        Args:
            api_key: Anthropic API key. Falls back to ANTHROPIC_API_KEY env var.
            model: Model name (claude-sonnet-4-5, claude-opus-4-5, etc.).
            timeout: Request timeout in seconds.

        Raises:
            AuthenticationError: If no API key available.
        """
        self._api_key = api_key or get_environment(EnvVar.ANTHROPIC_API_KEY)
        if not self._api_key:
            raise AuthenticationError(
                "Anthropic API key required. Set ANTHROPIC_API_KEY environment "
                "variable or pass api_key parameter."
            )

        self._spec = get_llm_spec(model)
        self._timeout = timeout
        self._client: Any = None

    def _get_client(self) -> Any:
        """Lazily initialize the async Anthropic client.

        Returns:
            AsyncAnthropic client instance.

        Raises:
            ImportError: If anthropic package not installed.
        """
        if self._client is None:
            try:
                import anthropic

                # Requests are never retried.
                self._client = anthropic.AsyncAnthropic(
                    api_key=self._api_key,
                    timeout=self._timeout,
                    max_retries=0,
                )
            except ImportError as e:
                raise ImportError(
                    "anthropic package required. Install with: pip install anthropic"
                ) from e
        return self._client

    @property
    def model_name(self) -> str:
        """Get the model identifier."""
        return self._spec.name

    @property
    def provider(self) -> str:
        """Get the provider identifier."""
        return "anthropic"

    @property
    def context_window(self) -> int:
        """Get maximum context window size."""
        return self._spec.context_window

    def build_request(
        self,
        messages: list[Message],
        *,
        tools: list[ToolDefinition] | None = None,
        config: GenerationConfig | None = None,
    ) -> dict[str, Any]:
        """Translate messages and tools into Messages API keyword arguments.

        Args:
            messages: Ordered conversation messages.
            tools: Optional tool definitions.
            config: Generation configuration.

        Returns:
            Keyword arguments for ``client.messages.create``.
        """
        config = config or GenerationConfig()

        system_blocks: list[dict[str, Any]] = []
        api_messages: list[dict[str, Any]] = []
        for message in messages:
            if message.role == MessageRole.SYSTEM:
                system_blocks.extend(_text_blocks(message))
                continue
            api_messages.append(
                {"role": message.role.value, "content": _content_blocks(message)}
            )

        kwargs: dict[str, Any] = {
            "model": self._spec.name,
            "messages": api_messages,
            "max_tokens": config.max_tokens,
            "temperature": config.temperature,
        }
        if system_blocks:
            kwargs["system"] = system_blocks
        if tools:
            kwargs["tools"] = [
                {
                    "name": tool.name,
                    "description": tool.description,
                    "input_schema": tool.input_schema,
                }
                for tool in tools
            ]
        if config.stop_sequences:
            kwargs["stop_sequences"] = config.stop_sequences
        return kwargs

    async def generate(
        self,
        messages: list[Message],
        *,
        tools: list[ToolDefinition] | None = None,
        config: GenerationConfig | None = None,
    ) -> GenerationResult:
        """Generate a response using the Anthropic API.

        Args:
            messages: Ordered conversation messages.
            tools: Optional tool definitions.
            config: Generation configuration.

        Returns:
            GenerationResult with text, tool calls and metadata.

        Raises:
            ModelCallError: If generation fails.
            RateLimitError: If rate limit exceeded.
            ContextLengthError: If prompt too long.
        """
        client = self._get_client()
        kwargs = self.build_request(messages, tools=tools, config=config)

        logger.debug(
            "Anthropic request: model=%s messages=%d",
            self._spec.name,
            len(kwargs["messages"]),
        )
        try:
            response = await client.messages.create(**kwargs)
        except Exception as e:
            self._handle_error(e)
            raise

        texts: list[str] = []
        tool_calls: list[ToolCall] = []
        for block in response.content or []:
            block_type = getattr(block, "type", None)
            if block_type == "text":
                texts.append(block.text)
            elif block_type == "tool_use":
                tool_calls.append(
                    ToolCall(name=block.name, arguments=dict(block.input or {}), id=block.id)
                )

        return GenerationResult(
            content="".join(texts),
            finish_reason=response.stop_reason or "unknown",
            usage={
                "prompt_tokens": response.usage.input_tokens,
                "completion_tokens": response.usage.output_tokens,
                "total_tokens": (
                    response.usage.input_tokens + response.usage.output_tokens
                ),
            },
            model=response.model,
            tool_calls=tool_calls,
            raw_response=response,
        )

    def _handle_error(self, error: Exception) -> None:
        """Convert provider errors to standard exceptions.

        Args:
            error: The caught exception.

        Raises:
            RateLimitError: For rate limit errors.
            ContextLengthError: For context length errors.
            AuthenticationError: For auth errors.
            ModelCallError: For other errors.
        """
        if isinstance(error, ModelCallError):
            raise error

        error_str = str(error).lower()

        if "rate limit" in error_str or "rate_limit" in error_str:
            raise RateLimitError(str(error), retry_after=retry_after_seconds(error)) from error
        elif "context length" in error_str or "too long" in error_str:
            raise ContextLengthError(str(error)) from error
        elif "authentication" in error_str or "api key" in error_str:
            raise AuthenticationError(str(error)) from error
        else:
            raise ModelCallError(str(error)) from error


def _cache_block(cache_control: str | None) -> dict[str, Any]:
    return {"cache_control": {"type": cache_control}} if cache_control else {}


def _text_blocks(message: Message) -> list[dict[str, Any]]:
    """Text blocks of a system message."""
    blocks = []
    for part in message.parts:
        if isinstance(part, TextPart):
            hint = part.cache_control or message.cache_control
            blocks.append({"type": "text", "text": part.text, **_cache_block(hint)})
    return blocks


def _content_blocks(message: Message) -> list[dict[str, Any]]:
    """Content blocks of a user or assistant message."""
    blocks: list[dict[str, Any]] = []
    for part in message.parts:
        if isinstance(part, ImagePart):
            blocks.append({"type": "image", "source": {"type": "url", "url": part.url}})
        else:
            hint = part.cache_control or message.cache_control
            blocks.append({"type": "text", "text": part.text, **_cache_block(hint)})
    return blocks


__all__ = ["AnthropicBackend"]
