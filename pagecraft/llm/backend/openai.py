"""OpenAI GPT backend implementation.

Supports GPT-4.x models via the async OpenAI chat completions API,
including image inputs and function tools.
"""

import json
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
    MalformedResponseError,
    Message,
    MessageRole,
    ModelCallError,
    RateLimitError,
    ToolCall,
    ToolDefinition,
    retry_after_seconds,
)
from .model_spec import DEFAULT_OPENAI_MODEL, get_llm_spec

logger = logging.getLogger(__name__)


class OpenAIBackend(LLMBackend):
    """OpenAI GPT backend.

    OpenAI has no explicit cache hints; prompt caching is automatic, so
    ``cache_control`` markers are dropped from the request.

    Environment:
        OPENAI_API_KEY: API key (required if not passed to constructor).

    Example:
        >>> backend = OpenAIBackend(model="gpt-4.1")
        >>> result = await backend.generate([Message.user("Design a footer")])
        >>> print(result.content)
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_OPENAI_MODEL.spec.name,
        base_url: str | None = None,
        timeout: float = 120.0,
    ):
        """Initialize OpenAI backend.

        Args:
            api_key: OpenAI API key. Falls back to OPENAI_API_KEY env var.
            model: Model name (gpt-4.1, gpt-4.1-mini, etc.).
            base_url: Optional custom API endpoint.
            timeout: Request timeout in seconds.

        Raises:
            AuthenticationError: If no API key available.
        """
        self._api_key = api_key or get_environment(EnvVar.OPENAI_API_KEY)
        if not self._api_key:
            raise AuthenticationError(
                "OpenAI API key required. Set OPENAI_API_KEY environment "
                "variable or pass api_key parameter."
            )

        self._spec = get_llm_spec(model)
        self._base_url = base_url
        self._timeout = timeout
        self._client: Any = None

    def _get_client(self) -> Any:
        """Lazily initialize the async OpenAI client.

        Returns:
            AsyncOpenAI client instance.

        Raises:
            ImportError: If openai package not installed.
        """
        if self._client is None:
            try:
                from openai import AsyncOpenAI

                self._client = AsyncOpenAI(
                    api_key=self._api_key,
                    base_url=self._base_url,
                    timeout=self._timeout,
                    max_retries=0,
                )
            except ImportError as e:
                raise ImportError(
                    "openai package required. Install with: pip install openai"
                ) from e
        return self._client

    @property
    def model_name(self) -> str:
        """Get the model identifier."""
        return self._spec.name

    @property
    def provider(self) -> str:
        """Get the provider identifier."""
        return "openai"

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
        """Translate messages and tools into chat completion keyword arguments."""
        config = config or GenerationConfig()

        api_messages: list[dict[str, Any]] = []
        for message in messages:
            if message.role == MessageRole.SYSTEM or isinstance(message.content, str):
                api_messages.append({"role": message.role.value, "content": message.text})
                continue
            parts: list[dict[str, Any]] = []
            for part in message.parts:
                if isinstance(part, ImagePart):
                    parts.append({"type": "image_url", "image_url": {"url": part.url}})
                else:
                    parts.append({"type": "text", "text": part.text})
            api_messages.append({"role": message.role.value, "content": parts})

        kwargs: dict[str, Any] = {
            "model": self._spec.name,
            "messages": api_messages,
            "temperature": config.temperature,
            "max_tokens": config.max_tokens,
        }
        if tools:
            kwargs["tools"] = [
                {
                    "type": "function",
                    "function": {
                        "name": tool.name,
                        "description": tool.description,
                        "parameters": tool.input_schema,
                    },
                }
                for tool in tools
            ]
        if config.stop_sequences:
            kwargs["stop"] = config.stop_sequences
        return kwargs

    async def generate(
        self,
        messages: list[Message],
        *,
        tools: list[ToolDefinition] | None = None,
        config: GenerationConfig | None = None,
    ) -> GenerationResult:
        """Generate a response using the OpenAI API.

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
            MalformedResponseError: If tool arguments are not valid JSON.
        """
        client = self._get_client()
        kwargs = self.build_request(messages, tools=tools, config=config)

        try:
            response = await client.chat.completions.create(**kwargs)
        except Exception as e:
            self._handle_error(e)
            raise  # Re-raise if _handle_error doesn't raise

        choice = response.choices[0]
        tool_calls = [
            self._decode_tool_call(call) for call in (choice.message.tool_calls or [])
        ]
        return GenerationResult(
            content=choice.message.content or "",
            finish_reason=choice.finish_reason or "unknown",
            usage={
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            },
            model=response.model,
            tool_calls=tool_calls,
            raw_response=response,
        )

    def _decode_tool_call(self, call: Any) -> ToolCall:
        raw = call.function.arguments or "{}"
        try:
            arguments = json.loads(raw)
        except json.JSONDecodeError as e:
            raise MalformedResponseError(
                f"Tool call '{call.function.name}' has invalid JSON arguments: {e}"
            ) from e
        if not isinstance(arguments, dict):
            raise MalformedResponseError(
                f"Tool call '{call.function.name}' arguments are not an object"
            )
        return ToolCall(name=call.function.name, arguments=arguments, id=call.id)

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
        elif "context length" in error_str or "maximum context" in error_str:
            raise ContextLengthError(str(error)) from error
        elif "authentication" in error_str or "invalid api key" in error_str:
            raise AuthenticationError(str(error)) from error
        else:
            raise ModelCallError(str(error)) from error


__all__ = ["OpenAIBackend"]
