"""Abstract base class for LLM backends.

Defines the provider-neutral message types and the interface that all LLM
provider implementations must follow, along with the error hierarchy shared
by every stage of a generation request.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

# =============================================================================
# Message Types
# =============================================================================


class MessageRole(str, Enum):
    """Role of a conversation message."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class TextPart:
    """Text segment of a message.

    Attributes:
        text: The text itself.
        cache_control: Optional provider cache hint (e.g. "ephemeral").
    """

    text: str
    cache_control: str | None = None


@dataclass(frozen=True)
class ImagePart:
    """Image reference segment of a message.

    Attributes:
        url: Publicly reachable image URL.
    """

    url: str


ContentPart = Union[TextPart, ImagePart]


@dataclass(frozen=True)
class Message:
    """One conversation message sent to a model.

    Attributes:
        role: Message role.
        content: Plain text or an ordered list of text and image parts.
        cache_control: Optional provider cache hint for the whole message.
    """

    role: MessageRole
    content: str | tuple[ContentPart, ...]
    cache_control: str | None = None

    @property
    def parts(self) -> tuple[ContentPart, ...]:
        """Content as a tuple of parts, wrapping plain text in a TextPart."""
        if isinstance(self.content, str):
            return (TextPart(self.content, self.cache_control),)
        return self.content

    @property
    def text(self) -> str:
        """Concatenated text of all text parts."""
        return "".join(p.text for p in self.parts if isinstance(p, TextPart))

    @classmethod
    def system(cls, text: str) -> "Message":
        return cls(MessageRole.SYSTEM, text)

    @classmethod
    def user(cls, content: "str | list[ContentPart] | tuple[ContentPart, ...]") -> "Message":
        if not isinstance(content, str):
            content = tuple(content)
        return cls(MessageRole.USER, content)


@dataclass(frozen=True)
class ToolDefinition:
    """A tool the model may call.

    Attributes:
        name: Tool name.
        description: What the tool is for.
        input_schema: JSON schema of the tool arguments.
    """

    name: str
    description: str
    input_schema: dict[str, Any]


@dataclass
class ToolCall:
    """A tool invocation requested by the model.

    Attributes:
        name: Name of the called tool.
        arguments: Decoded argument object.
        id: Provider-assigned call identifier.
    """

    name: str
    arguments: dict[str, Any]
    id: str | None = None


# =============================================================================
# Generation Configuration and Result
# =============================================================================


@dataclass
class GenerationConfig:
    """Configuration for LLM generation.

    Attributes:
        temperature: Sampling temperature. 0.0 keeps output deterministic.
        max_tokens: Maximum tokens to generate in response.
        stop_sequences: Optional sequences that stop generation.
    """

    temperature: float = 0.0
    max_tokens: int = 4096
    stop_sequences: list[str] = field(default_factory=list)


@dataclass
class GenerationResult:
    """Result from LLM generation.

    Attributes:
        content: Generated text content (concatenated text blocks).
        finish_reason: Why generation stopped ('stop', 'length', 'tool_use', ...).
        usage: Token usage dict (prompt_tokens, completion_tokens, total_tokens).
        model: Model identifier that was used.
        tool_calls: Tool invocations in the order the model emitted them.
        raw_response: Provider-specific raw response for debugging.
    """

    content: str
    finish_reason: str
    usage: dict[str, int]
    model: str
    tool_calls: list[ToolCall] = field(default_factory=list)
    raw_response: Any = None


# =============================================================================
# Backend Interface
# =============================================================================


class LLMBackend(ABC):
    """Abstract interface for LLM generation backends.

    Backends translate provider-neutral messages and tool definitions into
    one provider API call. They never retry.

    Example:
        >>> backend = AnthropicBackend(model="claude-sonnet-4-5")
        >>> result = await backend.generate([Message.user("Describe a hero section")])
        >>> print(result.content)
    """

    @abstractmethod
    async def generate(
        self,
        messages: list[Message],
        *,
        tools: list[ToolDefinition] | None = None,
        config: GenerationConfig | None = None,
    ) -> GenerationResult:
        """Send one conversation to the model.

        Args:
            messages: Ordered conversation messages.
            tools: Optional tools the model may call.
            config: Generation configuration options.

        Returns:
            GenerationResult with text, tool calls and metadata.

        Raises:
            ModelCallError: If the provider call fails.
            RateLimitError: If API rate limit is exceeded.
            ContextLengthError: If the conversation exceeds the context window.
        """

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Get the model identifier.

        Returns:
            String model name (e.g., 'gpt-4.1-mini', 'claude-sonnet-4-5').
        """

    @property
    @abstractmethod
    def provider(self) -> str:
        """Get the provider identifier.

        Returns:
            String provider name (e.g., 'openai', 'anthropic').
        """

    @property
    def name(self) -> str:
        """Get backend identifier for logging.

        Returns:
            String in format 'provider:model'.
        """
        return f"{self.provider}:{self.model_name}"

    @property
    @abstractmethod
    def context_window(self) -> int:
        """Get maximum context window size in tokens."""


# =============================================================================
# Errors
# =============================================================================


class GenerationError(Exception):
    """Base exception for every failure of a generation request."""


class ModelCallError(GenerationError):
    """Raised when a model provider call fails."""


class RateLimitError(ModelCallError):
    """Raised when API rate limit is exceeded.

    Attributes:
        retry_after: Suggested wait time in seconds, if the provider sent one.
    """

    def __init__(self, message: str, retry_after: float | None = None):
        super().__init__(message)
        self.retry_after = retry_after


class ContextLengthError(ModelCallError):
    """Raised when the conversation exceeds the model's context window."""


class AuthenticationError(ModelCallError):
    """Raised when API authentication fails (invalid or missing key)."""


class MalformedResponseError(GenerationError):
    """Raised when a model response does not have the expected shape."""


class NoToolCallError(GenerationError):
    """Raised when the model answers without calling the expected tool."""


def retry_after_seconds(error: Exception) -> float | None:
    """Read the retry-after header of a provider error, if it carries one."""
    response = getattr(error, "response", None)
    headers = getattr(response, "headers", None) or {}
    value = headers.get("retry-after")
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


__all__ = [
    # Messages
    "MessageRole",
    "TextPart",
    "ImagePart",
    "ContentPart",
    "Message",
    "ToolDefinition",
    "ToolCall",
    # Generation
    "LLMBackend",
    "GenerationConfig",
    "GenerationResult",
    # Errors
    "GenerationError",
    "ModelCallError",
    "RateLimitError",
    "ContextLengthError",
    "AuthenticationError",
    "MalformedResponseError",
    "NoToolCallError",
    "retry_after_seconds",
]
