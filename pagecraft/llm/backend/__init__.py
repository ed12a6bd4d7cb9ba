"""LLM backend implementations.

Provides the provider-neutral message types, the abstract backend and the
Anthropic and OpenAI implementations.
"""

from .base import (
    AuthenticationError,
    ContentPart,
    ContextLengthError,
    GenerationConfig,
    GenerationError,
    GenerationResult,
    ImagePart,
    LLMBackend,
    MalformedResponseError,
    Message,
    MessageRole,
    ModelCallError,
    NoToolCallError,
    RateLimitError,
    TextPart,
    ToolCall,
    ToolDefinition,
)
from .factory import create_llm_backend
from .model_spec import (
    DEFAULT_ANTHROPIC_MODEL,
    DEFAULT_MODEL,
    DEFAULT_OPENAI_MODEL,
    LLMCapability,
    LLMModel,
    LLMProviderType,
    LLMSpec,
    default_model_for,
    get_llm_spec,
)

__all__ = [
    # Messages
    "MessageRole",
    "TextPart",
    "ImagePart",
    "ContentPart",
    "Message",
    "ToolDefinition",
    "ToolCall",
    # Base classes and types
    "LLMBackend",
    "GenerationConfig",
    "GenerationResult",
    # Exceptions
    "GenerationError",
    "ModelCallError",
    "RateLimitError",
    "ContextLengthError",
    "AuthenticationError",
    "MalformedResponseError",
    "NoToolCallError",
    # Model specification
    "LLMCapability",
    "LLMProviderType",
    "LLMSpec",
    "LLMModel",
    "get_llm_spec",
    "default_model_for",
    # Defaults
    "DEFAULT_MODEL",
    "DEFAULT_OPENAI_MODEL",
    "DEFAULT_ANTHROPIC_MODEL",
    # Factory
    "create_llm_backend",
]
