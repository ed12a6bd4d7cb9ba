"""LLM integration layer for page generation.

This module provides multi-provider model access for the generators:

Main components:
- LLMBackend: Abstract interface for LLM providers
- create_llm_backend: Factory function for creating backends
- ModelAdapter: Call contract used by every generator (caching hints,
  fixed parameters, status events)

Supported providers:
- Anthropic (Claude 4.5, Claude 3.5)
- OpenAI (GPT-4.1, GPT-4o)

Example:
    >>> from pagecraft.llm import ModelAdapter, create_llm_backend, LLMModel
    >>> backend = create_llm_backend(LLMModel.CLAUDE_SONNET_4_5)
    >>> adapter = ModelAdapter(backend)
"""

from .adapter import (
    CACHE_CONTROL,
    ModelAdapter,
    ModelResponse,
    default_generation_config,
    mark_cacheable,
)
from .backend import (
    DEFAULT_ANTHROPIC_MODEL,
    DEFAULT_MODEL,
    DEFAULT_OPENAI_MODEL,
    AuthenticationError,
    ContentPart,
    ContextLengthError,
    GenerationConfig,
    GenerationError,
    GenerationResult,
    ImagePart,
    LLMBackend,
    LLMCapability,
    LLMModel,
    LLMProviderType,
    LLMSpec,
    MalformedResponseError,
    Message,
    MessageRole,
    ModelCallError,
    NoToolCallError,
    RateLimitError,
    TextPart,
    ToolCall,
    ToolDefinition,
    create_llm_backend,
    default_model_for,
    get_llm_spec,
)

__all__ = [
    # Adapter
    "ModelAdapter",
    "ModelResponse",
    "CACHE_CONTROL",
    "default_generation_config",
    "mark_cacheable",
    # Messages
    "MessageRole",
    "TextPart",
    "ImagePart",
    "ContentPart",
    "Message",
    "ToolDefinition",
    "ToolCall",
    # Backend
    "LLMBackend",
    "GenerationConfig",
    "GenerationResult",
    "create_llm_backend",
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
    "DEFAULT_MODEL",
    "DEFAULT_OPENAI_MODEL",
    "DEFAULT_ANTHROPIC_MODEL",
]
