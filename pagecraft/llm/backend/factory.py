"""Backend factory for creating LLM backends from model specifications.

Provides a unified entry point for creating any supported LLM backend.
"""

from .base import LLMBackend
from .model_spec import (
    DEFAULT_MODEL,
    LLMModel,
    LLMProviderType,
    LLMSpec,
    get_llm_spec,
)


def create_llm_backend(
    model: str | LLMModel | LLMSpec = DEFAULT_MODEL,
    *,
    api_key: str | None = None,
    **kwargs,
) -> LLMBackend:
    """Create an LLM backend from a model specification.

    Routes to the backend class of the model's provider.

    Args:
        model: Model to use. Can be:
            - String model name (e.g., "gpt-4.1-mini", "claude-sonnet-4-5")
            - LLMModel enum value (e.g., LLMModel.GPT_4_1_MINI)
            - LLMSpec instance
        api_key: API key. Falls back to the provider's environment
            variable if not provided.
        **kwargs: Additional arguments passed to backend constructor
            (e.g., timeout, base_url for OpenAI-compatible endpoints).

    Returns:
        Configured LLMBackend instance.

    Raises:
        ValueError: If model is unknown.
        AuthenticationError: If API key required but not provided.

    Example:
        >>> backend = create_llm_backend()  # claude-sonnet-4-5
        >>> backend = create_llm_backend("gpt-4.1-mini", api_key="sk-...")
    """
    spec = get_llm_spec(model)

    if spec.provider == LLMProviderType.ANTHROPIC:
        from .anthropic import AnthropicBackend

        return AnthropicBackend(api_key=api_key, model=spec.name, **kwargs)

    if spec.provider == LLMProviderType.OPENAI:
        from .openai import OpenAIBackend

        return OpenAIBackend(api_key=api_key, model=spec.name, **kwargs)

    raise ValueError(f"Unsupported provider type: {spec.provider}")


__all__ = ["create_llm_backend"]
