"""Centralized configuration management for pagecraft.

Provides unified access to all configuration via the `get_environment()` function.

Example:
    >>> from pagecraft.config import EnvVar, get_environment
    >>>
    >>> # Get any environment variable with automatic type conversion
    >>> port = get_environment(EnvVar.MCP_PORT)  # Returns int: 18080
    >>> api_key = get_environment(EnvVar.ANTHROPIC_API_KEY)  # Returns str | None
    >>>
    >>> # List available variables by category
    >>> for var in list_environment_variables("generation"):
    ...     info = get_environment_info(var)
    ...     print(f"{info.name}: {info.description}")

Environment Variable Categories:
    llm: API keys and model selection (Anthropic, OpenAI)
    generation: Temperature, token ceiling, element concurrency
    service: MCP server host and port
    logging: Log level
"""

from .lib import (
    EnvConfig,
    EnvVar,
    get_available_llm_providers,
    get_default_llm_model,
    get_environment,
    get_environment_info,
    list_environment_variables,
)

__all__ = [
    # Core types
    "EnvConfig",
    "EnvVar",
    # Main interface
    "get_environment",
    "get_environment_info",
    # Convenience functions
    "get_available_llm_providers",
    "get_default_llm_model",
    # Introspection
    "list_environment_variables",
]
