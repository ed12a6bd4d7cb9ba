"""Centralized environment configuration management for pagecraft.

Provides a unified interface for all environment variables with:
- Single `get_environment()` function for all configuration
- Type-safe enum with metadata (default, type, description)
- Consistent resolution: override > environment > default

Example:
    >>> from pagecraft.config import EnvVar, get_environment
    >>>
    >>> # Get values with automatic type conversion
    >>> port = get_environment(EnvVar.MCP_PORT)  # Returns int
    >>> api_key = get_environment(EnvVar.ANTHROPIC_API_KEY)  # Returns str | None
    >>>
    >>> # Override at runtime
    >>> max_tokens = get_environment(EnvVar.LLM_MAX_TOKENS, override=8192)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, overload

# =============================================================================
# Environment Variable Configuration
# =============================================================================


@dataclass(frozen=True)
class EnvConfig:
    """Metadata for an environment variable.

    Attributes:
        name: Environment variable name (e.g., "MCP_PORT").
        default: Default value if not set in environment.
        var_type: Python type for value conversion (str, int, float, bool).
        description: Human-readable description.
        category: Grouping category for documentation.
    """

    name: str
    default: Any
    var_type: type
    description: str = ""
    category: str = "general"


class EnvVar(Enum):
    """All environment variables used by pagecraft.

    Each member contains an EnvConfig with name, default, type, and description.
    Use with `get_environment()` for type-safe access.

    Categories:
        - llm: LLM provider API keys and model selection
        - generation: Fixed generation parameters
        - service: MCP server host and port
        - logging: Log verbosity
    """

    # -------------------------------------------------------------------------
    # LLM Providers
    # -------------------------------------------------------------------------
    ANTHROPIC_API_KEY = EnvConfig(
        name="ANTHROPIC_API_KEY",
        default=None,
        var_type=str,
        description="Anthropic API key for Claude models",
        category="llm",
    )
    OPENAI_API_KEY = EnvConfig(
        name="OPENAI_API_KEY",
        default=None,
        var_type=str,
        description="OpenAI API key for GPT models",
        category="llm",
    )
    LLM_PROVIDER = EnvConfig(
        name="LLM_PROVIDER",
        default=None,
        var_type=str,
        description="Preferred LLM provider (anthropic, openai)",
        category="llm",
    )
    LLM_MODEL = EnvConfig(
        name="LLM_MODEL",
        default=None,
        var_type=str,
        description="Explicit model name (overrides LLM_PROVIDER default)",
        category="llm",
    )

    # -------------------------------------------------------------------------
    # Generation Parameters
    # -------------------------------------------------------------------------
    LLM_TEMPERATURE = EnvConfig(
        name="LLM_TEMPERATURE",
        default=0.0,
        var_type=float,
        description="Sampling temperature for every model call",
        category="generation",
    )
    LLM_MAX_TOKENS = EnvConfig(
        name="LLM_MAX_TOKENS",
        default=4096,
        var_type=int,
        description="Output token ceiling for every model call",
        category="generation",
    )
    LAYOUT_CONCURRENT_ELEMENTS = EnvConfig(
        name="LAYOUT_CONCURRENT_ELEMENTS",
        default=False,
        var_type=bool,
        description="Generate the elements of one layout concurrently",
        category="generation",
    )

    # -------------------------------------------------------------------------
    # Service Configuration
    # -------------------------------------------------------------------------
    MCP_HOST = EnvConfig(
        name="MCP_HOST",
        default="0.0.0.0",
        var_type=str,
        description="MCP server bind address",
        category="service",
    )
    MCP_PORT = EnvConfig(
        name="MCP_PORT",
        default=18080,
        var_type=int,
        description="MCP server port (avoids 8080)",
        category="service",
    )

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    LOG_LEVEL = EnvConfig(
        name="LOG_LEVEL",
        default="INFO",
        var_type=str,
        description="Root log level (DEBUG, INFO, WARNING, ERROR)",
        category="logging",
    )


# =============================================================================
# Type Conversion Helpers
# =============================================================================


def _parse_bool(value: str) -> bool | None:
    """Parse string to boolean.

    Recognizes: true/false, 1/0, yes/no (case-insensitive).
    Returns None for unrecognized values.
    """
    normalized = value.lower().strip()
    if normalized in ("true", "1", "yes"):
        return True
    if normalized in ("false", "0", "no"):
        return False
    return None


def _convert_value(value: str | None, var_type: type, default: Any) -> Any:
    """Convert string value to target type.

    Args:
        value: Raw string value from environment (or None).
        var_type: Target Python type.
        default: Default value if conversion fails or value is None.

    Returns:
        Converted value or default.
    """
    if value is None:
        return default

    if var_type is str:
        return value

    if var_type is int:
        try:
            return int(value)
        except ValueError:
            return default

    if var_type is float:
        try:
            return float(value)
        except ValueError:
            return default

    if var_type is bool:
        result = _parse_bool(value)
        return result if result is not None else default

    # Unknown type, return as-is
    return value


# =============================================================================
# Main Interface
# =============================================================================


@overload
def get_environment(env_var: EnvVar, override: int) -> int: ...
@overload
def get_environment(env_var: EnvVar, override: float) -> float: ...
@overload
def get_environment(env_var: EnvVar, override: str) -> str: ...
@overload
def get_environment(env_var: EnvVar, override: bool) -> bool: ...
@overload
def get_environment(env_var: EnvVar, override: None = None) -> Any: ...


def get_environment(env_var: EnvVar, override: Any = None) -> Any:
    """Get environment variable value with type conversion.

    Resolution priority:
        1. Explicit override parameter (highest)
        2. Environment variable value
        3. Default from EnvConfig (lowest)

    Args:
        env_var: Environment variable enum member.
        override: Optional override value (bypasses env lookup).

    Returns:
        Value converted to the appropriate type (str, int, float or bool).

    Example:
        >>> get_environment(EnvVar.MCP_PORT)
        18080
        >>> get_environment(EnvVar.MCP_PORT, override=9000)
        9000
    """
    config: EnvConfig = env_var.value

    if override is not None:
        return override

    raw_value = os.environ.get(config.name)
    return _convert_value(raw_value, config.var_type, config.default)


def get_environment_info(env_var: EnvVar) -> EnvConfig:
    """Get metadata for an environment variable.

    Args:
        env_var: Environment variable enum member.

    Returns:
        EnvConfig with name, default, type, and description.
    """
    return env_var.value


# =============================================================================
# Convenience Functions
# =============================================================================


def get_available_llm_providers() -> list[str]:
    """Get list of LLM providers with an API key configured.

    Returns:
        List of provider names (e.g., ["anthropic", "openai"]).
    """
    providers = []
    if get_environment(EnvVar.ANTHROPIC_API_KEY):
        providers.append("anthropic")
    if get_environment(EnvVar.OPENAI_API_KEY):
        providers.append("openai")
    return providers


def get_default_llm_model() -> str:
    """Resolve the model used when the caller does not name one.

    Resolution: LLM_MODEL > default model of LLM_PROVIDER >
    default model of the first available provider > global default.

    Returns:
        Model name string.
    """
    from pagecraft.llm.backend.model_spec import (
        DEFAULT_MODEL,
        LLMProviderType,
        default_model_for,
    )

    explicit = get_environment(EnvVar.LLM_MODEL)
    if explicit:
        return explicit

    preferred = get_environment(EnvVar.LLM_PROVIDER)
    if preferred:
        try:
            return default_model_for(LLMProviderType(preferred.lower())).spec.name
        except ValueError:
            pass

    available = get_available_llm_providers()
    if available:
        return default_model_for(LLMProviderType(available[0])).spec.name

    return DEFAULT_MODEL.spec.name


def list_environment_variables(category: str | None = None) -> list[EnvVar]:
    """List all environment variables, optionally filtered by category.

    Args:
        category: Filter by category (llm, generation, service, logging).
                 None returns all variables.

    Returns:
        List of EnvVar enum members.
    """
    if category is None:
        return list(EnvVar)

    return [var for var in EnvVar if var.value.category == category]


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
