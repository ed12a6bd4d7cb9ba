"""Core MCP server logic for pagecraft.

Provides configuration and adapter construction for MCP server instances.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pagecraft.config import (
    EnvVar,
    get_available_llm_providers,
    get_default_llm_model,
    get_environment,
)
from pagecraft.llm import LLMModel, LLMProviderType, ModelAdapter, create_llm_backend

SERVER_NAME = "pagecraft"
SERVER_VERSION = "0.1.0"


class TransportType(str, Enum):
    """Supported MCP transport types."""

    STDIO = "stdio"
    HTTP = "http"
    SSE = "sse"


@dataclass
class ServerConfig:
    """Configuration for MCP server.

    Attributes:
        name: Server display name.
        transport: Transport type for communication.
        host: Bind address for HTTP/SSE transports.
        port: Port for HTTP/SSE transports.
        path: URL path for HTTP transport.
    """

    name: str = SERVER_NAME
    transport: TransportType = TransportType.STDIO
    host: str = "0.0.0.0"
    port: int = 18080
    path: str = "/mcp"

    @classmethod
    def from_env(cls, transport: TransportType | None = None) -> "ServerConfig":
        """Create config from environment variables.

        Args:
            transport: Override transport type (default: STDIO).

        Returns:
            ServerConfig with values from environment.
        """
        return cls(
            transport=transport or TransportType.STDIO,
            host=get_environment(EnvVar.MCP_HOST),
            port=get_environment(EnvVar.MCP_PORT),
        )


def create_adapter(model: str | None = None) -> ModelAdapter:
    """Model adapter for one tool call.

    Args:
        model: Model name; the configured default when omitted.

    Raises:
        ValueError: If the model is unknown.
        AuthenticationError: If the model's provider has no API key.
    """
    return ModelAdapter(create_llm_backend(model or get_default_llm_model()))


def describe_models() -> dict[str, Any]:
    """Supported models grouped by provider, with availability."""
    available = get_available_llm_providers()
    providers = {}
    for provider in LLMProviderType:
        providers[provider.value] = {
            "configured": provider.value in available,
            "models": [m.spec.name for m in LLMModel.list_by_provider(provider)],
        }
    return {
        "default": get_default_llm_model(),
        "available_providers": available,
        "providers": providers,
    }


def get_server_capabilities() -> dict:
    """Get server capabilities for MCP protocol.

    Returns:
        Dictionary of capability flags.
    """
    return {
        "tools": True,
        "resources": True,
        "prompts": False,
        "logging": True,
    }


__all__ = [
    "SERVER_NAME",
    "SERVER_VERSION",
    "TransportType",
    "ServerConfig",
    "create_adapter",
    "describe_models",
    "get_server_capabilities",
]
