"""MCP (Model Context Protocol) server for pagecraft.

Exposes page layout generation to MCP clients.

Example:
    # Start server in STDIO mode
    >>> from pagecraft.mcp import run_server
    >>> run_server()

    # Start server in HTTP mode
    >>> from pagecraft.mcp import run_server, TransportType
    >>> run_server(transport=TransportType.HTTP, port=18080)

Available Tools:
    - generate_layout_design: Page layout from a description and image URLs
    - status: Provider availability and defaults
    - list_models: Supported and configured models
"""

from .lib import (
    SERVER_NAME,
    SERVER_VERSION,
    ServerConfig,
    TransportType,
    create_adapter,
    describe_models,
    get_server_capabilities,
)
from .server import create_server, mcp, run_server

__all__ = [
    # Server instance
    "mcp",
    "create_server",
    "run_server",
    # Configuration
    "SERVER_NAME",
    "SERVER_VERSION",
    "ServerConfig",
    "TransportType",
    # Utilities
    "create_adapter",
    "describe_models",
    "get_server_capabilities",
]
