"""FastMCP server instance for pagecraft.

Exposes page layout generation to MCP clients. A single call to
``generate_layout_design`` runs a full layout design session; its status
events are streamed to the client log while the session runs.

Usage:
    # STDIO mode (for desktop clients)
    python -m pagecraft.mcp.server

    # HTTP mode
    python -m pagecraft.mcp.server --transport http --port 18080

    # Via CLI
    python . mcp --transport http
"""

import argparse
import asyncio
import json
import logging
import sys
from functools import lru_cache
from typing import Any

from fastmcp import Context, FastMCP

from pagecraft.config import EnvVar, get_environment
from pagecraft.core import setup_logging
from pagecraft.layout import LayoutGenerator, LayoutGeneratorConfig
from pagecraft.schema import layout_designer_tool_schema
from pagecraft.session import LayoutDesignSession
from pagecraft.status import LoggingStatusSink, QueueStatusSink, combine_emitters
from pagecraft.tree import ROOT_ID, definition_to_dict

from .lib import (
    SERVER_NAME,
    SERVER_VERSION,
    ServerConfig,
    TransportType,
    create_adapter,
    describe_models,
    get_server_capabilities,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Server Instructions (LLM Guidance)
# =============================================================================

SERVER_INSTRUCTIONS = """\
## pagecraft MCP Server

Generates editable page layouts from a natural language description and
optional reference images. The result is a flat node map rooted at "ROOT"
that a visual page editor can load directly.

### Quick Start
1. `status()` → check that a model provider is configured
2. `generate_layout_design("landing page for a coffee shop")` → node map
3. `list_models()` → pick a different model if needed

### Output
- `definition`: node id → node (type, props, parent, nodes, ...)
- `root_nodes`: layout ids in page order
- `node_count`: number of entries including ROOT

### Reference
- Resource `schema://layout-designer` holds the structure the page
  designer step must produce.
"""

# =============================================================================
# Server Instance
# =============================================================================

mcp = FastMCP(
    name=SERVER_NAME,
    instructions=SERVER_INSTRUCTIONS,
)


# =============================================================================
# Generation Tools
# =============================================================================


@mcp.tool
async def generate_layout_design(
    prompt: str,
    images: list[str] | None = None,
    model: str | None = None,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Generate a complete page layout from a description.

    The model first plans the page as an ordered list of layouts (Container,
    Flexbox, Section) with basic elements, then every layout and element is
    given concrete properties.

    Args:
        prompt: Description of the page content.
            Examples:
            - "landing page for a coffee shop with a hero and a menu"
            - "pricing page with three plans and a FAQ"
        images: Image URLs the page must use (optional).
        model: LLM model to use (optional, uses default if not specified).

    Returns:
        Dictionary with:
        - definition: Flat node map keyed by node id, ROOT first
        - root_nodes: Layout ids in page order
        - node_count: Number of entries in the map
        - model: Model that produced the layout
    """
    adapter = create_adapter(model)
    generator = LayoutGenerator(adapter, config=LayoutGeneratorConfig.from_env())

    events = QueueStatusSink()
    session = LayoutDesignSession(
        adapter, combine_emitters(events, LoggingStatusSink()), generator
    )

    async def run_session():
        try:
            return await session.generate_layout_design(
                {"prompt": prompt, "images": images or []}
            )
        finally:
            events.close()

    task = asyncio.ensure_future(run_session())
    try:
        async for event in events.events():
            if ctx is not None:
                await ctx.info(f"[{event.status_prefix}] {event.message}")
    except BaseException:
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        raise

    definition = await task
    return {
        "definition": definition_to_dict(definition),
        "root_nodes": list(definition[ROOT_ID].nodes),
        "node_count": len(definition),
        "model": adapter.model_name,
    }


# =============================================================================
# Discovery Tools
# =============================================================================


@mcp.tool
def status() -> dict[str, Any]:
    """Check whether the server can generate layouts.

    Use this FIRST to verify a model provider is configured.

    Returns:
        Dictionary with:
        - status: "healthy" or "unhealthy"
        - version: Server version
        - default_model: Model used when none is given
        - available_providers: Providers with an API key set
        - capabilities: Which tools will work
        - action_required: What to fix if unhealthy
        - next_steps: Suggested calls
    """
    models = describe_models()
    can_generate = bool(models["available_providers"])

    result: dict[str, Any] = {
        "status": "healthy" if can_generate else "unhealthy",
        "version": SERVER_VERSION,
        "default_model": models["default"],
        "available_providers": models["available_providers"],
        "capabilities": {
            **get_server_capabilities(),
            "generate_layout_design": can_generate,
        },
    }

    if can_generate:
        result["next_steps"] = [
            "Ready! Call generate_layout_design(prompt) to create a page.",
            "Example: generate_layout_design('landing page for a coffee shop')",
        ]
    else:
        result["action_required"] = [
            "Configure LLM: Set ANTHROPIC_API_KEY or OPENAI_API_KEY in .env"
        ]
        result["next_steps"] = [
            "Server not ready. Review action_required items above.",
        ]

    return result


@mcp.tool
def list_models() -> dict[str, Any]:
    """List LLM models usable with generate_layout_design(model='...').

    Returns:
        Dictionary with:
        - available: Configured provider names
        - default: The default model used if none specified
        - supported: Supported models grouped by provider
        - note: Configuration hint
    """
    models = describe_models()
    available = models["available_providers"]
    supported = {name: info["models"] for name, info in models["providers"].items()}

    return {
        "available": available,
        "default": models["default"],
        "supported": supported,
        "note": "Set API keys in .env to enable additional providers"
        if len(available) < len(supported)
        else "All supported providers are configured",
    }


# =============================================================================
# Resources (Schema Reference)
# =============================================================================


@lru_cache(maxsize=1)
def _cached_layout_designer_schema() -> str:
    """Cached layout_designer parameter schema."""
    return json.dumps(layout_designer_tool_schema(), indent=2)


@mcp.resource("schema://layout-designer")
def get_layout_designer_schema() -> str:
    """Get the layout_designer tool schema.

    Returns the JSON schema of the page structure (layouts with their basic
    elements) the design step asks the model to produce.
    """
    return _cached_layout_designer_schema()


# =============================================================================
# Server Factory & Runner
# =============================================================================


def create_server() -> FastMCP:
    """Create and configure the MCP server instance.

    Returns:
        Configured FastMCP server instance.
    """
    return mcp


def run_server(
    transport: TransportType = TransportType.STDIO,
    host: str = "0.0.0.0",
    port: int = 18080,
) -> None:
    """Run the MCP server with specified transport.

    Args:
        transport: Transport type (stdio, http, sse).
        host: Bind address for HTTP/SSE.
        port: Port for HTTP/SSE.
    """
    logger.info(f"Starting {SERVER_NAME} server v{SERVER_VERSION}")
    logger.info(f"Transport: {transport.value}")

    available = describe_models()["available_providers"]
    if not available:
        logger.warning("No LLM provider configured; generation calls will fail")

    if transport == TransportType.STDIO:
        logger.info("Running in STDIO mode")
        mcp.run()
    elif transport == TransportType.HTTP:
        logger.info(f"Running in HTTP mode at http://{host}:{port}/mcp")
        mcp.run(
            transport="http",
            host=host,
            port=port,
            path="/mcp",
        )
    elif transport == TransportType.SSE:
        logger.info(f"Running in SSE mode at http://{host}:{port}")
        mcp.run(
            transport="sse",
            host=host,
            port=port,
        )
    else:
        raise ValueError(f"Unknown transport: {transport}")


# =============================================================================
# CLI Entry Point
# =============================================================================


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for MCP server.

    Args:
        argv: Command line arguments (uses sys.argv if None).

    Returns:
        Exit code (0 for success).
    """
    parser = argparse.ArgumentParser(
        prog=SERVER_NAME,
        description="MCP server for AI-assisted page layout generation",
    )
    parser.add_argument(
        "--transport",
        "-t",
        type=str,
        choices=[t.value for t in TransportType],
        default="stdio",
        help="Transport type (default: stdio)",
    )
    parser.add_argument("--host", type=str, default=None, help="Bind address for HTTP/SSE")
    parser.add_argument("--port", "-p", type=int, default=None, help="Port for HTTP/SSE")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    args = parser.parse_args(argv)

    setup_logging(level="DEBUG" if args.verbose else get_environment(EnvVar.LOG_LEVEL))

    config = ServerConfig.from_env(TransportType(args.transport))
    try:
        run_server(
            transport=config.transport,
            host=args.host or config.host,
            port=args.port or config.port,
        )
        return 0
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
        return 0
    except Exception as e:
        logger.error(f"Server error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
