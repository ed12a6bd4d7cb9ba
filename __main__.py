"""CLI entry point for pagecraft.

This module acts as the central entry point for the project's CLI tools.
It delegates commands to the appropriate submodules.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

from pagecraft.config import (
    EnvVar,
    get_available_llm_providers,
    get_default_llm_model,
    get_environment,
    list_environment_variables,
)
from pagecraft.core import get_logger, setup_logging
from pagecraft.layout import LayoutGenerator, LayoutGeneratorConfig
from pagecraft.llm import LLMModel, LLMProviderType, ModelAdapter, create_llm_backend
from pagecraft.session import LayoutDesignSession
from pagecraft.status import LoggingStatusSink
from pagecraft.tree import ROOT_ID, definition_to_dict

# Load environment variables from .env file
load_dotenv()

logger = get_logger("cli")


# =============================================================================
# Generate Command
# =============================================================================


def cmd_generate(args: argparse.Namespace) -> int:
    """Handle the generate command."""
    model_name = args.model or get_default_llm_model()
    if LLMModel.by_name(model_name) is None:
        logger.error(f"Unknown model: {model_name}")
        logger.info("Available models:")
        for m in LLMModel:
            logger.info(f"  {m.spec.name}")
        return 1

    try:
        adapter = ModelAdapter(create_llm_backend(model_name))

        config = LayoutGeneratorConfig.from_env()
        if args.concurrent:
            config.concurrent_elements = True
        session = LayoutDesignSession(
            adapter, LoggingStatusSink(), LayoutGenerator(adapter, config=config)
        )

        logger.info(f"Generating page layout for: {args.prompt}")
        definition = asyncio.run(
            session.generate_layout_design({"prompt": args.prompt, "images": args.image})
        )
    except Exception as e:
        logger.error(f"Generation failed: {e}")
        return 1

    result_text = json.dumps(definition_to_dict(definition), indent=2)
    if args.output:
        args.output.write_text(result_text)
        logger.info(f"Layout saved to {args.output}")
    else:
        print(result_text)

    logger.info(
        f"Stats: {len(definition[ROOT_ID].nodes)} layout(s), "
        f"{len(definition)} node(s), model={adapter.model_name}"
    )
    return 0


def cmd_list_models(_args: argparse.Namespace) -> int:
    """Handle the models command."""
    available = get_available_llm_providers()
    default = get_default_llm_model()

    print("Available LLM Models:")
    for provider in LLMProviderType:
        configured = "configured" if provider.value in available else "no API key"
        print(f"\n  {provider.value} ({configured}):")
        for model in LLMModel.list_by_provider(provider):
            marker = " (default)" if model.spec.name == default else ""
            print(f"    {model.spec.name}{marker}")
    return 0


# =============================================================================
# Env Command
# =============================================================================


def cmd_env(args: argparse.Namespace) -> int:
    """Handle the env command: show every variable and its resolved value."""
    print("Environment Variables:")
    for var in list_environment_variables(args.category):
        info = var.value
        value = get_environment(var)
        if value and info.name.endswith("_API_KEY"):
            value = "set"
        elif value is None or value == "":
            value = "(not set)"
        print(f"  {info.name:<28} {str(value):<20} {info.description}")
    return 0


# =============================================================================
# MCP Command
# =============================================================================


def cmd_mcp(args: argparse.Namespace) -> int:
    """Handle the mcp command by starting the server."""
    from pagecraft.mcp import ServerConfig, TransportType, run_server

    config = ServerConfig.from_env(TransportType(args.transport))
    host = args.host or config.host
    port = args.port or config.port

    try:
        run_server(transport=config.transport, host=host, port=port)
        return 0
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
        return 0
    except Exception as e:
        logger.error(f"Server error: {e}")
        return 1


# =============================================================================
# Parser
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python .",
        description="Generate editable page layouts from natural language",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate a page layout from a description",
    )
    generate_parser.add_argument(
        "prompt",
        type=str,
        help="Natural language description of the page",
    )
    generate_parser.add_argument(
        "--image",
        "-i",
        action="append",
        default=[],
        metavar="URL",
        help="Image URL the page must use (repeatable)",
    )
    generate_parser.add_argument(
        "--model",
        "-m",
        type=str,
        default=None,
        help="LLM model name (e.g. gpt-4.1-mini, claude-sonnet-4-5)",
    )
    generate_parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Output file path (prints to stdout if not specified)",
    )
    generate_parser.add_argument(
        "--concurrent",
        action="store_true",
        help="Generate the elements of each layout concurrently",
    )
    generate_parser.set_defaults(func=cmd_generate)

    models_parser = subparsers.add_parser("models", help="List available LLM models")
    models_parser.set_defaults(func=cmd_list_models)

    env_parser = subparsers.add_parser("env", help="Show environment configuration")
    env_parser.add_argument(
        "--category",
        "-c",
        choices=["llm", "generation", "service", "logging"],
        default=None,
        help="Only show one category",
    )
    env_parser.set_defaults(func=cmd_env)

    mcp_parser = subparsers.add_parser("mcp", help="Run the MCP server")
    mcp_parser.add_argument(
        "--transport",
        "-t",
        choices=["stdio", "http", "sse"],
        default="stdio",
        help="Transport type (default: stdio)",
    )
    mcp_parser.add_argument("--host", type=str, default=None, help="Bind address for HTTP/SSE")
    mcp_parser.add_argument("--port", "-p", type=int, default=None, help="Port for HTTP/SSE")
    mcp_parser.set_defaults(func=cmd_mcp)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(get_environment(EnvVar.LOG_LEVEL))
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
