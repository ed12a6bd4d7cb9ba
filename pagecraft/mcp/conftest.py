"""Pytest fixtures for MCP server tests."""

from __future__ import annotations

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from fastmcp import Client, FastMCP

from pagecraft.llm import ModelAdapter

from . import server
from .server import create_server


@pytest.fixture
def mcp_server() -> FastMCP:
    """Create MCP server instance for testing."""
    return create_server()


@pytest_asyncio.fixture
async def mcp_client(mcp_server: FastMCP) -> AsyncGenerator[Client, None]:
    """Create connected MCP client for testing.

    Args:
        mcp_server: The MCP server instance.

    Yields:
        Connected in-memory Client.
    """
    async with Client(mcp_server) as client:
        yield client


@pytest.fixture
def scripted_server(monkeypatch, scripted_backend):
    """Route every tool call's model traffic to the scripted backend.

    Returns:
        List of model names the tools asked for.
    """
    requested = []

    def create_adapter(model=None):
        requested.append(model)
        return ModelAdapter(scripted_backend)

    monkeypatch.setattr(server, "create_adapter", create_adapter)
    return requested
