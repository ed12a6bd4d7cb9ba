"""Unit tests for MCP server module.

Tests cover:
- Server configuration
- Tool registration
- Discovery tools (status, list_models)
- Layout generation through the tool and over the client protocol
"""

import asyncio
import json

import pytest

from pagecraft.llm import ModelAdapter
from pagecraft.tree import ROOT_ID

from . import server

from .lib import (
    SERVER_VERSION,
    ServerConfig,
    TransportType,
    describe_models,
    get_server_capabilities,
)
from .server import (
    create_server,
    generate_layout_design,
    get_layout_designer_schema,
    list_models,
    mcp,
    status,
)

LLM_ENV = ("ANTHROPIC_API_KEY", "OPENAI_API_KEY", "LLM_PROVIDER", "LLM_MODEL")

HERO_LAYOUT = {
    "index": 0,
    "layout_type": "Container",
    "layout_requirements": "Centered hero",
    "basic_elements": [
        {"element_type": "Heading", "element_requirements": "Main title"},
        {"element_type": "Button", "element_requirements": "Sign up"},
    ],
}


@pytest.fixture
def clean_env(monkeypatch):
    """Environment without any LLM configuration."""
    for name in LLM_ENV:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


# =============================================================================
# Configuration Tests
# =============================================================================


class TestServerConfig:
    """Tests for ServerConfig dataclass."""

    @pytest.mark.unit
    def test_default_config(self):
        """Default config has expected values."""
        config = ServerConfig()

        assert config.name == "pagecraft"
        assert config.transport == TransportType.STDIO
        assert config.host == "0.0.0.0"
        assert config.port == 18080
        assert config.path == "/mcp"

    @pytest.mark.unit
    def test_from_env_reads_host_and_port(self, monkeypatch):
        """from_env picks up MCP_HOST and MCP_PORT."""
        monkeypatch.setenv("MCP_HOST", "127.0.0.1")
        monkeypatch.setenv("MCP_PORT", "19000")

        config = ServerConfig.from_env(transport=TransportType.HTTP)

        assert config.transport == TransportType.HTTP
        assert config.host == "127.0.0.1"
        assert config.port == 19000


class TestTransportType:
    """Tests for TransportType enum."""

    @pytest.mark.unit
    def test_transport_from_string(self):
        """Transport can be created from string."""
        assert TransportType("stdio") == TransportType.STDIO
        assert TransportType("http") == TransportType.HTTP
        assert TransportType("sse") == TransportType.SSE


class TestServerUtilities:
    """Tests for server utility functions."""

    @pytest.mark.unit
    def test_server_version(self):
        assert len(SERVER_VERSION.split(".")) == 3

    @pytest.mark.unit
    def test_get_server_capabilities(self):
        caps = get_server_capabilities()
        assert caps["tools"] is True
        assert caps["resources"] is True

    @pytest.mark.unit
    def test_describe_models(self, clean_env):
        """Every provider is listed, none configured."""
        models = describe_models()

        assert models["available_providers"] == []
        assert models["default"] == "claude-sonnet-4-5"
        assert "gpt-4.1-mini" in models["providers"]["openai"]["models"]
        assert models["providers"]["anthropic"]["configured"] is False


# =============================================================================
# Server Instance Tests
# =============================================================================


class TestServerInstance:
    """Tests for FastMCP server instance."""

    @pytest.mark.unit
    def test_create_server_returns_mcp(self):
        assert create_server() is mcp

    @pytest.mark.unit
    def test_server_has_name(self):
        assert mcp.name == "pagecraft"


# =============================================================================
# Discovery Tools
# =============================================================================


class TestStatusTool:
    """Tests for status tool logic."""

    @pytest.mark.unit
    def test_unhealthy_without_keys(self, clean_env):
        """No provider configured means generation is unavailable."""
        result = status.fn()

        assert result["status"] == "unhealthy"
        assert result["capabilities"]["generate_layout_design"] is False
        assert "ANTHROPIC_API_KEY" in result["action_required"][0]

    @pytest.mark.unit
    def test_healthy_with_openai_key(self, clean_env):
        """A configured provider selects its default model."""
        clean_env.setenv("OPENAI_API_KEY", "sk-test")

        result = status.fn()

        assert result["status"] == "healthy"
        assert result["available_providers"] == ["openai"]
        assert result["default_model"] == "gpt-4.1-mini"
        assert "action_required" not in result
        assert result["version"] == SERVER_VERSION


class TestListModelsTool:
    """Tests for list_models tool logic."""

    @pytest.mark.unit
    def test_lists_supported_models(self, clean_env):
        clean_env.setenv("ANTHROPIC_API_KEY", "sk-ant-test")

        result = list_models.fn()

        assert result["available"] == ["anthropic"]
        assert result["default"] == "claude-sonnet-4-5"
        assert set(result["supported"]) == {"anthropic", "openai"}
        assert result["note"].startswith("Set API keys")

    @pytest.mark.unit
    def test_explicit_model_is_default(self, clean_env):
        clean_env.setenv("LLM_MODEL", "gpt-4.1")
        assert list_models.fn()["default"] == "gpt-4.1"


class TestLayoutDesignerResource:
    """Tests for the schema://layout-designer resource."""

    @pytest.mark.unit
    def test_schema_is_json(self):
        schema = json.loads(get_layout_designer_schema.fn())
        assert schema["required"] == ["layouts"]


# =============================================================================
# Generation Tool
# =============================================================================


class TestGenerateLayoutDesignTool:
    """Tests for generate_layout_design without the client protocol."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_returns_definition(self, scripted_server, scripted_backend):
        scripted_backend.with_design([HERO_LAYOUT])

        result = await generate_layout_design.fn(
            "Landing page hero", images=["https://example.com/hero.png"], model="gpt-4.1"
        )

        definition = result["definition"]
        assert list(definition)[0] == ROOT_ID
        assert result["node_count"] == 4
        assert result["root_nodes"] == definition[ROOT_ID]["nodes"]
        assert result["model"] == "scripted-model"
        assert scripted_server == ["gpt-4.1"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_image_urls_reach_design_prompt(self, scripted_server, scripted_backend):
        scripted_backend.with_design([HERO_LAYOUT])

        await generate_layout_design.fn("Hero", images=["https://example.com/hero.png"])

        (design_request,) = scripted_backend.requests_for("page layout designer")
        assert "Image 1: https://example.com/hero.png" in design_request.user.text

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_tool_call_raises(self, scripted_server, scripted_backend):
        from pagecraft.llm import NoToolCallError

        scripted_backend.replies.append("I would rather describe it in prose.")

        with pytest.raises(NoToolCallError):
            await generate_layout_design.fn("Hero")


@pytest.mark.mcp
class TestMCPProtocol:
    """Integration tests using the in-memory MCP client."""

    @pytest.mark.asyncio
    async def test_client_can_list_tools(self, mcp_client):
        tools = await mcp_client.list_tools()

        assert {t.name for t in tools} == {"generate_layout_design", "status", "list_models"}

    @pytest.mark.asyncio
    async def test_client_can_read_schema(self, mcp_client):
        contents = await mcp_client.read_resource("schema://layout-designer")
        assert "layouts" in json.loads(contents[0].text)["properties"]

    @pytest.mark.asyncio
    async def test_status_events_reach_client_log(self, scripted_server, scripted_backend):
        from fastmcp import Client

        scripted_backend.with_design([HERO_LAYOUT])
        logged = []

        async def log_handler(message):
            logged.append(message)

        async with Client(create_server(), log_handler=log_handler) as client:
            await client.call_tool("generate_layout_design", {"prompt": "Landing page hero"})

        assert len(scripted_backend.requests) == 4
        assert len(logged) > 0

    @pytest.mark.asyncio
    async def test_client_status_data(self, mcp_client, clean_env):
        """Tool results come back as structured data over the protocol."""
        clean_env.setenv("OPENAI_API_KEY", "sk-test")

        result = await mcp_client.call_tool("status", {})

        assert result.data["status"] == "healthy"
        assert result.data["default_model"] == "gpt-4.1-mini"


class TestGenerateCancellation:
    """Tests for session cleanup when forwarding events fails."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_session_cancelled_before_error_returns(self, monkeypatch, make_backend):
        class HangingBackend(make_backend):
            cancelled = False

            async def generate(self, messages, *, tools=None, config=None):
                try:
                    await asyncio.sleep(30)
                except asyncio.CancelledError:
                    HangingBackend.cancelled = True
                    raise

        class BrokenContext:
            async def info(self, message):
                raise RuntimeError("client went away")

        monkeypatch.setattr(
            server, "create_adapter", lambda model=None: ModelAdapter(HangingBackend())
        )

        with pytest.raises(RuntimeError, match="client went away"):
            await asyncio.wait_for(generate_layout_design.fn("Hero", ctx=BrokenContext()), 5)

        assert HangingBackend.cancelled is True


class TestMain:
    """Tests for the server entry point."""

    @pytest.fixture
    def launched(self, monkeypatch):
        calls = {}
        monkeypatch.setattr(server, "setup_logging", lambda level: calls.update(level=level))
        monkeypatch.setattr(server, "run_server", lambda **kwargs: calls.update(kwargs))
        return calls

    @pytest.mark.unit
    def test_log_level_from_env(self, monkeypatch, launched):
        monkeypatch.setenv("LOG_LEVEL", "WARNING")

        assert server.main([]) == 0
        assert launched["level"] == "WARNING"
        assert launched["transport"] == TransportType.STDIO

    @pytest.mark.unit
    def test_verbose_overrides_env(self, monkeypatch, launched):
        monkeypatch.setenv("LOG_LEVEL", "WARNING")

        server.main(["--verbose", "--transport", "http", "--port", "19001"])

        assert launched["level"] == "DEBUG"
        assert launched["transport"] == TransportType.HTTP
        assert launched["port"] == 19001
