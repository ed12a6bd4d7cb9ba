"""Tests for layout design sessions and the request front end."""

import asyncio
import json
import re

import pytest

from pagecraft.layout import LayoutGenerator, LayoutGeneratorConfig
from pagecraft.llm import (
    GenerationError,
    ImagePart,
    MalformedResponseError,
    ModelAdapter,
    ModelCallError,
    ModelResponse,
    NoToolCallError,
    TextPart,
    ToolCall,
)
from pagecraft.schema import LAYOUT_DESIGNER_TOOL_NAME, NodeKind, PageContent
from pagecraft.session import (
    DESIGN_SYSTEM_PROMPT,
    WELCOME_MESSAGE,
    LayoutDesignService,
    LayoutDesignSession,
    SessionState,
    build_design_messages,
    build_design_prompt,
    layout_designer_tool,
)
from pagecraft.status import CollectingStatusSink
from pagecraft.tree import ROOT_ID, ROOT_PROPS, is_valid_definition

HERO_LAYOUT = {
    "index": 0,
    "layout_type": "Container",
    "layout_requirements": "Centered hero with generous padding",
    "basic_elements": [
        {"element_type": "Heading", "element_requirements": "Headline 'Brew better'"},
        {"element_type": "Button", "element_requirements": "Primary call to action"},
    ],
}


class FakeConnection:
    """Connection double that keeps every sent frame."""

    def __init__(self, connection_id: str = "conn-1"):
        self.id = connection_id
        self.sent: list[dict] = []

    def send(self, message: str) -> None:
        self.sent.append(json.loads(message))


@pytest.fixture
def session(adapter, status_sink):
    generator = LayoutGenerator(adapter, config=LayoutGeneratorConfig())
    return LayoutDesignSession(adapter, status_sink, generator)


@pytest.fixture
def service(adapter):
    return LayoutDesignService(adapter, LayoutGenerator(adapter, config=LayoutGeneratorConfig()))


# =============================================================================
# Prompt
# =============================================================================


class TestDesignPrompt:
    """Tests for design prompt construction."""

    @pytest.mark.unit
    def test_prompt_without_images(self):
        prompt = build_design_prompt(PageContent(prompt="A pricing page"))
        assert prompt.startswith(
            "Design a complete page layout based on the following content requirements:\n"
            "A pricing page"
        )
        assert "1200px" in prompt
        assert "maximum of 4 elements" in prompt
        assert "Image URLs to use" not in prompt

    @pytest.mark.unit
    def test_prompt_lists_every_image(self):
        content = PageContent(
            prompt="Gallery", images=["https://img.test/a.png", "https://img.test/b.png"]
        )
        prompt = build_design_prompt(content)
        assert "5. Image URLs to use (MUST include ALL of these):" in prompt
        assert "  - Image 1: https://img.test/a.png\n" in prompt
        assert "  - Image 2: https://img.test/b.png\n" in prompt
        assert prompt.endswith("included in the element_requirements.")

    @pytest.mark.unit
    def test_messages_images_before_text(self):
        content = PageContent(prompt="Gallery", images=["https://img.test/a.png"])
        system, user = build_design_messages(content)
        assert system.text == DESIGN_SYSTEM_PROMPT
        assert user.parts[0] == ImagePart("https://img.test/a.png")
        assert isinstance(user.parts[1], TextPart)
        assert user.text == build_design_prompt(content)

    @pytest.mark.unit
    def test_tool_definition(self):
        tool = layout_designer_tool()
        assert tool.name == LAYOUT_DESIGNER_TOOL_NAME
        assert "CRITICAL RULE" in tool.description
        assert tool.input_schema["required"] == ["layouts"]


# =============================================================================
# Session
# =============================================================================


class TestLayoutDesignSession:
    """Tests for LayoutDesignSession."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_hero_definition(self, session, scripted_backend):
        scripted_backend.with_design([HERO_LAYOUT])
        definition = await session.generate_layout_design(
            {"prompt": "a hero section with a heading and a button", "images": []}
        )

        assert list(definition)[0] == ROOT_ID
        assert len(definition) == 4
        root = definition[ROOT_ID]
        (container_id,) = root.nodes
        container = definition[container_id]
        assert container.kind == NodeKind.CONTAINER
        assert container.parent == ROOT_ID
        heading_id, button_id = container.nodes
        assert definition[heading_id].kind == NodeKind.HEADING
        assert definition[button_id].kind == NodeKind.USER_BUTTON
        assert is_valid_definition(definition)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_concurrent_sessions_keep_events_apart(self, make_backend, adapter):
        class YieldingBackend(make_backend):
            async def generate(self, messages, *, tools=None, config=None):
                await asyncio.sleep(0)
                return await super().generate(messages, tools=tools, config=config)

        backend = YieldingBackend().with_design([HERO_LAYOUT])
        shared = ModelAdapter(backend, adapter.config)
        generator = LayoutGenerator(shared, config=LayoutGeneratorConfig())
        first_sink, second_sink = CollectingStatusSink(), CollectingStatusSink()

        first, second = await asyncio.gather(
            LayoutDesignSession(shared, first_sink, generator).generate_layout_design(
                {"prompt": "Coffee shop hero"}
            ),
            LayoutDesignSession(shared, second_sink, generator).generate_layout_design(
                {"prompt": "Bookstore hero"}
            ),
        )

        # Both design calls reach the model before either session moves on
        assert all("page layout designer" in r.system for r in backend.requests[:2])
        assert set(first) & set(second) == {ROOT_ID}

        def reported_ids(sink):
            return {m for e in sink.events for m in re.findall(r"ID: (\w+)", e.message)}

        assert reported_ids(first_sink) == set(first) - {ROOT_ID}
        assert reported_ids(second_sink) == set(second) - {ROOT_ID}
        assert len(first_sink.events) == len(second_sink.events)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_root_is_fresh(self, session, scripted_backend):
        scripted_backend.with_design([HERO_LAYOUT])
        definition = await session.generate_layout_design({"prompt": "Hero"})
        root = definition[ROOT_ID]
        assert root.parent is None
        assert root.display_name == "root"
        assert root.props == ROOT_PROPS
        assert root.props is not ROOT_PROPS

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_state_transitions(self, session, scripted_backend):
        scripted_backend.with_design([HERO_LAYOUT])
        await session.generate_layout_design({"prompt": "Hero"})
        assert session.state == SessionState.DONE
        assert session.transitions == [
            SessionState.RECEIVED,
            SessionState.PROMPTING_MODEL,
            SessionState.AWAITING_TOOL_CALL,
            SessionState.PROCESSING_LAYOUTS,
            SessionState.ASSEMBLING_ROOT,
            SessionState.DONE,
        ]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_single_use(self, session, scripted_backend):
        scripted_backend.with_design([HERO_LAYOUT])
        await session.generate_layout_design({"prompt": "Hero"})
        with pytest.raises(GenerationError, match="single request"):
            await session.generate_layout_design({"prompt": "Hero"})

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_design_request_shape(self, session, scripted_backend):
        scripted_backend.with_design([HERO_LAYOUT])
        await session.generate_layout_design(
            {"prompt": "Hero", "images": ["https://img.test/a.png"]}
        )

        request = scripted_backend.requests[0]
        assert request.system == DESIGN_SYSTEM_PROMPT
        assert [t.name for t in request.tools] == [LAYOUT_DESIGNER_TOOL_NAME]
        assert request.user.parts[0] == ImagePart("https://img.test/a.png")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_status_events(self, session, scripted_backend, status_sink):
        scripted_backend.with_design([HERO_LAYOUT])
        await session.generate_layout_design({"prompt": "Hero"})

        assert status_sink.messages("layout-design") == [
            "Starting layout design generation for provided content",
            "Sending layout design request to AI model with reference images",
            "Calling model scripted-model",
            "Model response received",
            "Layout design generation completed",
        ]
        (result,) = status_sink.messages("layout-design-result")
        assert json.loads(result)["arguments"]["layouts"] == [HERO_LAYOUT]
        processing = status_sink.messages("layout-processing")
        assert processing[0] == "Processing layout tool results"
        assert processing[1] == "Processing 1 layouts"
        assert processing[-1] == "Layout processing completed"
        assert "error" not in status_sink.prefixes

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_prompt_rejected(self, session):
        with pytest.raises(ValueError):
            await session.generate_layout_design({"images": []})
        assert session.state == SessionState.FAILED

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_no_tool_call(self, session, scripted_backend, status_sink):
        scripted_backend.routes["page layout designer"] = "I would design a hero section."
        with pytest.raises(NoToolCallError, match="No tool calls found in response"):
            await session.generate_layout_design({"prompt": "Hero"})

        assert session.state == SessionState.FAILED
        assert session.transitions[-2:] == [SessionState.AWAITING_TOOL_CALL, SessionState.FAILED]
        assert "No tool calls found in response" in status_sink.messages("error")
        assert len(scripted_backend.requests) == 1

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_model_error_fails_session(self, session, scripted_backend):
        scripted_backend.routes["page layout designer"] = ModelCallError("overloaded")
        with pytest.raises(ModelCallError):
            await session.generate_layout_design({"prompt": "Hero"})
        assert session.transitions == [
            SessionState.RECEIVED,
            SessionState.PROMPTING_MODEL,
            SessionState.FAILED,
        ]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_empty_layouts(self, session, scripted_backend, status_sink):
        scripted_backend.with_design([])
        with pytest.raises(MalformedResponseError, match="No layouts found"):
            await session.generate_layout_design({"prompt": "Hero"})
        assert "No layouts found in tool arguments" in status_sink.messages("error")


class TestToolCallHandling:
    """Tests for extract_layout_call and parse_layouts."""

    @pytest.mark.unit
    def test_other_tool_only(self, session, status_sink):
        response = ModelResponse(text="", tool_calls=[ToolCall("search", {"q": "x"})])
        with pytest.raises(NoToolCallError, match="Layout designer tool not called"):
            session.extract_layout_call(response)
        assert status_sink.messages("error") == ["Layout designer tool not called"]

    @pytest.mark.unit
    def test_first_matching_call(self, session):
        first = ToolCall(LAYOUT_DESIGNER_TOOL_NAME, {"layouts": [HERO_LAYOUT]}, id="a")
        second = ToolCall(LAYOUT_DESIGNER_TOOL_NAME, {"layouts": []}, id="b")
        response = ModelResponse(text="", tool_calls=[ToolCall("other", {}), first, second])
        assert session.extract_layout_call(response) is first

    @pytest.mark.unit
    def test_parse_layouts(self, session):
        tool_call = ToolCall(LAYOUT_DESIGNER_TOOL_NAME, {"layouts": [HERO_LAYOUT]})
        (layout,) = session.parse_layouts(tool_call)
        assert layout.layout_type.value == "Container"
        assert [e.element_type for e in layout.basic_elements] == ["Heading", "Button"]

    @pytest.mark.unit
    def test_invalid_layout_type(self, session):
        bad = dict(HERO_LAYOUT, layout_type="Grid")
        with pytest.raises(MalformedResponseError, match="Invalid layout_designer arguments"):
            session.parse_layouts(ToolCall(LAYOUT_DESIGNER_TOOL_NAME, {"layouts": [bad]}))

    @pytest.mark.unit
    def test_missing_layouts(self, session):
        with pytest.raises(MalformedResponseError):
            session.parse_layouts(ToolCall(LAYOUT_DESIGNER_TOOL_NAME, {"page_content": "x"}))


# =============================================================================
# Service
# =============================================================================


class TestLayoutDesignService:
    """Tests for LayoutDesignService."""

    @pytest.mark.unit
    def test_connect_and_disconnect(self, service):
        connection = FakeConnection()
        service.on_connect(connection)
        assert service.connections == {"conn-1": connection}
        assert connection.sent == [
            {"type": "status", "status": "init", "message": WELCOME_MESSAGE}
        ]

        service.on_disconnect(connection)
        assert service.connections == {}

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_generate_layout_message(self, service, scripted_backend):
        scripted_backend.with_design([HERO_LAYOUT])
        connection = FakeConnection()
        await service.on_message(
            connection, json.dumps({"type": "generate-layout", "content": {"prompt": "Hero"}})
        )

        first, *statuses, last = connection.sent
        assert first["type"] == "status"
        assert first["status"] == "layout-design"
        assert first["message"] == "Starting layout design generation"
        assert all(frame["type"] == "status" for frame in statuses)
        assert all("timestamp" in frame for frame in statuses)
        assert last["type"] == "layout-result"
        assert len(last["data"]) == 4
        assert last["data"][ROOT_ID]["type"] == {"resolvedName": "Container"}
        assert "parent" not in last["data"][ROOT_ID]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unknown_message_type(self, service):
        connection = FakeConnection()
        await service.on_message(connection, '{"type": "ping"}')
        assert connection.sent == [
            {
                "type": "error",
                "message": "Unknown message type",
                "originalMessage": {"type": "ping"},
            }
        ]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_invalid_json_message(self, service):
        connection = FakeConnection()
        await service.on_message(connection, "not json")
        (frame,) = connection.sent
        assert frame["type"] == "error"
        assert frame["message"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_generation_failure_message(self, service, scripted_backend):
        scripted_backend.routes["page layout designer"] = "no tool call here"
        connection = FakeConnection()
        await service.on_message(
            connection, {"type": "generate-layout", "content": {"prompt": "Hero"}}
        )
        assert connection.sent[-1] == {
            "type": "error",
            "message": "No tool calls found in response",
        }
        assert all(frame["type"] != "layout-result" for frame in connection.sent)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_generate_request_success(self, service, scripted_backend):
        scripted_backend.with_design([HERO_LAYOUT])
        status, payload = await service.handle_generate_request({"content": {"prompt": "Hero"}})
        assert status == 200
        assert ROOT_ID in payload
        assert len(payload) == 4

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_generate_request_failure(self, service, scripted_backend):
        scripted_backend.routes["page layout designer"] = ModelCallError("overloaded")
        status, payload = await service.handle_generate_request({"content": {"prompt": "Hero"}})
        assert (status, payload) == (400, {"error": "overloaded"})

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_generate_request_without_content(self, service):
        status, payload = await service.handle_generate_request({"prompt": "Hero"})
        assert status == 400
        assert "content" in payload["error"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_sessions_do_not_share_state(self, service, scripted_backend):
        scripted_backend.with_design([HERO_LAYOUT])
        first = FakeConnection("a")
        second = FakeConnection("b")
        frame = {"type": "generate-layout", "content": {"prompt": "Hero"}}
        await service.on_message(first, frame)
        await service.on_message(second, frame)

        first_ids = set(first.sent[-1]["data"])
        second_ids = set(second.sent[-1]["data"])
        assert first_ids & second_ids == {ROOT_ID}
        assert all(f["type"] != "layout-result" for f in first.sent[:-1])
