import mcp.types as types
import pytest
from mcp.server import Server
from mcp.types import TextContent

from figma_tools import FigmaTools
from mcp_server import ToolCallFailed, create_server, dispatch, serve_stdio, tool_definitions
from log_context import LoggingContext


class TestToolDefinitions:
    def test_every_tool_is_listed(self):
        names = [tool.name for tool in tool_definitions()]
        assert names == [
            "get_figma_data",
            "download_figma_images",
            "get_figma_data_to_file",
            "generate_visual_description",
            "generate_technical_specification",
            "list_figma_exports",
        ]

    def test_schemas_use_camel_case(self):
        schemas = {tool.name: tool.inputSchema for tool in tool_definitions()}
        assert set(schemas["get_figma_data"]["properties"]) == {"fileKey", "nodeId", "depth"}
        assert schemas["get_figma_data"]["required"] == ["fileKey"]
        assert "localPath" in schemas["download_figma_images"]["properties"]
        assert "outputDirectory" in schemas["generate_technical_specification"]["properties"]


class TestDispatch:
    @pytest.mark.asyncio
    async def test_success_is_text_content(self, fake_service):
        content = await dispatch(FigmaTools(fake_service), "generate_visual_description", {"fileKey": "KEY", "nodeId": "1:1"})
        assert len(content) == 1
        assert isinstance(content[0], TextContent)
        assert "Login Screen" in content[0].text

    @pytest.mark.asyncio
    async def test_error_result_raises(self, fake_service):
        with pytest.raises(ToolCallFailed) as exc_info:
            await dispatch(FigmaTools(fake_service), "no_such_tool", {})
        assert str(exc_info.value) == "Unknown tool: no_such_tool"


class TestServer:
    def test_create_server(self, fake_service):
        assert isinstance(create_server(FigmaTools(fake_service)), Server)

    def test_handlers_are_registered(self, fake_service):
        server = create_server(FigmaTools(fake_service))
        assert types.ListToolsRequest in server.request_handlers
        assert types.CallToolRequest in server.request_handlers

    @pytest.mark.asyncio
    async def test_stdio_requires_protocol_logging_mode(self, fake_service):
        with pytest.raises(ValueError):
            await serve_stdio(FigmaTools(fake_service), LoggingContext(protocol_on_stdout=False))
