import pytest

import agent_tools
from agent_tools import ALL_AGENT_TOOLS, _unwrap, get_toolset, set_toolset
from errors import FigmaToolError
from figma_tools import TOOL_SPECS, FigmaTools


class TestAgentTools:
    def test_same_tools_as_the_mcp_server(self):
        assert [tool.name for tool in ALL_AGENT_TOOLS] == list(TOOL_SPECS)

    def test_tools_have_descriptions(self):
        for tool in ALL_AGENT_TOOLS:
            assert tool.description

    def test_unwrap_success(self):
        assert _unwrap("get_figma_data", {"content": [{"type": "text", "text": "ok"}]}) == "ok"

    def test_unwrap_error_raises_structured_error(self):
        with pytest.raises(FigmaToolError) as exc_info:
            _unwrap("get_figma_data", {"isError": True, "content": [{"type": "text", "text": "Error fetching file: boom"}]})
        assert exc_info.value.code == "tool_failed"
        assert exc_info.value.message == "Error fetching file: boom"
        assert exc_info.value.details == {"tool": "get_figma_data"}


class TestToolsetRegistry:
    def test_uninitialized(self, monkeypatch):
        monkeypatch.setattr(agent_tools, "_toolset", None)
        with pytest.raises(RuntimeError):
            get_toolset()

    def test_set_and_get(self, monkeypatch, fake_service):
        monkeypatch.setattr(agent_tools, "_toolset", None)
        toolset = FigmaTools(fake_service)
        set_toolset(toolset)
        assert get_toolset() is toolset
