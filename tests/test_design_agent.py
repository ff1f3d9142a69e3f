import pytest

import agent_tools
import design_agent
from design_agent import FigmaDesignAgent
from figma_tools import FigmaTools


class FakeRunResult:
    def __init__(self, input_items, answer):
        self.final_output = answer
        self._items = list(input_items) + [{"role": "assistant", "content": answer}]

    def to_input_list(self):
        return self._items


@pytest.fixture
def agent(monkeypatch, fake_service):
    monkeypatch.setattr(agent_tools, "_toolset", None)
    return FigmaDesignAgent(FigmaTools(fake_service), model="gpt-4.1-nano", api_key="sk-test")


class TestFigmaDesignAgent:
    def test_registers_toolset_and_tools(self, agent):
        assert agent_tools.get_toolset() is not None
        assert agent.tool_names == [tool.name for tool in agent_tools.ALL_AGENT_TOOLS]
        assert len(agent.agent.tools) == 6

    @pytest.mark.asyncio
    async def test_history_is_carried_between_turns(self, agent, monkeypatch):
        seen = []

        async def fake_run(starting_agent, input, max_turns):
            seen.append(list(input))
            return FakeRunResult(input, f"answer {len(seen)}")

        monkeypatch.setattr(design_agent.Runner, "run", fake_run)

        assert await agent.ask("Describe node 1:1") == "answer 1"
        assert await agent.ask("And its children?") == "answer 2"
        assert seen[1][:2] == [
            {"role": "user", "content": "Describe node 1:1"},
            {"role": "assistant", "content": "answer 1"},
        ]
        assert seen[1][-1] == {"role": "user", "content": "And its children?"}

    def test_reset(self, agent):
        agent.history = [{"role": "user", "content": "hi"}]
        agent.reset()
        assert agent.history == []
