"""
Design Agent - interactive console over the agent tools

Runs an openai-agents Agent (LiteLLM model) with the Figma design tools in a
read-eval-print loop on the terminal. Conversation history is carried between
turns with the run result's input list.
"""

import asyncio
import logging
import sys
from typing import Any, Dict, List

from agents import Agent, ModelSettings, Runner
from agents.extensions.models.litellm_model import LitellmModel
from agents.tracing import set_tracing_disabled

from agent_tools import ALL_AGENT_TOOLS, set_toolset
from figma_tools import FigmaTools
from system_prompt import SYSTEM_PROMPT

set_tracing_disabled(True)

logger = logging.getLogger(__name__)

EXIT_COMMANDS = {"exit", "quit", ":q"}
RESET_COMMAND = "/new"


class FigmaDesignAgent:
    def __init__(self, toolset: FigmaTools, model: str, api_key: str, max_turns: int = 10):
        set_toolset(toolset)
        self.model_name = model
        self.max_turns = max_turns
        self.history: List[Dict[str, Any]] = []

        self.agent = Agent(
            name="FigmaDesignAgent",
            instructions=SYSTEM_PROMPT,
            model=LitellmModel(model=model, api_key=api_key),
            model_settings=ModelSettings(include_usage=True),
            tools=list(ALL_AGENT_TOOLS),
        )
        self.tool_names = [t.name for t in ALL_AGENT_TOOLS]
        logger.info(f"🧰 Tools enabled: {', '.join(self.tool_names)}")

    def reset(self) -> None:
        self.history = []
        logger.info("🆕 Started a new conversation")

    async def ask(self, prompt: str) -> str:
        """Run one user turn and return the agent's final text."""
        input_items = self.history + [{"role": "user", "content": prompt}]
        logger.info(f"🧱 Running turn with {len(input_items)} input item(s)")
        result = await Runner.run(self.agent, input=input_items, max_turns=self.max_turns)
        self.history = result.to_input_list()
        return str(result.final_output or "")

    async def run_console(self) -> None:
        logger.info(f"💬 Design agent ready (model={self.model_name}). Type 'exit' to quit, '{RESET_COMMAND}' to reset.")
        while True:
            try:
                prompt = await asyncio.to_thread(input, "you> ")
            except EOFError:
                break
            prompt = prompt.strip()
            if not prompt:
                continue
            if prompt.lower() in EXIT_COMMANDS:
                break
            if prompt == RESET_COMMAND:
                self.reset()
                continue
            try:
                answer = await self.ask(prompt)
            except Exception as e:
                # Keep the console alive; the failed turn is not added to history
                logger.error(f"❌ Agent turn failed: {e}")
                continue
            sys.stdout.write(f"agent> {answer}\n")
            sys.stdout.flush()
        logger.info("👋 Design agent stopped")
