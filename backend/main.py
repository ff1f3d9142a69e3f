import os
import sys
import signal
import logging
import asyncio
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from descriptor import DEFAULT_MAX_DEPTH
from figma_service import DEFAULT_TIMEOUT, FIGMA_API_BASE, FigmaService
from figma_tools import FigmaTools
from log_context import LoggingContext

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

TRANSPORT_STDIO = "stdio"
TRANSPORT_AGENT = "agent"
TRANSPORTS = (TRANSPORT_STDIO, TRANSPORT_AGENT)


@dataclass(frozen=True)
class ServerConfig:
    api_key: Optional[str]
    oauth_token: Optional[str]
    api_base: str = FIGMA_API_BASE
    timeout: float = DEFAULT_TIMEOUT
    max_depth: int = DEFAULT_MAX_DEPTH
    transport: str = TRANSPORT_STDIO
    model: str = "gpt-4.1-nano"
    model_api_key: Optional[str] = None
    max_turns: int = 10


def _number(name: str, raw: str, cast, default):
    try:
        value = cast(raw)
    except ValueError:
        logger.warning(f"⚠️ Invalid value for {name}: {raw!r}, using {default}")
        return default
    if value <= 0:
        logger.warning(f"⚠️ {name} must be positive, using {default}")
        return default
    return value


def get_config() -> ServerConfig:
    """Get configuration from environment variables or CLI args"""
    api_key = os.getenv("FIGMA_API_KEY")
    oauth_token = os.getenv("FIGMA_OAUTH_TOKEN")
    api_base = os.getenv("FIGMA_API_BASE", FIGMA_API_BASE)
    timeout = os.getenv("FIGMA_HTTP_TIMEOUT", str(DEFAULT_TIMEOUT))
    max_depth = os.getenv("FIGMA_DESCRIBE_MAX_DEPTH", str(DEFAULT_MAX_DEPTH))
    transport = os.getenv("MCP_TRANSPORT", TRANSPORT_STDIO)
    model = os.getenv("LITELLM_MODEL", "gpt-4.1-nano")
    model_api_key = os.getenv("LITELLM_API_KEY")
    max_turns = os.getenv("AGENT_MAX_TURNS", "10")

    # Parse CLI args for overrides
    if len(sys.argv) > 1:
        for arg in sys.argv[1:]:
            if arg.startswith("--figma-api-key="):
                api_key = arg.split("=", 1)[1]
            elif arg.startswith("--figma-oauth-token="):
                oauth_token = arg.split("=", 1)[1]
            elif arg.startswith("--api-base="):
                api_base = arg.split("=", 1)[1]
            elif arg.startswith("--timeout="):
                timeout = arg.split("=", 1)[1]
            elif arg.startswith("--max-depth="):
                max_depth = arg.split("=", 1)[1]
            elif arg.startswith("--transport="):
                transport = arg.split("=", 1)[1]
            elif arg.startswith("--model="):
                model = arg.split("=", 1)[1]
            elif arg.startswith("--api-key="):
                model_api_key = arg.split("=", 1)[1]
            elif arg == "--stdio":
                transport = TRANSPORT_STDIO

    if not api_key and not oauth_token:
        logger.error("FIGMA_API_KEY or FIGMA_OAUTH_TOKEN environment variable is required")
        sys.exit(1)

    transport = transport.strip().lower()
    if transport not in TRANSPORTS:
        logger.error(f"Unknown transport {transport!r}, expected one of: {', '.join(TRANSPORTS)}")
        sys.exit(1)

    if transport == TRANSPORT_AGENT and not model_api_key:
        logger.error("LITELLM_API_KEY environment variable is required for the agent transport")
        sys.exit(1)

    return ServerConfig(
        api_key=api_key,
        oauth_token=oauth_token,
        api_base=api_base,
        timeout=_number("FIGMA_HTTP_TIMEOUT", timeout, float, DEFAULT_TIMEOUT),
        max_depth=_number("FIGMA_DESCRIBE_MAX_DEPTH", max_depth, int, DEFAULT_MAX_DEPTH),
        transport=transport,
        model=model,
        model_api_key=model_api_key,
        max_turns=_number("AGENT_MAX_TURNS", max_turns, int, 10),
    )


def _mask(secret: Optional[str]) -> str:
    return f"****{secret[-4:]}" if secret else "None"


async def run(config: ServerConfig, log_context: LoggingContext) -> None:
    service = FigmaService(
        api_key=config.api_key,
        oauth_token=config.oauth_token,
        base_url=config.api_base,
        timeout=config.timeout,
    )
    toolset = FigmaTools(service, max_depth=config.max_depth)
    try:
        if config.transport == TRANSPORT_AGENT:
            from design_agent import FigmaDesignAgent

            agent = FigmaDesignAgent(toolset, config.model, str(config.model_api_key), config.max_turns)
            await agent.run_console()
        else:
            from mcp_server import serve_stdio

            await serve_stdio(toolset, log_context)
    finally:
        await service.aclose()


def main():
    # Transport decides where info logs go; configure before get_config logs anything
    transport = os.getenv("MCP_TRANSPORT", TRANSPORT_STDIO)
    for arg in sys.argv[1:]:
        if arg.startswith("--transport="):
            transport = arg.split("=", 1)[1]
    log_context = LoggingContext(protocol_on_stdout=transport.strip().lower() != TRANSPORT_AGENT)
    log_context.configure()

    config = get_config()

    logger.info("Starting Figma Design MCP")
    logger.info(f"Transport: {config.transport}")
    logger.info(f"Figma API: {config.api_base}")
    logger.info(f"Auth: {'OAuth token' if config.oauth_token else 'API key ' + _mask(config.api_key)}")
    logger.info(f"Descriptor depth limit: {config.max_depth}")
    if config.transport == TRANSPORT_AGENT:
        logger.info(f"LiteLLM Model: {config.model}")

    # Handle shutdown signals
    def signal_handler(signum, frame):
        logger.info("Received shutdown signal")
        sys.exit(0)

    signal.signal(signal.SIGTERM, signal_handler)

    try:
        asyncio.run(run(config, log_context))
    except KeyboardInterrupt:
        logger.info("Server interrupted")


if __name__ == "__main__":
    main()
