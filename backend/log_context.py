"""
Logging Context

The stdio MCP transport writes protocol frames to stdout, so informational
logs must never go there in that mode. A LoggingContext is built once at
startup from the transport mode and decides where each record is written.
"""

import logging
import sys
from dataclasses import dataclass
from typing import List, TextIO

LOG_FORMAT = "[%(asctime)s] [figma-mcp] [%(levelname)s] %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


class _BelowLevel(logging.Filter):
    def __init__(self, level: int) -> None:
        super().__init__()
        self.level = level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < self.level


@dataclass(frozen=True)
class LoggingContext:
    """
    protocol_on_stdout: True when stdout carries protocol responses (stdio MCP).
        Informational records then go to stderr; otherwise they go to stdout.
        Warnings and errors always go to stderr.
    """

    protocol_on_stdout: bool = True
    level: int = logging.INFO

    @property
    def info_stream(self) -> TextIO:
        return sys.stderr if self.protocol_on_stdout else sys.stdout

    def build_handlers(self) -> List[logging.Handler]:
        formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

        info_handler = logging.StreamHandler(self.info_stream)
        info_handler.setLevel(self.level)
        info_handler.addFilter(_BelowLevel(logging.WARNING))
        info_handler.setFormatter(formatter)

        error_handler = logging.StreamHandler(sys.stderr)
        error_handler.setLevel(max(self.level, logging.WARNING))
        error_handler.setFormatter(formatter)
        return [info_handler, error_handler]

    def configure(self) -> None:
        """Install the handlers on the root logger (replacing any previous setup)."""
        logging.basicConfig(level=self.level, handlers=self.build_handlers(), force=True)
