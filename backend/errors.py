"""
Figma Tool Errors

Structured exceptions raised by the Figma service and the tool layer.
Every error carries a payload of the shape { code: str, message: str, details?: dict }
so tool bindings can report a readable message without losing context.
"""

import json
from typing import Any, Dict, Optional


class FigmaToolError(Exception):
    """
    Base exception for tool execution failures.

    Expected payload shape: { code: str, message: str, details?: dict }
    """

    default_code = "unknown_error"

    def __init__(self, payload: Any, command: Optional[str] = None):
        self.command = command

        # Normalize payload and capture canonical fields
        if isinstance(payload, dict):
            self.code: str = str(payload.get("code", self.default_code))
            self.message: str = str(payload.get("message", ""))
            self.details: Dict[str, Any] = payload.get("details", {}) or {}
        else:
            self.code = self.default_code
            self.message = str(payload)
            self.details = {}

        self.payload = {"code": self.code, "message": self.message, "details": self.details}

        text = self.message if self.message else self.code
        super().__init__(text)


class NotFoundError(FigmaToolError):
    """The requested file or node came back empty."""

    default_code = "not_found"


class StorageError(FigmaToolError):
    """A directory could not be created or a file could not be written."""

    default_code = "storage_error"


class UpstreamFetchError(FigmaToolError):
    """The Figma API rejected a request or could not be reached."""

    default_code = "upstream_fetch_failed"

    @property
    def status_code(self) -> Optional[int]:
        return self.details.get("status_code")


def error_message(error: Any) -> str:
    """Extract a human-readable message from anything a collaborator raised."""
    if isinstance(error, FigmaToolError):
        return error.message or error.code
    if isinstance(error, Exception):
        return str(error) or type(error).__name__
    try:
        return json.dumps(error, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(error)
