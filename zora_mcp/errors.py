"""Tool-level error taxonomy shared by the validator, dispatcher and handlers."""

from __future__ import annotations

from typing import Any, Dict, Optional

VALIDATION_ERROR = "VALIDATION_ERROR"
CREDENTIAL_MISSING = "CREDENTIAL_MISSING"
UNKNOWN_TOOL = "UNKNOWN_TOOL"
EXTERNAL_CALL_FAILED = "EXTERNAL_CALL_FAILED"
STARTUP_FATAL = "STARTUP_FATAL"


class ToolError(Exception):
    """Base class for errors surfaced to the caller in the response envelope."""

    code = "TOOL_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message}


class ValidationError(ToolError):
    """Raised when an argument is missing, mistyped or out of range."""

    code = VALIDATION_ERROR

    def __init__(self, field: str, constraint: str) -> None:
        super().__init__(f"Invalid argument '{field}': {constraint}")
        self.field = field
        self.constraint = constraint

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["field"] = self.field
        payload["constraint"] = self.constraint
        return payload


class CredentialMissingError(ToolError):
    """Raised when a write tool is called without a configured signing key."""

    code = CREDENTIAL_MISSING
    hint = "Set PRIVATE_KEY (and BASE_RPC_URL) in the environment and restart the server."

    def __init__(self, tool: str) -> None:
        super().__init__(f"Tool '{tool}' requires a signing key but none is configured.")
        self.tool = tool

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["hint"] = self.hint
        return payload


class UnknownToolError(ToolError):
    code = UNKNOWN_TOOL

    def __init__(self, tool: str) -> None:
        super().__init__(f"Unknown tool: {tool}")
        self.tool = tool


class ExternalCallError(ToolError):
    """Raised when the coin platform or chain RPC rejects or fails a call."""

    code = EXTERNAL_CALL_FAILED

    def __init__(self, message: str, *, source: Optional[str] = None) -> None:
        super().__init__(message)
        self.source = source

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        if self.source:
            payload["source"] = self.source
        return payload


class StartupError(Exception):
    """Configuration or bootstrap failure; terminates the process."""

    code = STARTUP_FATAL


class DuplicateToolError(StartupError):
    """Raised when two tools are registered under the same name."""
