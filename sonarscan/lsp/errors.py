"""Error types raised by the LSP transport and session."""

from __future__ import annotations

from typing import Any

from sonarscan.utils.exceptions import ErrorCategory, SonarScanError

# JSON-RPC 2.0 reserved codes used on the client side.
PARSE_ERROR = -32700
INTERNAL_ERROR = -32603


class TransportParseError(SonarScanError):
    """Raised for a complete frame whose body is not a JSON object."""

    def __init__(self, message: str, body: bytes = b""):
        super().__init__(
            message,
            code="TRANSPORT_PARSE_ERROR",
            category=ErrorCategory.PROTOCOL,
            details={"body": body[:200].decode("utf-8", errors="replace")},
        )
        self.body = body


class ServerError(SonarScanError):
    """Raised when the server answers a request with a JSON-RPC error object."""

    def __init__(self, code: int | str, message: str, data: Any = None, method: str | None = None):
        super().__init__(
            message,
            code="SERVER_ERROR",
            category=ErrorCategory.PROTOCOL,
            details={"rpc_code": code, "data": data, "method": method},
        )
        self.rpc_code = code
        self.data = data
        self.method = method

    def __str__(self) -> str:
        if self.method:
            return f"[{self.rpc_code}] {self.method}: {self.message}"
        return f"[{self.rpc_code}] {self.message}"


class ProcessError(SonarScanError):
    """Raised when the language server process cannot be used."""

    def __init__(self, message: str, command: list[str] | None = None):
        super().__init__(
            message,
            code="PROCESS_ERROR",
            category=ErrorCategory.PROCESS,
            details={"command": list(command or [])},
        )
        self.command = list(command or [])
