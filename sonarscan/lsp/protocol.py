"""JSON-RPC 2.0 message models exchanged with the language server."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

JSONRPC_VERSION = "2.0"


@dataclass(slots=True)
class RpcError:
    """Normalized JSON-RPC error payload."""

    code: int | str
    message: str
    data: Any = None


@dataclass(slots=True)
class RpcRequest:
    """Request frame; expects exactly one response with the same id."""

    id: int | str
    method: str
    params: Any = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "id": self.id, "method": self.method}
        if self.params is not None:
            payload["params"] = self.params
        return payload


@dataclass(slots=True)
class RpcNotification:
    """Fire-and-forget frame without an id."""

    method: str
    params: Any = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "method": self.method}
        if self.params is not None:
            payload["params"] = self.params
        return payload


@dataclass(slots=True)
class RpcResponse:
    """Response frame carrying either a result or an error."""

    id: int | str | None
    result: Any = None
    error: RpcError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "id": self.id}
        if self.error is not None:
            error: dict[str, Any] = {"code": self.error.code, "message": self.error.message}
            if self.error.data is not None:
                error["data"] = self.error.data
            payload["error"] = error
        else:
            payload["result"] = self.result
        return payload


RpcMessage = RpcRequest | RpcNotification | RpcResponse


def _has_id(payload: dict[str, Any]) -> bool:
    return payload.get("id") is not None


def normalize_rpc_error(error: Any) -> RpcError:
    """Normalize unknown error payloads into RpcError."""
    row = error if isinstance(error, dict) else {}
    return RpcError(
        code=row.get("code", "RPC_ERROR"),
        message=str(row.get("message") or "rpc failed"),
        data=row.get("data"),
    )


def classify_message(payload: dict[str, Any]) -> RpcMessage | None:
    """Map a decoded JSON object to a request, notification or response.

    Returns None for objects that are none of the three (no id and no method).
    """
    method = payload.get("method")
    if isinstance(method, str) and method:
        if _has_id(payload):
            return RpcRequest(id=payload["id"], method=method, params=payload.get("params"))
        return RpcNotification(method=method, params=payload.get("params"))
    if _has_id(payload) or "result" in payload or "error" in payload:
        error = payload.get("error")
        return RpcResponse(
            id=payload.get("id"),
            result=payload.get("result"),
            error=normalize_rpc_error(error) if error is not None else None,
        )
    return None
