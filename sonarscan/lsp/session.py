"""JSON-RPC session: request ids, pending-call correlation and dispatch."""

from __future__ import annotations

import asyncio
import itertools
from typing import Any

from loguru import logger

from .errors import INTERNAL_ERROR, ServerError
from .protocol import (
    RpcError,
    RpcNotification,
    RpcRequest,
    RpcResponse,
    classify_message,
    normalize_rpc_error,
)
from .registry import DispatchRegistry
from .transport import FramedTransport

DEFAULT_SHUTDOWN_GRACE_SECONDS = 0.1


class RpcSession:
    """Client side of one JSON-RPC conversation over a framed transport.

    Ids come from a counter starting at 1 and are never reused. A request
    whose process dies before answering stays pending forever; callers that
    need a bound must wrap the future in their own timeout.
    """

    def __init__(self, transport: FramedTransport, registry: DispatchRegistry | None = None):
        self.transport = transport
        self.registry = registry or DispatchRegistry()
        self._ids = itertools.count(1)
        self._pending: dict[int, tuple[str, asyncio.Future]] = {}
        transport.set_message_handler(self.handle_message)

    @property
    def pending_ids(self) -> list[int]:
        return list(self._pending)

    def request(self, method: str, params: Any = None) -> asyncio.Future:
        """Send a request and return a future resolved by the matching response."""
        future = asyncio.get_running_loop().create_future()
        req_id = next(self._ids)
        self._pending[req_id] = (method, future)
        try:
            self.transport.send(RpcRequest(id=req_id, method=method, params=params).to_payload())
        except Exception:
            self._pending.pop(req_id, None)
            raise
        return future

    def notify(self, method: str, params: Any = None) -> None:
        self.transport.send(RpcNotification(method=method, params=params).to_payload())

    def handle_message(self, message: dict[str, Any]) -> None:
        msg_id = message.get("id")
        if msg_id is not None and msg_id in self._pending:
            self._resolve(msg_id, message)
            return
        rpc = classify_message(message)
        if isinstance(rpc, RpcRequest):
            self._handle_request(rpc.id, rpc.method, rpc.params)
        elif isinstance(rpc, RpcNotification):
            self._handle_notification(rpc.method, rpc.params)
        else:
            logger.debug("Ignoring response for unknown request id {}", msg_id)

    def _resolve(self, msg_id: int, message: dict[str, Any]) -> None:
        method, future = self._pending.pop(msg_id)
        if future.done():
            return
        if message.get("error") is not None:
            error = normalize_rpc_error(message["error"])
            future.set_exception(ServerError(error.code, error.message, error.data, method=method))
        else:
            future.set_result(message.get("result"))

    def _handle_request(self, msg_id: Any, method: str, params: Any) -> None:
        handler = self.registry.request_handler(method)
        if handler is None:
            # No "method not found" reply; the server is left waiting on this id.
            logger.debug("No handler for server request {} (id={}), dropped", method, msg_id)
            return
        try:
            result = handler(params)
        except Exception as exc:
            logger.exception("Request handler for {} failed", method)
            response = RpcResponse(id=msg_id, error=RpcError(code=INTERNAL_ERROR, message=str(exc)))
        else:
            response = RpcResponse(id=msg_id, result=result)
        self.transport.send(response.to_payload())

    def _handle_notification(self, method: str, params: Any) -> None:
        handler = self.registry.notification_handler(method)
        if handler is None:
            logger.debug("No handler for notification {}", method)
            return
        handler(params)

    async def stop(self, grace_seconds: float = DEFAULT_SHUTDOWN_GRACE_SECONDS) -> None:
        """Send shutdown and exit, give the server a moment, then terminate it."""
        if self.transport.is_running:
            self.notify("shutdown", {})
            self.notify("exit", {})
            await asyncio.sleep(grace_seconds)
        await self.transport.close()
