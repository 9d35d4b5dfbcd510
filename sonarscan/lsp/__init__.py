"""Minimal LSP client: framing, transport, JSON-RPC session and dispatch."""

from .errors import ProcessError, ServerError, TransportParseError
from .framing import FrameDecoder, decode_body, encode_frame
from .protocol import RpcError, RpcNotification, RpcRequest, RpcResponse, classify_message
from .recorder import DebugLogRecorder, EventRecorder, MemoryRecorder, NullRecorder
from .registry import DispatchRegistry
from .session import RpcSession
from .transport import FramedTransport

__all__ = [
    "DebugLogRecorder",
    "DispatchRegistry",
    "EventRecorder",
    "FrameDecoder",
    "FramedTransport",
    "MemoryRecorder",
    "NullRecorder",
    "ProcessError",
    "RpcError",
    "RpcNotification",
    "RpcRequest",
    "RpcResponse",
    "RpcSession",
    "ServerError",
    "TransportParseError",
    "classify_message",
    "decode_body",
    "encode_frame",
]
