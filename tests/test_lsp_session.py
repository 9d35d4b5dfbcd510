import asyncio
import random

import pytest

from sonarscan.lsp.errors import INTERNAL_ERROR, ServerError
from sonarscan.lsp.framing import encode_frame
from sonarscan.lsp.registry import DispatchRegistry


@pytest.mark.asyncio
async def test_request_ids_are_monotonic_and_tracked(session, writer):
    first = session.request("initialize", {"initializationOptions": {}})
    second = session.request("sonarlint/listAllRules")
    sent = writer.messages()
    assert [m["id"] for m in sent] == [1, 2]
    assert sent[0]["method"] == "initialize"
    assert "params" not in sent[1]
    assert session.pending_ids == [1, 2]
    session.handle_message({"jsonrpc": "2.0", "id": 1, "result": {"capabilities": {}}})
    assert await first == {"capabilities": {}}
    assert session.pending_ids == [2]
    second.cancel()


@pytest.mark.asyncio
async def test_responses_in_any_order_resolve_their_own_request(session):
    futures = {i: session.request("echo", {"n": i}) for i in range(1, 9)}
    order = list(futures)
    random.Random(7).shuffle(order)
    for req_id in order:
        session.handle_message({"jsonrpc": "2.0", "id": req_id, "result": f"result-{req_id}"})
    results = await asyncio.gather(*futures.values())
    assert results == [f"result-{i}" for i in range(1, 9)]
    assert session.pending_ids == []


@pytest.mark.asyncio
async def test_error_response_rejects_only_that_request(session):
    failing = session.request("sonarlint/listAllRules")
    passing = session.request("initialize", {})
    session.handle_message(
        {"jsonrpc": "2.0", "id": 1, "error": {"code": -32601, "message": "Unhandled method", "data": {"x": 1}}}
    )
    session.handle_message({"jsonrpc": "2.0", "id": 2, "result": {}})
    with pytest.raises(ServerError) as exc_info:
        await failing
    assert exc_info.value.rpc_code == -32601
    assert exc_info.value.message == "Unhandled method"
    assert exc_info.value.data == {"x": 1}
    assert exc_info.value.method == "sonarlint/listAllRules"
    assert await passing == {}


@pytest.mark.asyncio
async def test_response_through_transport_bytes(session, transport):
    future = session.request("initialize", {})
    frame = encode_frame({"jsonrpc": "2.0", "id": 1, "result": {"serverInfo": {"name": "x"}}})
    transport.on_data(frame[:7])
    assert not future.done()
    transport.on_data(frame[7:])
    assert await future == {"serverInfo": {"name": "x"}}


def test_notify_sends_no_id(session, writer):
    session.notify("initialized", {})
    assert writer.messages() == [{"jsonrpc": "2.0", "method": "initialized", "params": {}}]
    assert session.pending_ids == []


def test_server_request_is_answered_with_handler_result(session, registry, writer):
    registry.on_request("sonarlint/isOpenInEditor", lambda params: True)
    session.handle_message({"jsonrpc": "2.0", "id": 42, "method": "sonarlint/isOpenInEditor", "params": "file:///a.js"})
    assert writer.messages() == [{"jsonrpc": "2.0", "id": 42, "result": True}]


def test_unhandled_server_request_gets_no_response(session, writer):
    session.handle_message({"jsonrpc": "2.0", "id": 5, "method": "sonarlint/needCompilationDatabase"})
    assert writer.frames == []


def test_failing_request_handler_answers_internal_error(session, registry, writer):
    def broken(params):
        raise RuntimeError("no config yet")

    registry.on_request("workspace/configuration", broken)
    session.handle_message({"jsonrpc": "2.0", "id": 9, "method": "workspace/configuration", "params": {}})
    (reply,) = writer.messages()
    assert reply["id"] == 9
    assert reply["error"]["code"] == INTERNAL_ERROR
    assert "no config yet" in reply["error"]["message"]


def test_notifications_dispatch_without_reply(session, registry, writer):
    received: list = []
    registry.on_notification("textDocument/publishDiagnostics", received.append)
    session.handle_message({"jsonrpc": "2.0", "method": "textDocument/publishDiagnostics", "params": {"uri": "file:///a"}})
    session.handle_message({"jsonrpc": "2.0", "method": "window/logMessage", "params": {"message": "hi"}})
    assert received == [{"uri": "file:///a"}]
    assert writer.frames == []


def test_response_for_unknown_id_is_ignored(session, writer):
    session.handle_message({"jsonrpc": "2.0", "id": 77, "result": "late"})
    assert writer.frames == []


def test_registry_last_registration_wins():
    registry = DispatchRegistry()
    registry.on_request("workspace/configuration", lambda params: "first")
    registry.on_request("workspace/configuration", lambda params: "second")
    registry.on_notification("textDocument/publishDiagnostics", lambda params: None)
    assert registry.request_handler("workspace/configuration")(None) == "second"
    assert registry.request_handler("unknown") is None
    assert registry.notification_handler("unknown") is None
    assert registry.request_methods() == ["workspace/configuration"]
    assert registry.notification_methods() == ["textDocument/publishDiagnostics"]


@pytest.mark.asyncio
async def test_stop_without_process_is_a_no_op(session, writer):
    await session.stop(grace_seconds=0)
    assert writer.frames == []
