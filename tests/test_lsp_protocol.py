from sonarscan.lsp.protocol import (
    RpcError,
    RpcNotification,
    RpcRequest,
    RpcResponse,
    classify_message,
    normalize_rpc_error,
)


def test_classify_request_notification_and_response():
    assert classify_message({"jsonrpc": "2.0", "id": 3, "method": "workspace/configuration", "params": {}}) == RpcRequest(
        id=3, method="workspace/configuration", params={}
    )
    assert classify_message({"jsonrpc": "2.0", "method": "exit"}) == RpcNotification(method="exit")
    response = classify_message({"jsonrpc": "2.0", "id": 1, "error": {"code": -1, "message": "bad"}})
    assert isinstance(response, RpcResponse)
    assert not response.ok
    assert response.error == RpcError(code=-1, message="bad")
    assert classify_message({"jsonrpc": "2.0"}) is None


def test_payloads_follow_jsonrpc_shape():
    assert RpcRequest(id=1, method="shutdown").to_payload() == {"jsonrpc": "2.0", "id": 1, "method": "shutdown"}
    assert RpcResponse(id=2, result=None).to_payload() == {"jsonrpc": "2.0", "id": 2, "result": None}
    error_payload = RpcResponse(id=2, error=RpcError(code=-32603, message="x", data={"a": 1})).to_payload()
    assert error_payload["error"] == {"code": -32603, "message": "x", "data": {"a": 1}}
    assert "result" not in error_payload


def test_normalize_rpc_error_with_non_dict_payload():
    err = normalize_rpc_error("boom")
    assert err.code == "RPC_ERROR"
    assert err.message == "rpc failed"
