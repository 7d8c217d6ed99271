# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/conduitmcp-python/LICENSE
# ==============================================================================

from __future__ import annotations

import json

import pytest

from conduitmcp.protocol import (
    ACKNOWLEDGED,
    APPLICATION_ERROR,
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    Invalid,
    Notification,
    Request,
    build_error,
    build_notification,
    build_success,
    classify,
    is_application_error,
    is_error_response,
)


def test_error_codes_match_jsonrpc() -> None:
    assert (PARSE_ERROR, INVALID_REQUEST, METHOD_NOT_FOUND, INVALID_PARAMS, INTERNAL_ERROR) == (
        -32700,
        -32600,
        -32601,
        -32602,
        -32603,
    )
    assert APPLICATION_ERROR == -32000


@pytest.mark.parametrize("request_id", [1, 0, "abc", "", None, -7])
def test_classify_request_preserves_fields(request_id) -> None:
    raw = {"jsonrpc": "2.0", "id": request_id, "method": "tools/call", "params": {"name": "add"}}

    envelope = classify(raw)

    assert envelope == Request(id=request_id, method="tools/call", params={"name": "add"})


def test_classify_request_without_params_defaults_to_empty_object() -> None:
    envelope = classify({"jsonrpc": "2.0", "id": 3, "method": "ping"})
    assert isinstance(envelope, Request)
    assert envelope.params == {}


def test_classify_null_params_become_empty_object() -> None:
    envelope = classify({"jsonrpc": "2.0", "id": 3, "method": "ping", "params": None})
    assert envelope.params == {}


def test_notification_requires_missing_id_key() -> None:
    envelope = classify({"jsonrpc": "2.0", "method": "notifications/initialized"})
    assert isinstance(envelope, Notification)
    assert envelope.method == "notifications/initialized"

    # An explicit null id is still a request.
    assert isinstance(classify({"jsonrpc": "2.0", "method": "ping", "id": None}), Request)


@pytest.mark.parametrize(
    "raw",
    [
        [],
        "ping",
        42,
        None,
        {"id": 1, "method": "ping"},
        {"jsonrpc": "1.0", "id": 1, "method": "ping"},
        {"jsonrpc": "2.0", "id": 1},
        {"jsonrpc": "2.0", "id": 1, "method": 5},
        {"jsonrpc": "2.0", "id": 1, "method": ""},
    ],
)
def test_classify_invalid(raw) -> None:
    assert isinstance(classify(raw), Invalid)


def test_invalid_recovers_usable_id() -> None:
    assert classify({"jsonrpc": "1.0", "id": 9, "method": "ping"}).id == 9
    assert classify({"jsonrpc": "1.0", "id": "req-1", "method": "ping"}).id == "req-1"
    assert classify({"jsonrpc": "1.0", "id": {"nested": 1}, "method": "ping"}).id is None
    assert classify({"jsonrpc": "1.0", "id": True, "method": "ping"}).id is None
    assert classify([1, 2]).id is None


@pytest.mark.parametrize("result", [{}, {"a": [1, 2, {"b": None}]}, [1, "two"], "text", 3.5, None, True])
def test_success_result_survives_json(result) -> None:
    wire = json.loads(json.dumps(build_success(7, result)))

    assert wire == {"jsonrpc": "2.0", "id": 7, "result": result}
    assert "error" not in wire


def test_build_error_omits_data_when_absent() -> None:
    response = build_error("x", METHOD_NOT_FOUND, "Method not found: nope")

    assert response == {"jsonrpc": "2.0", "id": "x", "error": {"code": -32601, "message": "Method not found: nope"}}
    assert "data" not in response["error"]
    assert "result" not in response


def test_build_error_keeps_falsy_data() -> None:
    assert build_error(1, INVALID_PARAMS, "Invalid params", [])["error"]["data"] == []
    assert build_error(1, INVALID_PARAMS, "Invalid params", 0)["error"]["data"] == 0


def test_build_notification() -> None:
    assert build_notification("notifications/initialized") == {
        "jsonrpc": "2.0",
        "method": "notifications/initialized",
    }
    assert build_notification("x", {"a": 1})["params"] == {"a": 1}


def test_predicates() -> None:
    assert is_error_response(build_error(1, INTERNAL_ERROR, "boom"))
    assert not is_error_response(build_success(1, {}))
    assert is_application_error(-32000)
    assert is_application_error(-32099)
    assert not is_application_error(-32100)
    assert not is_application_error(INVALID_PARAMS)


def test_acknowledged_is_a_falsy_singleton() -> None:
    assert not ACKNOWLEDGED
    assert repr(ACKNOWLEDGED) == "ACKNOWLEDGED"
    assert type(ACKNOWLEDGED)() is ACKNOWLEDGED
