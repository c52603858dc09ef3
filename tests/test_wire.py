"""Tests for the JSON-RPC wire format."""

import json

import pytest

from wsrpc.error import ErrorCode, RpcError
from wsrpc.wire import (
    WireErrorResponse,
    WireNotification,
    WireRequest,
    WireResponse,
    decode_frame,
    parse_message,
    serialize_message,
)


class TestDecodeFrame:
    """Tests for decode_frame."""

    def test_single_object(self) -> None:
        """Test a single object becomes a one-element list."""
        assert decode_frame('{"jsonrpc":"2.0","result":1,"id":0}') == [
            {"jsonrpc": "2.0", "result": 1, "id": 0}
        ]

    def test_batch(self) -> None:
        """Test a batch keeps its element order."""
        frame = '[{"result":1,"id":0},{"method":"x"},42]'
        assert decode_frame(frame) == [{"result": 1, "id": 0}, {"method": "x"}, 42]

    def test_bytes(self) -> None:
        """Test frames given as bytes are decoded."""
        assert decode_frame(b'{"result":null,"id":1}') == [{"result": None, "id": 1}]

    def test_invalid_json(self) -> None:
        """Test undecodable text raises a parse error carrying the frame."""
        with pytest.raises(RpcError) as exc_info:
            decode_frame("{not json")

        assert exc_info.value.code == ErrorCode.PARSE_ERROR
        assert exc_info.value.data == "{not json"


class TestParseMessage:
    """Tests for parse_message classification."""

    def test_response(self) -> None:
        """Test an object with result is a response."""
        msg = parse_message({"jsonrpc": "2.0", "result": [1, 2], "id": 4})
        assert msg == WireResponse([1, 2], 4)

    def test_null_result_is_response(self) -> None:
        """Test a null result still counts as a result member."""
        assert parse_message({"result": None, "id": 1}) == WireResponse(None, 1)

    def test_result_takes_precedence(self) -> None:
        """Test result wins over method and error."""
        msg = parse_message({"result": 1, "method": "m", "error": "e", "id": 2})
        assert isinstance(msg, WireResponse)

    def test_request(self) -> None:
        """Test an object with method and id is a request."""
        msg = parse_message({"jsonrpc": "2.0", "method": "sum", "params": [1], "id": 7})
        assert msg == WireRequest("sum", [1], 7)

    def test_request_with_null_id(self) -> None:
        """Test an explicit null id still makes a request."""
        msg = parse_message({"method": "sum", "id": None})
        assert isinstance(msg, WireRequest)
        assert msg.id is None

    def test_notification(self) -> None:
        """Test an object with method and no id is a notification."""
        msg = parse_message({"jsonrpc": "2.0", "method": "log", "params": {"a": 1}})
        assert msg == WireNotification("log", {"a": 1})

    def test_method_takes_precedence_over_error(self) -> None:
        """Test method wins over error."""
        assert isinstance(parse_message({"method": "m", "error": 1}), WireNotification)

    def test_error_response(self) -> None:
        """Test an object with error is an error response keeping the raw object."""
        obj = {"jsonrpc": "2.0", "error": {"code": 1, "message": "no"}, "id": 3}
        msg = parse_message(obj)
        assert isinstance(msg, WireErrorResponse)
        assert msg.error == {"code": 1, "message": "no"}
        assert msg.id == 3
        assert msg.raw is obj

    def test_error_response_without_id(self) -> None:
        """Test an error response may omit its id."""
        msg = parse_message({"error": "bad"})
        assert isinstance(msg, WireErrorResponse)
        assert msg.id is None

    @pytest.mark.parametrize(
        "obj", [{}, {"jsonrpc": "2.0", "id": 1}, 42, "text", None, [1, 2]]
    )
    def test_malformed(self, obj) -> None:
        """Test objects with no known shape are invalid messages."""
        with pytest.raises(RpcError) as exc_info:
            parse_message(obj)

        assert exc_info.value.code == ErrorCode.INVALID_MESSAGE
        assert exc_info.value.data == obj

    def test_non_string_method(self) -> None:
        """Test a method member that is not a string is malformed."""
        with pytest.raises(RpcError) as exc_info:
            parse_message({"method": 5, "id": 1})

        assert exc_info.value.code == ErrorCode.INVALID_MESSAGE


class TestSerializeMessage:
    """Tests for serialize_message."""

    def test_request(self) -> None:
        """Test request envelope."""
        text = serialize_message(WireRequest("greet", {"name": "Alice"}, 0))
        assert json.loads(text) == {
            "jsonrpc": "2.0",
            "method": "greet",
            "params": {"name": "Alice"},
            "id": 0,
        }

    def test_request_without_params(self) -> None:
        """Test params are omitted when None."""
        assert json.loads(serialize_message(WireRequest("ping", None, 1))) == {
            "jsonrpc": "2.0",
            "method": "ping",
            "id": 1,
        }

    def test_notification_has_no_id(self) -> None:
        """Test notification envelope has no id member."""
        obj = json.loads(serialize_message(WireNotification("log", ["x"])))
        assert obj == {"jsonrpc": "2.0", "method": "log", "params": ["x"]}

    def test_response(self) -> None:
        """Test response envelope."""
        obj = json.loads(serialize_message(WireResponse({"ok": True}, 5)))
        assert obj == {"jsonrpc": "2.0", "result": {"ok": True}, "id": 5}

    def test_error_response(self) -> None:
        """Test error response envelope."""
        obj = json.loads(serialize_message(WireErrorResponse({"code": -32603}, 2)))
        assert obj == {"jsonrpc": "2.0", "error": {"code": -32603}, "id": 2}

    def test_compact(self) -> None:
        """Test output has no insignificant whitespace."""
        assert " " not in serialize_message(WireResponse([1, 2], 0))
