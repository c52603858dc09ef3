"""Error types for JSON-RPC message correlation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Kinds of errors reported on the general error channel."""

    PARSE_ERROR = "parse_error"
    INVALID_MESSAGE = "invalid_message"
    UNKNOWN_RESPONSE_ID = "unknown_response_id"
    UNKNOWN_METHOD = "unknown_method"
    HANDLER_FAILED = "handler_failed"
    SEND_FAILED = "send_failed"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class RpcError(Exception):
    """Protocol-level error with code, message, and the offending data."""

    code: ErrorCode
    message: str
    data: Any | None = None

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"

    @staticmethod
    def parse_error(message: str, data: Any | None = None) -> RpcError:
        """Create a PARSE_ERROR error."""
        return RpcError(ErrorCode.PARSE_ERROR, message, data)

    @staticmethod
    def invalid_message(message: str, data: Any | None = None) -> RpcError:
        """Create an INVALID_MESSAGE error."""
        return RpcError(ErrorCode.INVALID_MESSAGE, message, data)

    @staticmethod
    def unknown_response_id(message: str, data: Any | None = None) -> RpcError:
        """Create an UNKNOWN_RESPONSE_ID error."""
        return RpcError(ErrorCode.UNKNOWN_RESPONSE_ID, message, data)

    @staticmethod
    def unknown_method(message: str, data: Any | None = None) -> RpcError:
        """Create an UNKNOWN_METHOD error."""
        return RpcError(ErrorCode.UNKNOWN_METHOD, message, data)

    @staticmethod
    def handler_failed(message: str, data: Any | None = None) -> RpcError:
        """Create a HANDLER_FAILED error."""
        return RpcError(ErrorCode.HANDLER_FAILED, message, data)

    @staticmethod
    def send_failed(message: str, data: Any | None = None) -> RpcError:
        """Create a SEND_FAILED error."""
        return RpcError(ErrorCode.SEND_FAILED, message, data)


class ResponseError(Exception):
    """Raised from a call's future when the peer answers with an error response.

    Attributes:
        response: The full error response object as received
        error: The ``error`` member of the response
        code: JSON-RPC error code, when ``error`` is an error object
        message: Error message, when ``error`` is an error object
    """

    def __init__(self, response: dict[str, Any]) -> None:
        self.response = response
        self.error = response.get("error")
        if isinstance(self.error, dict):
            self.code = self.error.get("code")
            self.message = self.error.get("message")
        else:
            self.code = None
            self.message = None
        super().__init__(self.message if self.message is not None else self.error)

    def __str__(self) -> str:
        if self.code is not None:
            return f"[{self.code}] {self.message}"
        return str(self.error)
