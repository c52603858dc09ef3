"""wsrpc - JSON-RPC 2.0 over WebSocket

This module provides a JSON-RPC 2.0 client that correlates asynchronous
responses with outbound calls and lets the peer invoke local methods over
the same connection.
"""

from wsrpc.client import ClientConfig, JsonRpcClient, connect
from wsrpc.error import ErrorCode, ResponseError, RpcError
from wsrpc.ids import IdAllocator
from wsrpc.tables import PendingCall, PendingCallTable
from wsrpc.transports import WebSocketTransport, create_transport
from wsrpc.types import RpcTarget, Transport

__version__ = "0.1.0"

__all__ = [
    # Client
    "JsonRpcClient",
    "ClientConfig",
    "connect",
    # Transport
    "Transport",
    "WebSocketTransport",
    "create_transport",
    # Core types
    "RpcTarget",
    "IdAllocator",
    "PendingCall",
    "PendingCallTable",
    # Errors
    "RpcError",
    "ResponseError",
    "ErrorCode",
]
