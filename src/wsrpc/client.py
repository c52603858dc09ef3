"""JSON-RPC 2.0 client over a bidirectional message transport.

The client correlates responses with the calls that caused them, dispatches
calls from the peer to local methods, and reports malformed or unexpected
traffic through listener callbacks instead of raising.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import AsyncIterator, Callable, Mapping
from contextlib import asynccontextmanager, suppress
from dataclasses import dataclass
from functools import partial
from types import MappingProxyType
from typing import Any, Self

from wsrpc.error import ResponseError, RpcError
from wsrpc.ids import IdAllocator
from wsrpc.tables import PendingCallTable
from wsrpc.transports import create_transport
from wsrpc.types import MethodTable, RpcTarget, Transport
from wsrpc.wire import (
    INTERNAL_ERROR,
    WireErrorResponse,
    WireMessage,
    WireNotification,
    WireRequest,
    WireResponse,
    decode_frame,
    parse_message,
    serialize_message,
)

logger = logging.getLogger(__name__)

ErrorListener = Callable[[RpcError], Any]
ResponseErrorListener = Callable[[dict[str, Any]], Any]


@dataclass
class ClientConfig:
    """Configuration for connecting a client over WebSocket."""

    url: str
    heartbeat: float | None = None


def _freeze_methods(
    methods: MethodTable | RpcTarget | None,
) -> Mapping[str, Callable[[Any], Any]]:
    if methods is None:
        table: dict[str, Callable[[Any], Any]] = {}
    elif isinstance(methods, RpcTarget):
        table = methods.method_table()
    elif isinstance(methods, Mapping):
        table = dict(methods)
    else:
        msg = "Methods must be a mapping of callables or an RpcTarget"
        raise TypeError(msg)

    for name, handler in table.items():
        if not isinstance(name, str):
            msg = f"Method name must be a string, got {name!r}"
            raise TypeError(msg)
        if not callable(handler):
            msg = f"Method {name} is not callable"
            raise TypeError(msg)
    return MappingProxyType(table)


def _check_listener(callback: Any) -> None:
    if not callable(callback):
        msg = "Callback is not a function."
        raise TypeError(msg)


def _set_result(future: asyncio.Future[Any], result: Any) -> None:
    if not future.done():
        future.set_result(result)


def _set_exception(future: asyncio.Future[Any], error: BaseException) -> None:
    if not future.done():
        future.set_exception(error)


class JsonRpcClient:
    """JSON-RPC client bound to one transport.

    Outbound calls get ids from a counter starting at 0 and wait in the
    pending-call table until a response with the same id arrives. Inbound
    requests and notifications are dispatched to the local method table.

    All methods must be used from the event loop that owns the transport.

    Example:
        ```python
        async with JsonRpcClient(transport, {"ping": lambda params: "pong"}) as rpc:
            rpc.on_error = print
            total = await rpc.call("add", [1, 2])
            rpc.notify("log", {"line": "done"})
        ```
    """

    def __init__(
        self,
        transport: Transport,
        methods: MethodTable | RpcTarget | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            transport: Connected transport carrying text frames
            methods: Local methods the peer may call, keyed by name

        Raises:
            TypeError: If transport is not a Transport or methods is invalid
        """
        if not isinstance(transport, Transport):
            msg = "Argument is not a message transport."
            raise TypeError(msg)

        self.methods = _freeze_methods(methods)
        self._transport = transport
        self._ids = IdAllocator()
        self._pending = PendingCallTable()
        self._on_error: ErrorListener | None = None
        self._on_response_error: ResponseErrorListener | None = None
        self._send_tasks: set[asyncio.Task[Any]] = set()
        self._handler_tasks: set[asyncio.Future[Any]] = set()
        self._listener_task: asyncio.Task[None] | None = None

    async def __aenter__(self) -> Self:
        """Async context manager entry - starts the receive loop."""
        self._listener_task = asyncio.create_task(self.listen())
        return self

    async def __aexit__(self, *args: object) -> None:
        """Async context manager exit."""
        await self.close()

    # Listeners

    @property
    def on_error(self) -> ErrorListener | None:
        """Listener for parse errors, unknown ids and methods, bad messages."""
        return self._on_error

    @on_error.setter
    def on_error(self, callback: ErrorListener) -> None:
        _check_listener(callback)
        self._on_error = callback

    @on_error.deleter
    def on_error(self) -> None:
        self._on_error = None

    @property
    def on_response_error(self) -> ResponseErrorListener | None:
        """Listener receiving every error response the peer sends."""
        return self._on_response_error

    @on_response_error.setter
    def on_response_error(self, callback: ResponseErrorListener) -> None:
        _check_listener(callback)
        self._on_response_error = callback

    @on_response_error.deleter
    def on_response_error(self) -> None:
        self._on_response_error = None

    @property
    def pending_count(self) -> int:
        """Number of calls still waiting for a response."""
        return len(self._pending)

    # Outbound

    def call(self, method: str, params: Any = None) -> asyncio.Future[Any]:
        """Call a remote method.

        The call is registered before its frame is handed to the transport,
        so a fast response always finds it. Cancelling the returned future
        abandons the call; a late response is then reported as an unknown id.

        Args:
            method: Method name to call
            params: Method parameters, omitted from the frame when None

        Returns:
            Future resolving to the response ``result``, or failing with
            ResponseError when the peer answers with an error response

        Raises:
            TypeError: If params cannot be serialized
        """
        loop = asyncio.get_running_loop()
        call_id = self._ids.allocate()
        data = serialize_message(WireRequest(method, params, call_id))

        future: asyncio.Future[Any] = loop.create_future()
        self._pending.add(
            call_id, partial(_set_result, future), partial(_set_exception, future)
        )
        future.add_done_callback(partial(self._forget_cancelled, call_id))

        logger.debug("Calling %s with id=%s", method, call_id)
        self._send_data(data, call_id)
        return future

    def notify(self, method: str, params: Any = None) -> None:
        """Call a remote method as a notification, without a response.

        Args:
            method: Method name to call
            params: Method parameters, omitted from the frame when None
        """
        logger.debug("Notifying %s", method)
        self._send(WireNotification(method, params))

    def _forget_cancelled(self, call_id: int, future: asyncio.Future[Any]) -> None:
        if future.cancelled() and self._pending.discard(call_id):
            logger.debug("Call id=%s abandoned by caller", call_id)

    def _send(self, message: WireMessage) -> None:
        self._send_data(serialize_message(message))

    def _send_data(self, data: str, call_id: int | None = None) -> None:
        logger.debug("Sending: %s", data[:200])
        task = asyncio.get_running_loop().create_task(self._transport.send(data))
        self._send_tasks.add(task)
        task.add_done_callback(partial(self._send_done, call_id, data))

    def _send_done(
        self, call_id: int | None, data: str, task: asyncio.Task[Any]
    ) -> None:
        self._send_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is None:
            return
        # A failed call is reported through its own future
        if call_id is not None and self._pending.reject(call_id, error):
            return
        self._report(RpcError.send_failed(f"Failed to send message: {error}", data))

    # Inbound

    async def listen(self) -> None:
        """Feed frames from the transport into ``handle_message``.

        Returns when the transport reports that the connection is closed.
        Calls still pending at that point are rejected with the
        ConnectionError, since no response can arrive for them anymore.
        Any other receive failure is logged and the loop keeps going.
        """
        logger.debug("JSON-RPC listener started")
        while True:
            try:
                data = await self._transport.receive()
            except ConnectionError as e:
                logger.debug("JSON-RPC listener stopped: %s", e)
                self._abort(e)
                return
            except Exception:
                logger.exception("Error in JSON-RPC listener")
                # Avoid a tight loop on persistent errors
                await asyncio.sleep(0.1)
                continue
            logger.debug("Received: %s", data[:200])
            self.handle_message(data)

    def handle_message(self, data: str | bytes) -> None:
        """Process one inbound frame.

        A frame that is not valid JSON is reported and dropped whole. The
        elements of a batch are processed in order, each on its own, so a
        bad element does not stop the ones after it.

        Args:
            data: Raw frame from the transport, text or UTF-8 bytes
        """
        try:
            objects = decode_frame(data)
        except RpcError as error:
            self._report(error)
            return

        for obj in objects:
            try:
                self._process_message(parse_message(obj))
            except RpcError as error:
                self._report(error)

    def _process_message(self, message: WireMessage) -> None:
        match message:
            case WireResponse(result=result, id=call_id):
                self._pending.resolve(call_id, result)

            case WireRequest() | WireNotification():
                self._invoke(message)

            case WireErrorResponse(id=call_id, raw=raw):
                self._notify_response_error(raw)
                self._pending.reject(call_id, ResponseError(raw))

    def _invoke(self, message: WireRequest | WireNotification) -> None:
        handler = self.methods.get(message.method)
        if handler is None:
            msg = (
                "Server called method on client that does not exist: "
                f"{message.method}."
            )
            raise RpcError.unknown_method(msg, message.to_json())

        try:
            result = handler(message.params)
        except Exception as e:
            self._handler_failed(message, e)
            return

        if inspect.isawaitable(result):
            future = asyncio.ensure_future(result)
            self._handler_tasks.add(future)
            future.add_done_callback(partial(self._handler_done, message))
            return

        self._respond(message, result)

    def _handler_done(
        self, message: WireRequest | WireNotification, future: asyncio.Future[Any]
    ) -> None:
        self._handler_tasks.discard(future)
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            self._handler_failed(message, error)
            return
        self._respond(message, future.result())

    def _respond(self, message: WireRequest | WireNotification, result: Any) -> None:
        if not isinstance(message, WireRequest):
            return
        try:
            self._send(WireResponse(result, message.id))
        except (TypeError, ValueError) as e:
            self._handler_failed(message, e)

    def _handler_failed(
        self, message: WireRequest | WireNotification, error: BaseException
    ) -> None:
        logger.error("Local method %s failed", message.method, exc_info=error)
        msg = f"Local method {message.method} raised: {error!r}"
        self._report(RpcError.handler_failed(msg, message.to_json()))
        if isinstance(message, WireRequest):
            error_obj = {
                "code": INTERNAL_ERROR,
                "message": str(error) or type(error).__name__,
            }
            self._send(WireErrorResponse(error_obj, message.id))

    # Error reporting

    def _report(self, error: RpcError) -> None:
        listener = self._on_error
        if listener is None:
            logger.warning("Dropped RPC error, no on_error listener: %s", error)
            return
        self._call_listener(listener, error)

    def _notify_response_error(self, response: dict[str, Any]) -> None:
        listener = self._on_response_error
        if listener is None:
            logger.debug("Error response without listener: %s", response)
            return
        self._call_listener(listener, response)

    def _call_listener(self, listener: Callable[[Any], Any], arg: Any) -> None:
        try:
            listener(arg)
        except Exception:
            logger.exception("Error listener raised")

    # Teardown

    async def close(self) -> None:
        """Stop listening, fail pending calls, and close the transport.

        Frames already handed to the transport are flushed first; local
        handlers still running are cancelled.
        """
        if self._listener_task and not self._listener_task.done():
            self._listener_task.cancel()
            with suppress(asyncio.CancelledError):
                await self._listener_task
        self._listener_task = None

        for future in list(self._handler_tasks):
            future.cancel()
        if self._send_tasks:
            await asyncio.gather(*self._send_tasks, return_exceptions=True)

        self._abort(ConnectionError("Client closed"))
        await self._transport.close()

    def _abort(self, error: ConnectionError) -> None:
        pending = self._pending.ids()
        if pending:
            logger.debug("Rejecting pending calls %s: %s", pending, error)
        self._pending.reject_all(error)


@asynccontextmanager
async def connect(
    config: ClientConfig, methods: MethodTable | RpcTarget | None = None
) -> AsyncIterator[JsonRpcClient]:
    """Open a WebSocket and yield a listening client bound to it.

    Args:
        config: Connection settings
        methods: Local methods the peer may call

    Yields:
        A client whose receive loop is running
    """
    transport = create_transport(config.url, heartbeat=config.heartbeat)
    async with transport, JsonRpcClient(transport, methods) as client:
        yield client
