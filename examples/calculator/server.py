import asyncio
import json

from aiohttp import WSMsgType, web


async def rpc_handler(request: web.Request) -> web.WebSocketResponse:
    """Answer add/subtract calls and report each result back to the client."""
    ws = web.WebSocketResponse()
    await ws.prepare(request)

    async for msg in ws:
        if msg.type != WSMsgType.TEXT:
            continue
        data = json.loads(msg.data)
        if "method" not in data or "id" not in data:
            continue

        a, b = data.get("params") or [0, 0]
        match data["method"]:
            case "add":
                reply = {"jsonrpc": "2.0", "result": a + b, "id": data["id"]}
            case "subtract":
                reply = {"jsonrpc": "2.0", "result": a - b, "id": data["id"]}
            case _:
                reply = {
                    "jsonrpc": "2.0",
                    "error": {"code": -32601, "message": "Method not found"},
                    "id": data["id"],
                }
        await ws.send_str(json.dumps(reply))

        # Server-to-client notification
        await ws.send_str(
            json.dumps({"jsonrpc": "2.0", "method": "computed", "params": reply})
        )

    return ws


async def main() -> None:
    app = web.Application()
    app.router.add_get("/rpc", rpc_handler)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 8080)
    await site.start()

    print("Calculator server listening on ws://127.0.0.1:8080/rpc")

    try:
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()


if __name__ == "__main__":
    asyncio.run(main())
