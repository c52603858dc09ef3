# ruff: noqa: S311

import asyncio
import logging
import random
from typing import Any

from wsrpc import ClientConfig, ResponseError, RpcTarget, connect


class Display(RpcTarget):
    """Methods the server may call on this client."""

    def computed(self, params: Any) -> None:
        print(f"server says: {params}")


async def main() -> None:
    logging.basicConfig(level=logging.INFO)
    config = ClientConfig(url="ws://localhost:8080/rpc", heartbeat=30.0)

    async with connect(config, Display()) as client:
        client.on_error = lambda error: print(f"protocol error: {error}")

        for _ in range(5):
            x = random.randint(0, 100)
            y = random.randint(0, 100)
            result = await client.call("add", [x, y])
            print(f"{x} + {y} = {result}")
            await asyncio.sleep(1)

        try:
            await client.call("divide", [1, 0])
        except ResponseError as e:
            print(f"divide failed: {e}")


if __name__ == "__main__":
    asyncio.run(main())
