"""Manual smoke test against a local Redis instance."""

import asyncio
import logging

import redicmd


async def _main() -> None:
    async with redicmd.Redis.from_url("redis://127.0.0.1:6379/15") as client:
        con = await client.get_connection()

        r1 = await con.delete(["smoke:a", "smoke:b"])
        print(r1, type(r1))

        r2 = await con.expire("smoke:a", 30)
        print(r2, type(r2))

        r3 = await con.randomkey()
        print(r3, type(r3))

        r4 = await con.scan(0, pattern="smoke:*", count=100)
        print(r4)

        r5 = [key async for key in con.scan_iter(pattern="*")]
        print(r5)

        r6 = await con.sort("smoke:list", get=["#"], order="DESC", alpha=True)
        print(r6)


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)
    asyncio.run(_main())
