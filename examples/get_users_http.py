"""List Slack workspace users through a running Streamable HTTP server.

Start the server first::

    slack-mcp-server -port 3000

then run ``python examples/get_users_http.py [url]``.
"""

from __future__ import annotations

import asyncio
import json
import sys

from mcp import ClientSession
from mcp.client.streamable_http import streamablehttp_client

DEFAULT_URL = "http://127.0.0.1:3000/mcp"


async def main(url: str) -> None:
    async with streamablehttp_client(url) as (read_stream, write_stream, get_session_id):
        async with ClientSession(read_stream, write_stream) as session:
            await session.initialize()
            print("Session:", get_session_id())

            result = await session.call_tool("slack_get_users", {"limit": 100})
            if result.isError:
                raise SystemExit(result.content[0].text)
            payload = json.loads(result.content[0].text)
            for member in payload.get("members", []):
                print(f"{member.get('id')}\t{member.get('name')}\t{member.get('real_name', '')}")


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else DEFAULT_URL))
