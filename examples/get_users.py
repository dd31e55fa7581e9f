"""List Slack workspace users through the server's stdio transport.

Usage::

    EXAMPLES_SLACK_BOT_TOKEN=xoxb-... EXAMPLES_SLACK_USER_TOKEN=xoxp-... \
        python examples/get_users.py
"""

from __future__ import annotations

import asyncio
import json
import os
import sys

from dotenv import load_dotenv
from mcp import ClientSession, StdioServerParameters
from mcp.client.stdio import stdio_client


def _tokens() -> dict[str, str]:
    load_dotenv()
    bot = os.environ.get("EXAMPLES_SLACK_BOT_TOKEN")
    user = os.environ.get("EXAMPLES_SLACK_USER_TOKEN")
    if not bot or not user:
        raise SystemExit(
            "EXAMPLES_SLACK_BOT_TOKEN and EXAMPLES_SLACK_USER_TOKEN must be set"
        )
    return {"SLACK_BOT_TOKEN": bot, "SLACK_USER_TOKEN": user}


async def main() -> None:
    params = StdioServerParameters(
        command=sys.executable,
        args=["-m", "slack_mcp"],
        env={**os.environ, **_tokens()},
    )
    async with stdio_client(params) as (read_stream, write_stream):
        async with ClientSession(read_stream, write_stream) as session:
            await session.initialize()
            tools = await session.list_tools()
            print("Available tools:", ", ".join(tool.name for tool in tools.tools))

            result = await session.call_tool("slack_get_users", {"limit": 100})
            if result.isError:
                raise SystemExit(result.content[0].text)
            payload = json.loads(result.content[0].text)
            for member in payload.get("members", []):
                print(f"{member.get('id')}\t{member.get('name')}\t{member.get('real_name', '')}")


if __name__ == "__main__":
    asyncio.run(main())
