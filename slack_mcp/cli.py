from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

import uvicorn

from slack_mcp.config import ConfigurationError, Settings, load_environment
from slack_mcp.http import StreamableHttpSessions, create_app
from slack_mcp.logging import JsonLogWriter
from slack_mcp.server import create_server
from slack_mcp.service.catalog import ToolCatalog
from slack_mcp.service.dispatcher import Dispatcher
from slack_mcp.service.gateway import SlackGateway
from slack_mcp.stdio import run_stdio
from slack_mcp.validation import SchemaRegistry

_UVICORN_LOG_LEVELS = {
    "DEBUG": "debug",
    "INFO": "info",
    "WARN": "warning",
    "ERROR": "error",
}

_LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
}

_EPILOG = """\
examples:
  slack-mcp-server                  # Start with stdio transport (default)
  slack-mcp-server -port 3000       # Start with Streamable HTTP transport on port 3000
"""

LOGGER = logging.getLogger(__name__)


def _port(raw: str) -> int:
    try:
        value = int(raw, 10)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid port number: {raw}") from None
    if not 0 < value <= 65535:
        raise argparse.ArgumentTypeError(f"Invalid port number: {raw}")
    return value


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="slack-mcp-server",
        description="Expose Slack operations as MCP tools",
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-port",
        "--port",
        type=_port,
        default=None,
        help="Start the server with Streamable HTTP transport on the specified port",
    )
    parser.add_argument("--host", default="127.0.0.1", help="HTTP host")
    parser.add_argument(
        "--json-response",
        action="store_true",
        help="Answer HTTP requests with plain JSON instead of SSE streams",
    )
    parser.add_argument(
        "--log-level",
        choices=list(_LOG_LEVELS),
        default="INFO",
        help="Logging level",
    )
    parser.add_argument(
        "--log-dir",
        default=None,
        help="Directory for structured tool invocation logs",
    )
    return parser.parse_args(argv)


async def _run_server(settings: Settings, *, log_level: str) -> None:
    registry = SchemaRegistry()
    catalog = ToolCatalog.load(registry)
    gateway = SlackGateway.from_tokens(
        bot_token=settings.bot_token, user_token=settings.user_token
    )
    log_writer = JsonLogWriter.in_directory(settings.log_dir) if settings.log_dir else None

    def dispatcher_for(session_id: str | None) -> Dispatcher:
        return Dispatcher(
            gateway=gateway,
            registry=registry,
            catalog=catalog,
            log_writer=log_writer,
            transport=settings.transport,
            session_id=session_id,
        )

    try:
        if settings.port is None:
            await run_stdio(create_server(dispatcher_for(None)))
            return

        sessions = StreamableHttpSessions(
            lambda session_id: create_server(dispatcher_for(session_id)),
            json_response=settings.json_response,
        )
        config = uvicorn.Config(
            create_app(sessions),
            host=settings.host,
            port=settings.port,
            log_level=_UVICORN_LOG_LEVELS[log_level],
            access_log=False,
        )
        LOGGER.info(
            "Slack MCP Server running on Streamable HTTP at http://%s:%s/mcp",
            settings.host,
            settings.port,
        )
        await uvicorn.Server(config).serve()
    finally:
        await gateway.aclose()
        if log_writer is not None:
            log_writer.close()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=_LOG_LEVELS[args.log_level], stream=sys.stderr)
    load_environment()
    try:
        settings = Settings.from_env(
            port=args.port,
            host=args.host,
            json_response=args.json_response,
            log_dir=Path(args.log_dir) if args.log_dir else None,
        )
    except ConfigurationError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    try:
        asyncio.run(_run_server(settings, log_level=args.log_level))
    except KeyboardInterrupt:
        return 0
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
