"""Process entry point: ``python -m zora_mcp`` or the ``zora-coins-mcp`` script."""

from __future__ import annotations

import asyncio
import logging
import sys

from dotenv import find_dotenv, load_dotenv

from zora_mcp.config import ZoraConfig, load_config
from zora_mcp.context import build_context
from zora_mcp.errors import StartupError
from zora_mcp.logging_setup import configure_logging
from zora_mcp.mcp import Dispatcher, build_registry
from zora_mcp.zora_api import build_platform

logger = logging.getLogger("zora_mcp")


def build_dispatcher(config: ZoraConfig) -> Dispatcher:
    context = build_context(config)
    registry = build_registry()
    return Dispatcher(registry, context, build_platform(config, context))


def _serve(config: ZoraConfig, dispatcher: Dispatcher) -> None:
    if config.transport == "http":
        import uvicorn

        from zora_mcp.server import create_app

        uvicorn.run(create_app(dispatcher), host=config.host, port=config.port, log_config=None)
        return

    from zora_mcp.stdio import run_stdio

    asyncio.run(run_stdio(dispatcher))


def main() -> int:
    # Variables already set in the process environment win over .env entries.
    load_dotenv(find_dotenv(usecwd=True))
    try:
        config = load_config()
    except StartupError as exc:
        # Logging is not configured yet; write straight to stderr.
        print(f"Fatal MCP server error: {exc}", file=sys.stderr)
        return 1

    configure_logging(config)
    try:
        dispatcher = build_dispatcher(config)
        _serve(config, dispatcher)
    except StartupError as exc:
        logger.error("Fatal MCP server error: %s", exc)
        return 1
    except KeyboardInterrupt:
        return 0
    except Exception:
        logger.exception("Fatal MCP server error")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
