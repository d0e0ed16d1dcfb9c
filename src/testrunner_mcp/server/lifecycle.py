"""Server lifecycle management."""

from __future__ import annotations

import asyncio
import signal
from typing import TYPE_CHECKING

import structlog
import uvicorn

from testrunner_mcp.config.constants import MESSAGE_PATH, SSE_PATH

if TYPE_CHECKING:
    from testrunner_mcp.config.models import TestRunnerConfig

logger = structlog.get_logger()

# Seconds to wait for open SSE streams after the first shutdown signal
FORCE_EXIT_SEC = 5.0


def endpoint_urls(host: str, port: int) -> dict[str, str]:
    """URLs a client needs, keyed by endpoint name."""
    base_url = f"http://{host}:{port}"
    return {
        "sse": f"{base_url}{SSE_PATH}",
        "messages": f"{base_url}{MESSAGE_PATH}",
        "health": f"{base_url}/health",
    }


async def run_server(config: TestRunnerConfig) -> None:
    """Serve the MCP endpoint until a shutdown signal arrives."""
    from testrunner_mcp.server.app import create_app

    app = create_app(config)

    uvicorn_config = uvicorn.Config(
        app,
        host=config.server.host,
        port=config.server.port,
        log_level="warning",  # Use structlog instead
        ws="none",  # SSE only
    )
    server = uvicorn.Server(uvicorn_config)

    # Setup signal handlers with force exit on second signal
    loop = asyncio.get_running_loop()
    shutdown_count = 0
    force_exit_task: asyncio.Task[None] | None = None

    async def force_exit_after_timeout() -> None:
        """Force exit if graceful shutdown takes too long."""
        await asyncio.sleep(FORCE_EXIT_SEC)
        logger.info("forcing_exit_after_timeout")
        server.force_exit = True

    def signal_handler() -> None:
        nonlocal shutdown_count, force_exit_task
        shutdown_count += 1
        logger.info("shutdown_signal_received", count=shutdown_count)
        server.should_exit = True
        if shutdown_count == 1:
            force_exit_task = loop.create_task(force_exit_after_timeout())
        else:
            server.force_exit = True
            if force_exit_task:
                force_exit_task.cancel()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, signal_handler)

    logger.info("server_starting", host=config.server.host, port=config.server.port)
    for name, url in endpoint_urls(config.server.host, config.server.port).items():
        logger.info("endpoint", name=name, url=url)

    try:
        await server.serve()
    finally:
        if force_exit_task:
            force_exit_task.cancel()
        logger.info("server stopped")
