"""HTTP routes served next to the MCP transport."""

from __future__ import annotations

import importlib.metadata
import time
from typing import TYPE_CHECKING

from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

if TYPE_CHECKING:
    from testrunner_mcp.config.models import TestRunnerConfig


def _get_version() -> str:
    """Get package version from installed metadata."""
    try:
        return importlib.metadata.version("test-runner-mcp")
    except importlib.metadata.PackageNotFoundError:
        return "dev"


def create_routes(config: TestRunnerConfig) -> list[Route]:
    """Create HTTP routes bound to the loaded configuration."""
    start_time = time.time()
    version = _get_version()

    async def health(request: Request) -> JSONResponse:
        """Health check endpoint for liveness checks."""
        _ = request  # unused
        return JSONResponse(
            {
                "status": "healthy",
                "version": version,
                "uptime_seconds": round(time.time() - start_time, 1),
                "cypress_working_directory": config.cypress.working_directory,
            }
        )

    return [
        Route("/health", health, methods=["GET"]),
    ]
