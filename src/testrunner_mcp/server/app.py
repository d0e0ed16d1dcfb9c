"""Starlette application factory."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from starlette.applications import Starlette
from starlette.routing import BaseRoute, Mount

from testrunner_mcp.config.constants import SSE_PATH
from testrunner_mcp.server.routes import create_routes

if TYPE_CHECKING:
    from testrunner_mcp.config.models import TestRunnerConfig


def create_app(config: TestRunnerConfig) -> Starlette:
    """Create the Starlette application with the MCP SSE transport mounted.

    Clients open the event stream at ``/sse`` and post messages to the
    endpoint announced on it.
    """
    from testrunner_mcp.mcp.context import AppContext
    from testrunner_mcp.mcp.server import create_mcp_server

    routes: list[BaseRoute] = list(create_routes(config))

    context = AppContext.create(config)
    mcp = create_mcp_server(context)
    mcp_app = mcp.http_app(path=SSE_PATH, transport="sse")
    routes.append(Mount("/", app=mcp_app))

    @asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        async with mcp_app.lifespan(app):
            yield

    return Starlette(routes=routes, lifespan=lifespan)
