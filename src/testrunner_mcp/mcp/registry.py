"""Tool registry for the MCP server.

Tool modules register their handlers at import time; create_mcp_server()
walks the registry in registration order and wires each entry to FastMCP.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

if TYPE_CHECKING:
    from testrunner_mcp.mcp.context import AppContext

# Handler signature: (ctx, validated_params) -> dict
HandlerFn = Callable[["AppContext", Any], Awaitable[dict[str, Any]]]


@dataclass(frozen=True, slots=True)
class ToolSpec:
    """One registered tool: its MCP name, handler and params model."""

    name: str
    handler: HandlerFn
    description: str
    params_model: type[BaseModel]


class ToolRegistry:
    """Name-unique collection of tool specs."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolSpec] = {}

    def register(
        self,
        name: str,
        description: str,
        params_model: type[BaseModel],
    ) -> Callable[[HandlerFn], HandlerFn]:
        """Decorator to register a tool handler.

        Usage:
            @registry.register("run_rspec", "Run RSpec tests", RunRspecParams)
            async def run_rspec(ctx: AppContext, params: RunRspecParams) -> dict:
                ...

        Raises:
            ValueError: A tool with this name is already registered.
        """
        if name in self._tools:
            raise ValueError(f"Tool already registered: {name}")

        def decorator(fn: HandlerFn) -> HandlerFn:
            self._tools[name] = ToolSpec(
                name=name,
                handler=fn,
                description=description,
                params_model=params_model,
            )
            return fn

        return decorator

    def __iter__(self) -> Iterator[ToolSpec]:
        return iter(tuple(self._tools.values()))

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools


registry = ToolRegistry()
