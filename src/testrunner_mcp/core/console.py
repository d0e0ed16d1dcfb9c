"""User-facing console output for CLI commands.

Everything goes to stderr so stdout stays free for piping.
"""

from __future__ import annotations

from rich.console import Console

# Console for output
_console = Console(stderr=True)

# Style prefixes
_STYLES = {
    "success": "[green]✓[/green] ",
    "error": "[red]✗[/red] ",
    "warning": "[yellow]![/yellow] ",
    "info": "  ",
    "none": "",
}


def get_console() -> Console:
    """Get the shared Rich console instance."""
    return _console


def status(message: str, *, style: str = "info", indent: int = 0) -> None:
    """Print a styled status message to stderr."""
    prefix = _STYLES.get(style, "")
    padding = " " * indent
    _console.print(f"{padding}{prefix}{message}", highlight=False)


def print_banner(version: str, endpoints: dict[str, str]) -> None:
    """Print the startup banner with endpoint URLs."""
    banner_width = 64
    rule_line = "─" * banner_width

    _console.print()
    _console.print(rule_line, style="dim cyan", highlight=False)
    _console.print(
        f"test-runner-mcp v{version} · Ready".center(banner_width),
        style="bold cyan",
        highlight=False,
    )
    _console.print(rule_line, style="dim cyan", highlight=False)
    _console.print()

    for name, url in endpoints.items():
        label = f"{name.upper()} Endpoint:"
        _console.print(f"  {label:<20}{url}", highlight=False)

    _console.print()
