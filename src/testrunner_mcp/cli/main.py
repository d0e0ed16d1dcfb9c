"""test-runner-mcp CLI."""

import asyncio
from pathlib import Path

import click

from testrunner_mcp.config.constants import PORT_MAX, PORT_MIN
from testrunner_mcp.core.console import print_banner, status
from testrunner_mcp.core.errors import ConfigError, InputValidationError
from testrunner_mcp.core.logging import configure_logging
from testrunner_mcp.validation.arguments import validate_arguments
from testrunner_mcp.validation.paths import FileKind, validate_file_path


@click.group()
@click.version_option(version="0.1.0", prog_name="test-runner-mcp")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """test-runner-mcp - Run RSpec and Cypress tests for AI agents over MCP."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "INFO")


@cli.command("serve")
@click.option("--host", "-H", help="Override bind address")
@click.option("--port", "-p", type=click.IntRange(PORT_MIN, PORT_MAX), help="Override port")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML config file",
)
@click.pass_context
def serve_command(
    ctx: click.Context,
    host: str | None,
    port: int | None,
    config_path: Path | None,
) -> None:
    """Start the MCP server in the foreground.

    Clients connect to the SSE endpoint at /sse.
    """
    from testrunner_mcp.config.loader import load_config
    from testrunner_mcp.server.lifecycle import endpoint_urls, run_server
    from testrunner_mcp.server.routes import _get_version

    try:
        config = load_config(config_path)
    except ConfigError as e:
        raise click.ClickException(e.message) from e

    if host is not None:
        config.server.host = host
    if port is not None:
        config.server.port = port
    if ctx.obj.get("verbose"):
        config.logging.level = "DEBUG"

    configure_logging(config=config.logging)

    print_banner(_get_version(), endpoint_urls(config.server.host, config.server.port))

    try:
        asyncio.run(run_server(config))
    except KeyboardInterrupt:
        click.echo("\nStopped")


@cli.command("check-args")
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
def check_args_command(args: tuple[str, ...]) -> None:
    """Validate an RSpec argument list without running it.

    Put the arguments after -- so flags reach the validator, for example:
    test-runner-mcp check-args -- --tag focus spec/models/user_spec.rb
    """
    try:
        validate_arguments(list(args))
    except InputValidationError as e:
        status(e.message, style="error")
        raise SystemExit(1) from e
    status(f"Accepted {len(args)} argument(s)", style="success")


@cli.command("check-path")
@click.argument("path")
@click.option(
    "--kind",
    type=click.Choice([k.value for k in FileKind]),
    default=FileKind.RSPEC.value,
    show_default=True,
    help="Which runner the file is for",
)
def check_path_command(path: str, kind: str) -> None:
    """Validate a test file path without running it."""
    try:
        validate_file_path(path, FileKind(kind))
    except InputValidationError as e:
        status(e.message, style="error")
        raise SystemExit(1) from e
    status(f"Accepted: {path}", style="success")


if __name__ == "__main__":
    cli()
