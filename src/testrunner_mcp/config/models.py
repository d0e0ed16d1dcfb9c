"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (TESTRUNNER__SECTION__KEY)
3. YAML config file (--config, ./test-runner-mcp.yaml or the global file)
4. Built-in defaults (this file)

Environment Variable Format:
    TESTRUNNER__<SECTION>__<KEY>=<VALUE>

Examples:
    TESTRUNNER__LOGGING__LEVEL=DEBUG
    TESTRUNNER__SERVER__PORT=8080
    TESTRUNNER__RSPEC__COMMAND="bundle exec rspec"
    TESTRUNNER__CYPRESS__WORKING_DIRECTORY=cypress
"""

import shlex
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from testrunner_mcp.config.constants import (
    CURRENT_DIRECTORY,
    DEFAULT_HOST,
    DEFAULT_PORT,
    PORT_MAX,
    PORT_MIN,
)

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        TESTRUNNER__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG includes full command lines and tracebacks.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class ServerConfig(BaseModel):
    """Server configuration.

    Env vars:
        TESTRUNNER__SERVER__HOST: Bind address (default: 127.0.0.1)
        TESTRUNNER__SERVER__PORT: Port number (default: 30301)
    """

    host: str = Field(
        default=DEFAULT_HOST,
        description="Bind address. Use 0.0.0.0 for network access (security risk).",
    )
    port: int = Field(
        default=DEFAULT_PORT,
        description="Server port.",
    )

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not (PORT_MIN <= v <= PORT_MAX):
            raise ValueError(f"Port must be {PORT_MIN}-{PORT_MAX}, got {v}")
        return v


def _validate_command(v: str) -> str:
    if not shlex.split(v):
        raise ValueError("Command must not be empty")
    return v


class RspecConfig(BaseModel):
    """RSpec runner configuration.

    The command is split into a program and its fixed leading arguments; the
    validated spec file (or raw argument list) is appended as separate argv
    entries. No shell is involved.

    Env vars:
        TESTRUNNER__RSPEC__COMMAND: Base command line
    """

    command: str = Field(
        default="docker compose exec -T test bundle exec rspec --format p",
        description="Base RSpec command. Trusted: configured by the operator, never by callers.",
    )

    @field_validator("command")
    @classmethod
    def validate_command(cls, v: str) -> str:
        return _validate_command(v)


class CypressConfig(BaseModel):
    """Cypress runner configuration.

    Env vars:
        TESTRUNNER__CYPRESS__COMMAND: Base command line, the spec path is appended
        TESTRUNNER__CYPRESS__WORKING_DIRECTORY: Directory the command runs in
        TESTRUNNER__CYPRESS__SHELL: Run the command through /bin/sh
    """

    command: str = Field(
        default="npx cypress run --quiet --reporter json --spec",
        description="Base Cypress command. The reporter must emit Mocha-style JSON on stdout.",
    )
    working_directory: str = Field(
        default=CURRENT_DIRECTORY,
        description="Directory holding the Cypress project, relative to the server's "
        "working directory. Caller paths that start with it are rewritten to be "
        "relative to it. It is the subprocess cwd only when shell is false; with "
        "shell: true the command runs in the server's directory and must cd itself.",
    )
    shell: bool = Field(
        default=False,
        description="Interpolate the quoted spec path into the command and run it "
        "through the shell. Only needed when the command is a pipeline. "
        "RISK: widens the injection surface compared to argv execution.",
    )

    @field_validator("command")
    @classmethod
    def validate_command(cls, v: str) -> str:
        return _validate_command(v)

    @field_validator("working_directory")
    @classmethod
    def validate_working_directory(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Working directory must not be empty (use '.')")
        return v


class TestRunnerConfig(BaseModel):
    """Root configuration for the test runner server.

    All settings can be configured via:
    1. Environment variables: TESTRUNNER__SECTION__KEY
    2. YAML config files
    3. Direct kwargs to load_config()
    """

    __test__ = False

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    rspec: RspecConfig = Field(default_factory=RspecConfig)
    cypress: CypressConfig = Field(default_factory=CypressConfig)
