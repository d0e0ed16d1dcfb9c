"""Configuration loading with pydantic-settings.

Supports loading configuration from multiple sources with precedence:
1. Direct kwargs (highest priority)
2. Environment variables (TESTRUNNER__SECTION__KEY)
3. YAML config file: the explicit path, else ./test-runner-mcp.yaml,
   else ~/.config/test-runner-mcp/config.yaml
4. Built-in defaults (lowest priority)
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from testrunner_mcp.config.models import (
    CypressConfig,
    LoggingConfig,
    RspecConfig,
    ServerConfig,
    TestRunnerConfig,
)
from testrunner_mcp.core.errors import ConfigError

GLOBAL_CONFIG_PATH = Path("~/.config/test-runner-mcp/config.yaml").expanduser()
LOCAL_CONFIG_NAME = "test-runner-mcp.yaml"


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open() as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(path), "top-level value must be a mapping")
    return data


def _resolve_config_path(config_path: Path | None, cwd: Path) -> Path | None:
    if config_path is not None:
        if not config_path.exists():
            raise ConfigError.parse_error(str(config_path), "file does not exist")
        return config_path
    local = cwd / LOCAL_CONFIG_NAME
    if local.exists():
        return local
    if GLOBAL_CONFIG_PATH.exists():
        return GLOBAL_CONFIG_PATH
    return None


class _YamlSource(PydanticBaseSettingsSource):
    """Settings source that reads from pre-loaded YAML config."""

    def __init__(self, settings_cls: type[BaseSettings], yaml_config: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._yaml_config = yaml_config

    def get_field_value(
        self,
        field: Any,  # noqa: ARG002
        field_name: str,
    ) -> tuple[Any, str, bool]:
        val = self._yaml_config.get(field_name)
        return val, field_name, val is not None

    def __call__(self) -> dict[str, Any]:
        return self._yaml_config


def _make_settings_class(yaml_config: dict[str, Any]) -> type[BaseSettings]:
    """Create a Settings class with instance-based YAML source (thread-safe)."""

    class TestRunnerSettings(BaseSettings):
        """Root config. Env vars: TESTRUNNER__LOGGING__LEVEL, TESTRUNNER__SERVER__PORT, etc."""

        model_config = SettingsConfigDict(
            env_prefix="TESTRUNNER__",
            env_nested_delimiter="__",
            case_sensitive=False,
        )

        logging: LoggingConfig = LoggingConfig()
        server: ServerConfig = ServerConfig()
        rspec: RspecConfig = RspecConfig()
        cypress: CypressConfig = CypressConfig()

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
            file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            # Precedence (first wins): init kwargs > env vars > yaml file
            return (init_settings, env_settings, _YamlSource(settings_cls, yaml_config))

    return TestRunnerSettings


def load_config(
    config_path: Path | None = None,
    *,
    cwd: Path | None = None,
    **kwargs: Any,
) -> TestRunnerConfig:
    """Load config: defaults < yaml < env vars < kwargs.

    Args:
        config_path: Explicit YAML file. Must exist when given.
        cwd: Directory searched for test-runner-mcp.yaml.
             Defaults to current working directory.
        **kwargs: Override values (highest precedence).

    Returns:
        Fully resolved configuration object.

    Raises:
        ConfigError: On invalid YAML syntax or validation errors.
    """
    resolved = _resolve_config_path(config_path, cwd or Path.cwd())
    yaml_config = _load_yaml(resolved) if resolved else {}

    settings_cls = _make_settings_class(yaml_config)
    try:
        settings = settings_cls(**kwargs)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"])
        raise ConfigError.invalid_value(field, err.get("input"), err["msg"]) from e

    return TestRunnerConfig.model_validate(settings.model_dump())
