"""Configuration loading with pydantic-settings.

Supports loading configuration from multiple sources with precedence:
1. Direct kwargs (highest priority)
2. Environment variables (APIDIFF__SECTION__KEY)
3. Comparison config file (JSON or YAML, given explicitly)
4. Global config (~/.config/apidiff/config.yaml)
5. Built-in defaults (lowest priority)

Config files may use the camelCase keys of existing JSON configurations
(``breakingChangeRules``, ``outputFormat``...) or snake_case keys.
"""

import json
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from apidiff.config.models import (
    BreakingChangeRules,
    ComparisonConfig,
    ExclusionConfig,
    FilterConfig,
    LoggingConfig,
    MappingConfig,
    OutputFormat,
)
from apidiff.core.errors import ConfigError

GLOBAL_CONFIG_PATH = Path("~/.config/apidiff/config.yaml").expanduser()

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open() as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(path), "top level must be a mapping")
    return data


def _load_config_file(path: Path) -> dict[str, Any]:
    """Read a comparison config file. ``.json`` is parsed as JSON, anything else as YAML."""
    if not path.is_file():
        raise ConfigError.file_not_found(str(path))
    if path.suffix.lower() != ".json":
        return _load_yaml(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8-sig")) or {}
    except json.JSONDecodeError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(path), "top level must be an object")
    return data


def _snake_keys(data: dict[str, Any]) -> dict[str, Any]:
    """Normalize top-level section keys; nested sections resolve their own aliases."""
    return {_CAMEL_BOUNDARY.sub("_", key).lower(): value for key, value in data.items()}


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class _YamlSource(PydanticBaseSettingsSource):
    """Settings source that reads from pre-loaded file config."""

    def __init__(self, settings_cls: type[BaseSettings], file_config: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._file_config = file_config

    def get_field_value(
        self,
        field: Any,  # noqa: ARG002
        field_name: str,
    ) -> tuple[Any, str, bool]:
        val = self._file_config.get(field_name)
        return val, field_name, val is not None

    def __call__(self) -> dict[str, Any]:
        return self._file_config


def _make_settings_class(file_config: dict[str, Any]) -> type[BaseSettings]:
    """Create a Settings class with instance-based file source (thread-safe)."""

    class ApiDiffSettings(BaseSettings):
        """Root config. Env vars: APIDIFF__LOGGING__LEVEL, APIDIFF__OUTPUT_FORMAT, etc."""

        model_config = SettingsConfigDict(
            env_prefix="APIDIFF__",
            env_nested_delimiter="__",
            case_sensitive=False,
        )

        filters: FilterConfig = FilterConfig()
        mappings: MappingConfig = MappingConfig()
        exclusions: ExclusionConfig = ExclusionConfig()
        breaking_change_rules: BreakingChangeRules = BreakingChangeRules()
        output_format: OutputFormat = "console"
        output_path: str | None = None
        fail_on_breaking_changes: bool = True
        logging: LoggingConfig = LoggingConfig()

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
            file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            # Precedence (first wins): init kwargs > env vars > config files
            return (init_settings, env_settings, _YamlSource(settings_cls, file_config))

    return ApiDiffSettings


def load_config(config_path: Path | None = None, **kwargs: Any) -> ComparisonConfig:
    """Load config: defaults < global config < config file < env vars < kwargs.

    Args:
        config_path: JSON or YAML comparison config. When omitted only the
                     global config, env vars and kwargs apply.
        **kwargs: Override values (highest precedence).

    Returns:
        Fully resolved configuration object.

    Raises:
        ConfigError: On a missing file, invalid syntax or validation errors.
    """
    file_config = _snake_keys(_load_yaml(GLOBAL_CONFIG_PATH))
    if config_path is not None:
        file_config = _deep_merge(file_config, _snake_keys(_load_config_file(config_path)))

    settings_cls = _make_settings_class(file_config)
    try:
        settings = settings_cls(**kwargs)
        return ComparisonConfig.model_validate(settings.model_dump())
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"])
        raise ConfigError.invalid_value(field, err.get("input"), err["msg"]) from e
