"""DbmSettings: CLI flags, env vars and ``dbmeta.toml`` in one object.

Priority chain (highest to lowest):
  1. Init kwargs  (CLI flags passed by Click)
  2. Env vars     (``DBMETA_*``, nested sections via ``__``)
  3. TOML file    (``dbmeta.toml``, see :mod:`dbmeta.config.discovery`)
  4. Code defaults baked into the section models
"""

from __future__ import annotations

from contextvars import ContextVar
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from dbmeta.config.discovery import find_config, read_toml
from dbmeta.config.models import BuildConfig, ConnectionConfig, ExportConfig

# TOML file for the DbmSettings instance under construction; pydantic-settings
# builds sources from a classmethod, so it cannot be passed as an argument.
_toml_path: ContextVar[Path | None] = ContextVar("dbmeta_toml_path", default=None)


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Settings source backed by a parsed ``dbmeta.toml`` (empty without one)."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data = read_toml(toml_path) if toml_path else {}

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


class DbmSettings(BaseSettings):
    """Frozen settings for one CLI invocation.

    Attributes:
        config_path: The TOML file actually loaded, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "DBMETA_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    connection: ConnectionConfig = Field(default_factory=ConnectionConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    build: BuildConfig = Field(default_factory=BuildConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (init_settings, env_settings, TomlSettingsSource(settings_cls, _toml_path.get()))

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        cwd: Path | None = None,
        **cli_flags: Any,
    ) -> DbmSettings:
        """Build settings for a CLI run.

        An explicit *config_path* that does not exist is ignored (defaults
        apply); otherwise ``dbmeta.toml`` is discovered by walking up from *cwd*
        (default: the current directory).
        """
        if config_path:
            explicit = Path(config_path)
            toml_path = explicit if explicit.is_file() else None
        else:
            toml_path = find_config(cwd)

        token = _toml_path.set(toml_path)
        try:
            return cls(config_path=toml_path, **cli_flags)
        finally:
            _toml_path.reset(token)
