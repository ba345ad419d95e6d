"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, dbmeta.toml only contains
overrides. A usable config needs nothing but ``[connection] url``.
"""

from __future__ import annotations

from pydantic import BaseModel


class ConnectionConfig(BaseModel):
    """[connection] section."""

    model_config = {"frozen": True}

    url: str | None = None


class ExportConfig(BaseModel):
    """[export] section."""

    model_config = {"frozen": True}

    filename: str = "schema.sql"


class BuildConfig(BaseModel):
    """[build] section: how build-db creates a fresh database."""

    model_config = {"frozen": True}

    driver: str = "firebird+firebird"
    host: str = "localhost"
    port: int = 3050
    user: str = "SYSDBA"
    password: str = "masterkey"
    charset: str = "UTF8"
    page_size: int = 8192
    filename: str = "database_1.fdb"

