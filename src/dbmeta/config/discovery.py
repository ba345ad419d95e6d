"""Locating and reading ``dbmeta.toml``.

Lookup order: the ``DBMETA_CONFIG`` environment variable, then a walk up
from the start directory (like git looking for ``.git``). An explicit
``--config`` path bypasses discovery altogether.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

import click

CONFIG_FILENAME = "dbmeta.toml"
CONFIG_ENV_VAR = "DBMETA_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Return the config file that applies to *start* (default: cwd), if any.

    A ``DBMETA_CONFIG`` pointing at a missing file yields None rather
    than falling back to discovery.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        candidate = Path(env_path)
        return candidate if candidate.is_file() else None

    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def read_toml(path: Path) -> dict[str, Any]:
    """Parse *path*; a syntax error becomes a ClickException naming the file."""
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise click.ClickException(msg) from exc
