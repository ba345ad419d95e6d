"""Command: create a new database and load a script into it."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from dbmeta.commands._base import DbmCommand, directory_option, scripts_dir_option

if TYPE_CHECKING:
    from dbmeta.commands._context import AppContext


@click.command(
    "build-db",
    cls=DbmCommand,
    examples="""\
  dbmeta build-db --db-dir /var/lib/firebird/app --scripts-dir scripts
  dbmeta -c prod.toml build-db --db-dir db --scripts-dir scripts""",
)
@directory_option("--db-dir", "Directory in which the database file is created.")
@scripts_dir_option
@click.pass_obj
def build_db(app: AppContext, db_dir: str, scripts_dir: str) -> None:
    """Create an empty database ([build] settings) and apply a script to it."""
    from dbmeta.services.build import BuildService

    svc = BuildService(app.settings.build)
    app.emit(svc.build_database(Path(db_dir), Path(scripts_dir)))
