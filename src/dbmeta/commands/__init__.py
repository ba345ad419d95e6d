"""Subcommand modules for dbmeta.

Provides register_commands() which uses deferred imports to keep
``dbmeta --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the standalone commands on the root CLI group."""
    from dbmeta.commands.build import build_db
    from dbmeta.commands.export import export_scripts
    from dbmeta.commands.update import update_db

    cli.add_command(build_db)
    cli.add_command(export_scripts)
    cli.add_command(update_db)
