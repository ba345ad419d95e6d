"""Root CLI group for dbmeta with global flags and command registration."""

from __future__ import annotations

import click

from dbmeta import __version__
from dbmeta.commands import register_commands
from dbmeta.commands._base import DbmGroup
from dbmeta.commands._context import AppContext
from dbmeta.config.settings import DbmSettings


@click.group(
    cls=DbmGroup,
    invoke_without_command=True,
    examples="""\
  dbmeta export-scripts --output-dir out
  dbmeta update-db --scripts-dir out
  dbmeta build-db --db-dir db --scripts-dir out""",
)
@click.version_option(version=__version__, prog_name="dbmeta")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """dbmeta — Firebird schema export and transactional script replay."""
    settings = DbmSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    app = AppContext(settings)
    ctx.obj = app
    ctx.call_on_close(app.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
