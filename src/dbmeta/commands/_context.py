"""AppContext — shared Click context for all commands.

Created once by the root CLI group and handed to subcommands via
``@click.pass_obj``. Resolves connection URLs, owns the engines it
creates, and centralizes result emission (stdout/stderr + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import click
import structlog

from dbmeta.output.formatters import OutputSettings, format_result
from dbmeta.services.result import ServiceResult

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from dbmeta.config.settings import DbmSettings

log = structlog.get_logger(__name__)


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Engines are created on demand so ``--help`` never loads a database
    driver, and disposed by :meth:`close` when the click context ends.
    """

    def __init__(self, settings: DbmSettings) -> None:
        self.settings = settings
        self._engines: list[Engine] = []

        from dbmeta.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)
        log.debug("settings.loaded", config=str(settings.config_path or "<defaults>"))

        if settings.verbose:
            from dbmeta.services.telemetry import enable_telemetry

            enable_telemetry()

    def connection_url(self, override: str | None, *, op: str) -> str:
        """Return *override* or the configured URL; fail the command if neither."""
        url = override or self.settings.connection.url
        if not url:
            self.fail(
                ServiceResult.failure(
                    op,
                    "NO_CONNECTION",
                    "No connection string given; pass --connection-string "
                    "or set [connection] url in dbmeta.toml",
                )
            )
        return url

    def engine(self, url: str, *, op: str) -> Engine:
        """Create an engine for *url*, disposed when the command finishes."""
        from sqlalchemy.exc import ArgumentError, NoSuchModuleError

        from dbmeta.infrastructure.database.engine import create_db_engine

        try:
            engine = create_db_engine(url)
        except (ArgumentError, NoSuchModuleError, ImportError) as exc:
            self.fail(ServiceResult.failure(op, "INVALID_URL", f"Unusable connection string: {exc}"))
        self._engines.append(engine)
        return engine

    def close(self) -> None:
        while self._engines:
            self._engines.pop().dispose()

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: writes to stdout; warnings go to stderr unless in JSON
          mode (they are part of the payload there).
        * Failure: writes to stderr and exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if not settings.json_output:
            for warning in result.warnings:
                click.echo(f"WARNING: {warning}", err=True)
        if result.ok:
            click.echo(output)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)

    def fail(self, result: ServiceResult) -> NoReturn:
        """Emit a failed result produced by the CLI layer itself and exit."""
        self.emit(result)
        raise SystemExit(1)
