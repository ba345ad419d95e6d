"""BuildService: create an empty database and load a script into it.

Pipeline: READ SCRIPT → CREATE → APPLY. The apply step is the same
all-or-nothing replay as ``update-db``; if it fails the freshly created
(empty) database file is left in place.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from sqlalchemy.exc import ArgumentError, NoSuchModuleError

from dbmeta.infrastructure.database.engine import build_url, create_database, create_db_engine
from dbmeta.services.result import ServiceResult
from dbmeta.services.telemetry import trace_span, traced
from dbmeta.services.update import UpdateService, load_statements

if TYPE_CHECKING:
    from sqlalchemy.engine import URL

    from dbmeta.config.models import BuildConfig

log = structlog.get_logger(__name__)

DatabaseCreator = Callable[..., None]


class BuildService:
    """Create a database from :class:`BuildConfig` and apply a script to it."""

    def __init__(self, config: BuildConfig, *, creator: DatabaseCreator | None = None) -> None:
        self._config = config
        self._create = creator or create_database

    def database_url(self, db_dir: Path) -> URL:
        return build_url(self._config, db_dir.resolve() / self._config.filename)

    @traced
    def build_database(self, db_dir: Path, scripts_dir: Path) -> ServiceResult:
        """Create the database in *db_dir* and apply the script from *scripts_dir*.

        The script is read and split first, so a missing or unreadable
        script never replaces an existing database file.
        """
        op = "build_db"
        loaded = load_statements(scripts_dir, op)
        if isinstance(loaded, ServiceResult):
            return loaded
        script_path, statements = loaded

        url = self.database_url(db_dir)
        target = url.render_as_string(hide_password=True)

        with trace_span("create"):
            try:
                db_dir.mkdir(parents=True, exist_ok=True)
                self._create(url, page_size=self._config.page_size, overwrite=True)
            except Exception as exc:
                log.error("build.create_failed", target=target, error=str(exc))
                return ServiceResult.failure(
                    op,
                    "CREATE_FAILED",
                    f"Error during database file creation: {exc}",
                    detail={"database": target},
                )
        log.info("build.created", target=target)

        try:
            engine = create_db_engine(url)
        except (ArgumentError, NoSuchModuleError, ImportError) as exc:
            return ServiceResult.failure(
                op,
                "INVALID_URL",
                f"Unusable [build] driver {self._config.driver!r}: {exc}",
                detail={"database": target},
            )
        try:
            result = UpdateService(engine).apply_script(script_path, statements, op=op)
        finally:
            engine.dispose()

        if not result.ok:
            return result
        return result.model_copy(update={"data": {"database": target, **result.data}})
