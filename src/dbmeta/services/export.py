"""ExportService: render the database schema as a DDL script file.

Pipeline: READ CATALOG → RENDER → WRITE. The whole script is rendered in
memory before anything touches the output directory, so a catalog
failure never leaves a partial file behind.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from dbmeta.domain.ddl import render_schema
from dbmeta.domain.model import load_schema
from dbmeta.infrastructure.database.catalog import CatalogSource
from dbmeta.infrastructure.filesystem import write_script
from dbmeta.services.base import BaseService
from dbmeta.services.result import ServiceResult
from dbmeta.services.telemetry import trace_span, traced

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from dbmeta.domain.model import MetadataSource

log = structlog.get_logger(__name__)

DEFAULT_FILENAME = "schema.sql"


class ExportService(BaseService):
    """Export domains, tables and procedures of a live database."""

    def __init__(self, engine: Engine, *, source: MetadataSource | None = None) -> None:
        super().__init__(engine)
        self._source = source or CatalogSource(engine)

    @traced
    def export_scripts(self, output_dir: Path, *, filename: str = DEFAULT_FILENAME) -> ServiceResult:
        """Write ``<output_dir>/<filename>`` with the full schema script."""
        op = "export_scripts"

        with trace_span("read_catalog"):
            try:
                schema = load_schema(self._source)
            except Exception as exc:
                log.error("export.source_failed", target=self.target, error=str(exc))
                return ServiceResult.failure(
                    op,
                    "SOURCE_FAILURE",
                    f"Failed to read metadata from {self.target}: {exc}",
                )

        with trace_span("render"):
            script = render_schema(schema)

        output_file = output_dir.resolve() / filename
        try:
            write_script(output_file, script)
        except OSError as exc:
            return ServiceResult.failure(
                op,
                "WRITE_FAILED",
                f"Could not write {output_file}: {exc}",
                detail={"output_file": str(output_file)},
            )

        log.info("export.written", output_file=str(output_file))
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "output_file": str(output_file),
                "domain_count": len(schema.domains),
                "table_count": len(schema.tables),
                "procedure_count": len(schema.procedures),
            },
        )
