"""BaseService — shared foundation for services bound to one database."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


class BaseService:
    """Base for services operating on an existing database.

    The engine is created (and disposed) by the caller; services only
    borrow connections from it.

    Usage::

        class ExportService(BaseService):
            def export_scripts(self, output_dir: Path) -> ServiceResult:
                source = CatalogSource(self._engine)
                ...
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @property
    def target(self) -> str:
        """Connection URL with the password masked, for messages and logs."""
        return self._engine.url.render_as_string(hide_password=True)
