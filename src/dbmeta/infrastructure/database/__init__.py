"""Database access via SQLAlchemy Core: engines, catalog reads, statement execution."""

from dbmeta.infrastructure.database.catalog import CatalogSource
from dbmeta.infrastructure.database.engine import build_url, create_database, create_db_engine
from dbmeta.infrastructure.database.executor import SqlAlchemyExecutor, StatementExecutor

__all__ = [
    "CatalogSource",
    "SqlAlchemyExecutor",
    "StatementExecutor",
    "build_url",
    "create_database",
    "create_db_engine",
]
