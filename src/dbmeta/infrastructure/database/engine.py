"""Engine setup and database creation.

Targets are addressed by SQLAlchemy URL. Firebird is reached through the
``firebird+firebird`` dialect (sqlalchemy-firebird on top of
firebird-driver). SQLite URLs are accepted as well; they back the test
suite and local dry runs.

SQLAlchemy Core (not ORM) is used: dbmeta only reads catalog rows and
replays raw statements.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import URL, Engine, make_url

if TYPE_CHECKING:
    from dbmeta.config.models import BuildConfig


def create_db_engine(url: str | URL) -> Engine:
    """Create an engine for *url*.

    For SQLite, pysqlite's implicit transaction handling is switched off
    and ``BEGIN`` is emitted explicitly, so DDL takes part in the
    transaction and a rollback really undoes ``CREATE TABLE``.
    """
    engine = create_engine(url, echo=False)

    if engine.dialect.name == "sqlite":

        @event.listens_for(engine, "connect")
        def _disable_pysqlite_transactions(dbapi_conn: Any, _: Any) -> None:
            dbapi_conn.isolation_level = None

        @event.listens_for(engine, "begin")
        def _emit_begin(conn: Any) -> None:
            conn.exec_driver_sql("BEGIN")

    return engine


def build_url(config: BuildConfig, db_path: Path) -> URL:
    """Return the URL of a database file created from *config*."""
    if config.driver.startswith("sqlite"):
        return URL.create(config.driver, database=str(db_path))
    return URL.create(
        config.driver,
        username=config.user,
        password=config.password,
        host=config.host,
        port=config.port,
        database=str(db_path),
        query={"charset": config.charset},
    )


def create_database(url: str | URL, *, page_size: int = 8192, overwrite: bool = True) -> None:
    """Create an empty database at *url*.

    Firebird databases are created through firebird-driver, in the
    ``host/port:path`` DSN form. SQLite files appear on first connect, so
    only the parent directory is prepared (and a stale file removed when
    *overwrite* is set).
    """
    url = make_url(url)
    if url.get_backend_name() == "sqlite":
        if url.database and url.database != ":memory:":
            path = Path(url.database)
            path.parent.mkdir(parents=True, exist_ok=True)
            if overwrite:
                path.unlink(missing_ok=True)
        return

    from firebird.driver import create_database as fb_create_database

    host = url.host or "localhost"
    dsn = f"{host}/{url.port}:{url.database}" if url.port else f"{host}:{url.database}"
    conn = fb_create_database(
        dsn,
        user=url.username,
        password=url.password,
        charset=url.query.get("charset", "UTF8"),
        page_size=page_size,
        overwrite=overwrite,
    )
    conn.close()
