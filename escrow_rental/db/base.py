from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from escrow_rental.core.config import settings


def normalize_database_url(url: str) -> str:
    """Normalize PostgreSQL URL to use psycopg3 driver. SQLite URLs pass through."""
    if url.startswith("postgresql://") and "+psycopg" not in url:
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def enable_sqlite_savepoints(sqlite_engine: Engine) -> None:
    """
    Let SQLAlchemy emit BEGIN itself on SQLite.

    pysqlite defers BEGIN until the first DML statement, so a SAVEPOINT opened
    before any write would start (and on release, end) the whole transaction.
    """

    @event.listens_for(sqlite_engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(sqlite_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


database_url = normalize_database_url(settings.database_url)

connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
engine = create_engine(database_url, connect_args=connect_args)
if database_url.startswith("sqlite"):
    enable_sqlite_savepoints(engine)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()
