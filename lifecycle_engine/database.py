"""
Database setup using SQLAlchemy.

PostgreSQL in production, SQLite for local development. Connection pooling
is tuned for short-lived serverless functions when running on PostgreSQL.
"""

import logging
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from lifecycle_engine.config import settings

logger = logging.getLogger(__name__)


def configure_sqlite(sqlite_engine: Engine) -> Engine:
    """Let SQLAlchemy own BEGIN on pysqlite so SAVEPOINTs behave.

    The award ledger relies on begin_nested() to turn a unique-constraint
    conflict into a no-op.
    """
    @event.listens_for(sqlite_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(sqlite_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return sqlite_engine


# ---------------------------------------------------------------------------
# Build engine
# ---------------------------------------------------------------------------

if settings.is_postgres:
    logger.info("Using PostgreSQL backend")
    engine = create_engine(
        settings.DATABASE_URL,
        pool_pre_ping=True,       # Auto-reconnect stale connections
        pool_size=3,              # Lower for serverless (short-lived functions)
        max_overflow=5,
        pool_timeout=10,
        pool_recycle=120,
        echo=settings.DEBUG,
    )
else:
    logger.info(f"Using SQLite backend: {settings.DATABASE_URL}")
    engine = configure_sqlite(create_engine(
        settings.DATABASE_URL,
        connect_args={"check_same_thread": False},
        echo=settings.DEBUG,
    ))


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Dependency that provides a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create all tables if they don't exist."""
    from lifecycle_engine import models  # noqa: F401  (registers tables on Base)
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created / verified.")
