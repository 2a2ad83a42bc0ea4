#lxc_scheduler\infrastructure\postgres\database.py

"""SQLAlchemy database setup and session management."""

import logging

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from lxc_scheduler.infrastructure.postgres.config import DatabaseSettings

logger = logging.getLogger(__name__)


# ============================================
# Base for ORM models
# ============================================
Base = declarative_base()


# ============================================
# Engine configuration
# ============================================
def create_db_engine(settings: DatabaseSettings) -> Engine:
    """Create SQLAlchemy engine with connection pooling."""

    engine = create_engine(
        settings.database_url,
        echo=settings.echo_sql,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        pool_timeout=settings.pool_timeout,
        pool_recycle=settings.pool_recycle,
    )
    register_connect_listeners(engine)
    return engine


def register_connect_listeners(engine: Engine) -> None:
    """Per-connection setup for the engine's dialect."""

    @event.listens_for(engine, "connect")
    def on_connect(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        if engine.dialect.name == "postgresql":
            cursor.execute("SET search_path TO public")
        elif engine.dialect.name == "sqlite":
            # ON DELETE CASCADE needs this
            cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def check_connection(engine: Engine) -> None:
    """Round-trip a trivial query; raises on handshake failure."""
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    logger.info("[database] connection ok")


# ============================================
# Session factory function
# ============================================
def get_session_factory(engine: Engine) -> sessionmaker:
    """Get a session factory bound to the given engine."""
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
        expire_on_commit=False
    )


# ============================================
# Database initialization
# ============================================
def init_db(engine: Engine) -> None:
    """Create all tables (for testing only - use Alembic in production)."""
    # models must be imported for their tables to register on Base.metadata
    from lxc_scheduler.infrastructure.postgres import models  # noqa: F401
    Base.metadata.create_all(bind=engine)


def drop_db(engine: Engine) -> None:
    """Drop all tables (for testing only)."""
    Base.metadata.drop_all(bind=engine)
