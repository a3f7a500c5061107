"""
Recipe Share Database Configuration
SQLAlchemy 2.0 engine, session factory and transaction helpers
"""

from sqlalchemy import create_engine, event, MetaData, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool
from contextlib import contextmanager
import structlog
from typing import Generator, Iterator, Optional

from core.config import settings

logger = structlog.get_logger()

# Database engine
engine: Optional[Engine] = None
SessionLocal: Optional[sessionmaker] = None


class Base(DeclarativeBase):
    """Base class for all database models"""

    metadata = MetaData(
        naming_convention={
            "ix": "ix_%(column_0_label)s",
            "uq": "uq_%(table_name)s_%(column_0_name)s",
            "ck": "ck_%(table_name)s_%(constraint_name)s",
            "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
            "pk": "pk_%(table_name)s"
        }
    )


def build_engine(database_url: str) -> Engine:
    """Create an engine with pool settings suited to the backend"""
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url == "sqlite://":
            kwargs["poolclass"] = StaticPool
        sqlite_engine = create_engine(database_url, echo=settings.DEBUG, **kwargs)

        @event.listens_for(sqlite_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            # SQLite ignores ON DELETE rules unless asked per connection
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return sqlite_engine

    return create_engine(
        database_url,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
        pool_timeout=settings.DATABASE_POOL_TIMEOUT,
        pool_pre_ping=True,
        pool_recycle=3600,  # 1 hour
        echo=settings.DEBUG,
    )


def init_db(database_url: Optional[str] = None, create_tables: bool = False) -> Engine:
    """Initialize database connection and session factory"""
    global engine, SessionLocal

    try:
        engine = build_engine(database_url or settings.DATABASE_URL)
        SessionLocal = sessionmaker(
            bind=engine,
            expire_on_commit=False,
            autoflush=False,
        )

        if create_tables:
            # Import models so every table is registered on the metadata
            import models  # noqa: F401
            Base.metadata.create_all(bind=engine)

        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))

        logger.info("Database connection initialized successfully")
        return engine

    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise


def close_db() -> None:
    """Close database connections"""
    global engine

    if engine:
        engine.dispose()
        logger.info("Database connections closed")


@contextmanager
def get_db_session() -> Iterator[Session]:
    """
    Context manager for database sessions
    Commits on success, rolls back everything on any error
    """
    if SessionLocal is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")

    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        logger.error("Database session error", error=str(e), error_type=type(e).__name__)
        raise
    finally:
        session.close()


def get_db() -> Generator[Session, None, None]:
    """
    Dependency for FastAPI to get database session
    """
    with get_db_session() as session:
        yield session


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    Run a unit of work atomically: commit when the block succeeds,
    roll back every change made in the block when it raises.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


class DatabaseHealthCheck:
    """Database health check utilities"""

    @staticmethod
    def check_connection() -> bool:
        """Check if database connection is healthy"""
        try:
            with get_db_session() as session:
                result = session.execute(text("SELECT 1"))
                return result.scalar() == 1
        except Exception as e:
            logger.error("Database health check failed", error=str(e))
            return False

    @staticmethod
    def get_connection_info() -> dict:
        """Get database connection information"""
        if not engine:
            return {"status": "not_initialized"}

        pool = engine.pool
        return {
            "status": "healthy",
            "pool": pool.status(),
        }


# Export commonly used items
__all__ = [
    "Base",
    "engine",
    "SessionLocal",
    "build_engine",
    "init_db",
    "close_db",
    "get_db_session",
    "get_db",
    "transaction",
    "DatabaseHealthCheck"
]
