import logging
import time

from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import (
    DATABASE_URL,
    DB_LOG_SLOW_QUERIES,
    DB_MAX_OVERFLOW,
    DB_POOL_RECYCLE,
    DB_POOL_SIZE,
    DB_POOL_TIMEOUT,
    DB_SLOW_QUERY_THRESHOLD,
    DB_STATEMENT_TIMEOUT_MS,
)

logger = logging.getLogger(__name__)


def build_engine(url: str = DATABASE_URL):
    """Create an engine with pool and timeout settings suited to the backend"""
    backend = make_url(url).get_backend_name()

    if backend == "sqlite":
        # SQLite serializes writers itself; the driver timeout bounds lock waits
        return create_engine(url, connect_args={"check_same_thread": False, "timeout": 30})

    connect_args = {}
    if backend == "postgresql" and DB_STATEMENT_TIMEOUT_MS > 0:
        connect_args["options"] = f"-c statement_timeout={DB_STATEMENT_TIMEOUT_MS}"

    return create_engine(
        url,
        pool_pre_ping=True,  # Test connections before using
        pool_recycle=DB_POOL_RECYCLE,
        pool_size=DB_POOL_SIZE,
        max_overflow=DB_MAX_OVERFLOW,
        pool_timeout=DB_POOL_TIMEOUT,  # Surfaces as StoreUnavailable when exhausted
        connect_args=connect_args,
        echo=False,
    )


try:
    engine = build_engine()
    logger.info("✅ Database engine created successfully")
    logger.info(
        f"📊 Connection pool: size={DB_POOL_SIZE}, max_overflow={DB_MAX_OVERFLOW}, timeout={DB_POOL_TIMEOUT}s"
    )
except Exception as e:
    logger.error(f"❌ Failed to create database engine: {e}")
    raise


def enable_slow_query_logging(target_engine, threshold: float = DB_SLOW_QUERY_THRESHOLD):
    """Log statements slower than threshold seconds"""

    @event.listens_for(target_engine, "before_cursor_execute")
    def before_cursor_execute(conn, _cursor, statement, _parameters, context, _executemany):
        conn.info.setdefault("query_start_time", []).append(time.time())

    @event.listens_for(target_engine, "after_cursor_execute")
    def after_cursor_execute(conn, _cursor, statement, _parameters, context, _executemany):
        total = time.time() - conn.info["query_start_time"].pop(-1)
        if total > threshold:
            logger.warning(f"🐌 Slow query ({total:.2f}s): {statement[:200]}...")

    logger.info(f"📊 Slow query logging enabled (threshold: {threshold}s)")


if DB_LOG_SLOW_QUERIES:
    enable_slow_query_logging(engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
