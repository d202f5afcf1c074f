"""Engine, session factory and request-scoped sessions for the order store"""

import logging
import time

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from . import config

logger = logging.getLogger(__name__)

QUERY_TIMINGS_KEY = "spaceseller_query_started"


def build_engine(url: str) -> Engine:
    """Engine for `url`. SQLite is shared across worker threads and takes no pool sizing."""
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})

    engine = create_engine(
        url,
        pool_pre_ping=True,
        pool_recycle=config.DB_POOL_RECYCLE,
        pool_size=config.DB_POOL_SIZE,
        max_overflow=config.DB_MAX_OVERFLOW,
        pool_timeout=config.DB_POOL_TIMEOUT,
    )
    logger.info(
        f"📊 Order store pool: size={config.DB_POOL_SIZE}, "
        f"overflow={config.DB_MAX_OVERFLOW}, timeout={config.DB_POOL_TIMEOUT}s"
    )
    return engine


def log_slow_queries(engine: Engine, threshold: float) -> None:
    """Warn about statements slower than `threshold` seconds"""

    @event.listens_for(engine, "before_cursor_execute")
    def _started(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault(QUERY_TIMINGS_KEY, []).append(time.perf_counter())

    @event.listens_for(engine, "after_cursor_execute")
    def _finished(conn, cursor, statement, parameters, context, executemany):
        elapsed = time.perf_counter() - conn.info[QUERY_TIMINGS_KEY].pop()
        if elapsed > threshold:
            logger.warning(f"🐌 Slow order store query ({elapsed:.2f}s): {statement[:200]}")


engine = build_engine(config.DATABASE_URL)
if config.DB_LOG_SLOW_QUERIES:
    log_slow_queries(engine, config.DB_SLOW_QUERY_THRESHOLD)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
