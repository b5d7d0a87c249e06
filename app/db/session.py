from sqlalchemy import create_engine, event
from sqlalchemy.pool import QueuePool, StaticPool
from sqlalchemy.orm import sessionmaker, declarative_base
from app.core.config import settings
import logging
import threading
import contextvars

DATABASE_URL = settings.DATABASE_URL


def _engine_kwargs(url: str) -> dict:
    # SQLite cannot share connections across threads by default and does not
    # take pool sizing arguments; server databases get a tuned QueuePool.
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # one connection for the whole process, otherwise every checkout
            # would see its own empty in-memory database
            kwargs["poolclass"] = StaticPool
        return kwargs
    # pool_pre_ping avoids "MySQL server has gone away" on stale connections
    return {
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_pre_ping": True,
        "pool_recycle": settings.DB_POOL_RECYCLE,
        "poolclass": QueuePool,
    }


engine = create_engine(DATABASE_URL, **_engine_kwargs(DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

# --- Pool monitoring: log connects and checkouts to help diagnose excess connections ---
_pool_logger = logging.getLogger("app.db.pool")
_pool_logger.setLevel(getattr(logging, settings.LOG_LEVEL, logging.INFO))
_connect_count = 0
_checkout_count = 0
_pool_lock = threading.Lock()

# The request middleware puts a fresh one-slot counter here for each request and
# the cursor listener bumps it. A mutable holder is used because route code may
# run in a copied context (threadpool, middleware task) and must still count.
request_db_query_count = contextvars.ContextVar("request_db_query_count", default=None)
_global_db_query_count = 0


@event.listens_for(engine, "connect")
def _on_connect(dbapi_connection, connection_record):
    global _connect_count
    with _pool_lock:
        _connect_count += 1
        cnt = _connect_count
    if cnt % settings.DB_LOG_EVERY_N == 0:
        _pool_logger.info("SQLAlchemy Pool CONNECT events: total opened=%s", cnt)


@event.listens_for(engine, "checkout")
def _on_checkout(dbapi_connection, connection_record, connection_proxy):
    global _checkout_count
    with _pool_lock:
        _checkout_count += 1
        cnt = _checkout_count
    if cnt % settings.DB_LOG_EVERY_N == 0:
        _pool_logger.info("SQLAlchemy Pool CHECKOUT events: total checkouts=%s", cnt)


@event.listens_for(engine, "before_cursor_execute")
def _on_before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    counter = request_db_query_count.get()
    if counter is not None:
        counter[0] += 1
    global _global_db_query_count
    with _pool_lock:
        _global_db_query_count += 1


def get_global_db_queries_total() -> int:
    """Return the total number of DB roundtrips since process start."""
    return _global_db_query_count


def get_db():
    """FastAPI dependency that provides a scoped SQLAlchemy Session.

    Ensures the connection is checked out from the pool and always returned
    after the request, preventing leaks and excessive new connections.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def import_models():
    # Import models here so they are registered on the metadata
    import app.models.user  # noqa: F401
    import app.models.table  # noqa: F401
    import app.models.dish  # noqa: F401
    import app.models.order_item  # noqa: F401
    import app.models.order  # noqa: F401
    import app.models.reservation  # noqa: F401


def create_db():
    import_models()
    Base.metadata.create_all(bind=engine)
