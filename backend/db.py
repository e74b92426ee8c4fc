from contextlib import contextmanager
from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
import logging
from base import Base

logger = logging.getLogger(__name__)


def is_in_memory_url(database_url: str) -> bool:
    return database_url.startswith("sqlite") and (
        ":memory:" in database_url or database_url in ("sqlite://", "sqlite:///")
    )


def build_engine(database_url: str, **kwargs):
    """
    Creates a SQLAlchemy engine for the given URL.

    SQLite connections are shared across Flask worker threads and get
    foreign key enforcement switched on; in-memory SQLite uses a single
    static connection so every session sees the same database.
    That shared connection also shares its transaction between threads,
    so in-memory URLs are for tests only.

    Args:
        database_url: SQLAlchemy database URL.
        **kwargs: Extra keyword arguments forwarded to create_engine.

    Returns:
        A configured Engine.
    """
    if database_url.startswith("sqlite"):
        connect_args = kwargs.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        connect_args.setdefault("timeout", 30)
        if is_in_memory_url(database_url):
            kwargs.setdefault("poolclass", StaticPool)
        engine = create_engine(database_url, connect_args=connect_args, **kwargs)

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    kwargs.setdefault("pool_pre_ping", True)
    return create_engine(database_url, **kwargs)


def make_session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine) -> None:
    """
    Creates all defined tables. Safe to run repeatedly; existing tables are kept.
    """
    import schema
    Base.metadata.create_all(bind=engine)
    logger.info(f"Database schema ready ({engine.dialect.name})")


@contextmanager
def session_scope(session_factory):
    """
    Provides a database session that is rolled back on error and always closed.

    Yields:
        An active database session.
    """
    db = session_factory()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def database_status(engine):
    """
    Reports connectivity and the kind of database behind the engine.

    Returns:
        A dict with 'connected' (bool) and 'type' (str).
    """
    kinds = {
        "sqlite": "SQLite",
        "postgresql": "PostgreSQL",
        "mysql": "MySQL",
    }
    url = engine.url
    kind = kinds.get(engine.dialect.name, engine.dialect.name)
    if engine.dialect.name == "sqlite" and url.database in (None, "", ":memory:"):
        kind = "SQLite (In-Memory)"
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        connected = True
    except Exception as e:
        logger.error(f"Database connectivity check failed: {e}")
        connected = False
    return {"connected": connected, "type": kind}
