from sqlmodel import create_engine
from app.core.config import settings
from app.db.store import EntityStore, JsonFileStore, SqlStore

# Global instances, created on first use
_engine = None
_store = None


def get_engine():
    global _engine

    if _engine is not None:
        return _engine

    db_url = settings.DATABASE_URL

    # SQLite fix for multithreading
    connect_args = {"check_same_thread": False} if db_url.startswith("sqlite") else {}

    _engine = create_engine(db_url, connect_args=connect_args, pool_pre_ping=True)
    return _engine


def get_store() -> EntityStore:
    """Return the process-wide entity store for the configured backend."""
    global _store

    if _store is not None:
        return _store

    if settings.STORAGE_BACKEND == "sql":
        _store = SqlStore(get_engine())
    else:
        _store = JsonFileStore(settings.DATA_DIR)
    return _store
