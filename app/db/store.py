"""
Entity Store Module

Collections of records are loaded and saved whole. Two backends are provided:

- ``JsonFileStore``: one ``<collection>.json`` file per collection
- ``SqlStore``: every collection in the ``ledger_records`` table

Both share the same concurrency discipline: callers open a
``store.transaction(*collections)`` which takes one re-entrant lock per
collection (always in sorted order, so two transactions can never deadlock),
loads each collection once, and persists every modified collection when the
block exits without an exception. If the block raises, nothing is written.
"""
import json
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from contextlib import ExitStack, contextmanager
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Type, TypeVar

from sqlalchemy import delete, insert
from sqlmodel import Session, SQLModel, select

from app.core.exceptions import StorageError
from app.core.logging_config import get_logger
from app.models.record import StoredRecord

logger = get_logger("store")

Record = Dict[str, Any]
M = TypeVar("M", bound=SQLModel)


class EntityStore(ABC):
    """Full-collection load/save plus locked units of work."""

    def __init__(self) -> None:
        self._locks: Dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    @abstractmethod
    def load(self, name: str) -> List[Record]:
        """Return every record of a collection, in stored order."""
        ...

    @abstractmethod
    def save(self, name: str, records: List[Record]) -> None:
        """Replace a collection with ``records``."""
        ...

    def save_many(self, collections: Dict[str, List[Record]]) -> None:
        """Persist several collections. Backends that can, do so atomically."""
        for name, records in collections.items():
            self.save(name, records)

    def _lock_for(self, name: str) -> threading.RLock:
        with self._locks_guard:
            lock = self._locks.get(name)
            if lock is None:
                lock = self._locks[name] = threading.RLock()
            return lock

    @contextmanager
    def transaction(self, *names: str) -> Iterator["UnitOfWork"]:
        """Lock, load and (on success) persist the named collections."""
        ordered = sorted(set(names))
        with ExitStack() as stack:
            for name in ordered:
                stack.enter_context(self._lock_for(name))
            uow = UnitOfWork(self, ordered)
            yield uow
            uow.commit()

    @contextmanager
    def snapshot(self, *names: str) -> Iterator["UnitOfWork"]:
        """Consistent read of the named collections. Never writes."""
        ordered = sorted(set(names))
        with ExitStack() as stack:
            for name in ordered:
                stack.enter_context(self._lock_for(name))
            yield UnitOfWork(self, ordered, read_only=True)


class UnitOfWork:
    """
    Working copy of a set of collections.

    Records are handed out as model instances; changes are only visible to
    other requests after ``commit``.
    """

    def __init__(self, store: EntityStore, names: Iterable[str], read_only: bool = False):
        self._store = store
        self._names = set(names)
        self._records: Dict[str, List[Record]] = {}
        self._dirty: set = set()
        self._read_only = read_only

    def _collection(self, name: str) -> List[Record]:
        if name not in self._names:
            raise StorageError(f"Collection '{name}' is not part of this unit of work")
        if name not in self._records:
            self._records[name] = self._store.load(name)
        return self._records[name]

    def _touch(self, name: str) -> None:
        if self._read_only:
            raise StorageError(f"Cannot modify '{name}' in a read-only snapshot")
        self._dirty.add(name)

    def all(self, model: Type[M]) -> List[M]:
        return [model.model_validate(r) for r in self._collection(model.__collection__)]

    def filter(self, model: Type[M], predicate: Callable[[M], bool]) -> List[M]:
        return [item for item in self.all(model) if predicate(item)]

    def get(self, model: Type[M], record_id: Optional[int]) -> Optional[M]:
        if record_id is None:
            return None
        for record in self._collection(model.__collection__):
            if record.get("id") == record_id:
                return model.model_validate(record)
        return None

    def next_id(self, name: str) -> int:
        """max(existing ids, 0) + 1, evaluated under the collection lock."""
        return max((r.get("id") or 0 for r in self._collection(name)), default=0) + 1

    def add(self, obj: M) -> M:
        name = obj.__collection__
        records = self._collection(name)
        obj.id = self.next_id(name)
        records.append(obj.model_dump(mode="json"))
        self._touch(name)
        return obj

    def put(self, obj: M) -> M:
        name = obj.__collection__
        records = self._collection(name)
        for index, record in enumerate(records):
            if record.get("id") == obj.id:
                records[index] = obj.model_dump(mode="json")
                self._touch(name)
                return obj
        raise StorageError(f"{name} record {obj.id} does not exist")

    def remove(self, model: Type[M], record_id: int) -> None:
        self.remove_where(model, lambda item: item.id == record_id)

    def remove_where(self, model: Type[M], predicate: Callable[[M], bool]) -> List[M]:
        name = model.__collection__
        kept: List[Record] = []
        removed: List[M] = []
        for record in self._collection(name):
            item = model.model_validate(record)
            if predicate(item):
                removed.append(item)
            else:
                kept.append(record)
        if removed:
            self._records[name] = kept
            self._touch(name)
        return removed

    def commit(self) -> None:
        if not self._dirty:
            return
        self._store.save_many({name: self._records[name] for name in sorted(self._dirty)})
        self._dirty.clear()


class JsonFileStore(EntityStore):
    """One pretty-printed JSON array per collection under ``data_dir``."""

    def __init__(self, data_dir: str) -> None:
        super().__init__()
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, name: str) -> Path:
        return self.data_dir / f"{name}.json"

    def load(self, name: str) -> List[Record]:
        path = self._path(name)
        if not path.exists():
            return []
        try:
            with path.open(encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, json.JSONDecodeError) as exc:
            logger.error("collection_read_failed", extra={"collection": name, "path": str(path)})
            raise StorageError(f"Could not read collection '{name}'") from exc
        if not isinstance(data, list):
            raise StorageError(f"Collection '{name}' is not a JSON array")
        return data

    def save(self, name: str, records: List[Record]) -> None:
        path = self._path(name)
        # Write to a sibling temp file and rename so readers never see a partial file
        fd, tmp_path = tempfile.mkstemp(dir=self.data_dir, prefix=f".{name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(records, fh, indent=2, ensure_ascii=False)
            os.replace(tmp_path, path)
        except OSError as exc:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            logger.error("collection_write_failed", extra={"collection": name, "path": str(path)})
            raise StorageError(f"Could not write collection '{name}'") from exc


class SqlStore(EntityStore):
    """Collections kept as JSON documents in one relational table."""

    def __init__(self, engine) -> None:
        super().__init__()
        self.engine = engine
        SQLModel.metadata.create_all(engine, tables=[StoredRecord.__table__])

    def load(self, name: str) -> List[Record]:
        with Session(self.engine) as session:
            statement = (
                select(StoredRecord)
                .where(StoredRecord.collection == name)
                .order_by(StoredRecord.record_id)
            )
            return [dict(row.data) for row in session.exec(statement).all()]

    def save(self, name: str, records: List[Record]) -> None:
        self.save_many({name: records})

    def save_many(self, collections: Dict[str, List[Record]]) -> None:
        # One database transaction for every collection of the unit of work
        table = StoredRecord.__table__
        with self.engine.begin() as connection:
            for name, records in collections.items():
                connection.execute(delete(table).where(table.c.collection == name))
                if records:
                    connection.execute(
                        insert(table),
                        [{"collection": name, "record_id": r["id"], "data": r} for r in records],
                    )
