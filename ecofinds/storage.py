"""
Collection storage.

Every collection (users, products, cart, purchases) is read and written as a
whole array of JSON objects. Business code reads a snapshot, computes the next
snapshot and writes it back while holding ``storage.lock()``.
"""
import copy
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, List

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from ecofinds.config import COLLECTIONS
from ecofinds.models import Base, Document

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


class Storage:
    """Interface shared by the storage backends."""

    def __init__(self):
        self._lock = threading.RLock()

    def lock(self) -> threading.RLock:
        """Exclusive section for read-compute-write sequences."""
        return self._lock

    def init_collections(self, names: Iterable[str] = COLLECTIONS) -> None:
        raise NotImplementedError

    def get_all(self, name: str) -> List[Record]:
        raise NotImplementedError

    def put_all(self, name: str, records: List[Record]) -> None:
        raise NotImplementedError


class JsonFileStorage(Storage):
    """One ``<name>.json`` array file per collection."""

    def __init__(self, data_dir):
        super().__init__()
        self.data_dir = Path(data_dir)

    def _path(self, name: str) -> Path:
        return self.data_dir / f"{name}.json"

    def init_collections(self, names: Iterable[str] = COLLECTIONS) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        for name in names:
            if not self._path(name).exists():
                self.put_all(name, [])
                logger.info("Created empty collection file %s", self._path(name))

    def get_all(self, name: str) -> List[Record]:
        path = self._path(name)
        try:
            with path.open(encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return []
        except (OSError, ValueError):
            logger.warning("Unreadable collection file %s, treating it as empty", path, exc_info=True)
            return []

        if not isinstance(data, list):
            logger.warning("Collection file %s does not hold an array, treating it as empty", path)
            return []
        return data

    def put_all(self, name: str, records: List[Record]) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        path = self._path(name)

        # write to a sibling temp file, then swap it in
        fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=f".{name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, path)
        except Exception:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise


class SqlStorage(Storage):
    """Collections kept as JSON documents in a SQLAlchemy table."""

    def __init__(self, engine: Engine):
        super().__init__()
        self.engine = engine
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def init_collections(self, names: Iterable[str] = COLLECTIONS) -> None:
        Base.metadata.create_all(bind=self.engine)

    def get_all(self, name: str) -> List[Record]:
        db = self.SessionLocal()
        try:
            rows = (
                db.query(Document)
                .filter(Document.collection == name)
                .order_by(Document.position)
                .all()
            )
            return [copy.deepcopy(row.body) for row in rows]
        finally:
            db.close()

    def put_all(self, name: str, records: List[Record]) -> None:
        db = self.SessionLocal()
        try:
            db.query(Document).filter(Document.collection == name).delete(synchronize_session=False)
            for position, record in enumerate(records):
                db.add(
                    Document(
                        collection=name,
                        position=position,
                        record_id=record.get("id"),
                        body=copy.deepcopy(record),
                    )
                )
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()
