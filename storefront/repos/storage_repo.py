# storefront/repos/storage_repo.py
import json
from typing import Any, Callable, Protocol

from sqlalchemy.orm import Session

from storefront.data.models.storage_entry import StorageEntryModel
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class Storage(Protocol):
    """
    Durable client-local key-value store.
    Values are opaque JSON-compatible data, there is no TTL at this layer.
    """

    def read(self, key: str) -> Any | None: ...

    def write(self, key: str, value: Any) -> None: ...

    def remove(self, key: str) -> None: ...


def dumps(value: Any) -> str:
    return json.dumps(value)


def loads(key: str, raw: str | None) -> Any | None:
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.warning(f"Stored value under {key!r} is not valid JSON, ignoring it: {e}")
        return None


class StorageRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_entry(self, key: str) -> StorageEntryModel | None:
        return self.db.get(StorageEntryModel, key)

    def upsert_entry(self, key: str, value: str) -> StorageEntryModel:
        entry = self.get_entry(key)
        if entry:
            entry.value = value
        else:
            entry = StorageEntryModel(key=key, value=value)
            self.db.add(entry)
        self.db.commit()
        return entry

    def delete_entry(self, key: str) -> bool:
        entry = self.get_entry(key)
        if not entry:
            return False
        self.db.delete(entry)
        self.db.commit()
        return True


class SqlStorage:
    """Storage backed by the storage_entries table, one db session per call."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def read(self, key: str) -> Any | None:
        with self.session_factory() as db:
            entry = StorageRepo(db).get_entry(key)
            return loads(key, entry.value if entry else None)

    def write(self, key: str, value: Any) -> None:
        raw = dumps(value)
        with self.session_factory() as db:
            StorageRepo(db).upsert_entry(key, raw)

    def remove(self, key: str) -> None:
        with self.session_factory() as db:
            StorageRepo(db).delete_entry(key)
