"""
User record storage backends.

Three interchangeable backends expose the same keyed operations:

- ``SQLiteUserBackend``: ``<data_dir>/app.db`` through SQLAlchemy.
- ``JsonFileUserBackend``: ``<data_dir>/users.json``, whole-file
  read-modify-write per operation. Two processes writing at the same time
  can lose one writer's change (last write wins for the whole file).
- ``MemoryUserBackend``: a dict, lost on restart. Never raises.

``select_backend`` picks one from settings and falls back to memory when a
file backend cannot initialize.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from dataclasses import replace
from pathlib import Path
from typing import Any, Optional

from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from app.config import Settings
from app.core.exceptions import StorageError
from app.database import create_session_factory, create_sqlite_engine, init_db
from app.models import User
from app.models.user import UserRecord

logger = logging.getLogger(__name__)

JSON_FILENAME = "users.json"


class UserBackend(ABC):
    """Keyed lookup and upsert of user records."""

    name: str = "base"

    @abstractmethod
    def get_by_id(self, user_id: str) -> Optional[UserRecord]:
        """Return a copy of the stored record or None."""

    @abstractmethod
    def create(self, user_id: str) -> UserRecord:
        """Insert a default record unless one exists; return the stored record."""

    @abstractmethod
    def upsert(self, user_id: str, is_subscribed: bool, subscription_id: Optional[str]) -> None:
        """Create or overwrite the subscription fields of a record."""

    def get_or_create(self, user_id: str) -> UserRecord:
        record = self.get_by_id(user_id)
        if record is None:
            record = self.create(user_id)
        return record


class MemoryUserBackend(UserBackend):
    name = "memory"

    def __init__(self) -> None:
        self._users: dict[str, UserRecord] = {}
        self._lock = threading.Lock()

    def get_by_id(self, user_id: str) -> Optional[UserRecord]:
        with self._lock:
            record = self._users.get(user_id)
            return replace(record) if record else None

    def create(self, user_id: str) -> UserRecord:
        with self._lock:
            record = self._users.setdefault(user_id, UserRecord(id=user_id))
            return replace(record)

    def upsert(self, user_id: str, is_subscribed: bool, subscription_id: Optional[str]) -> None:
        with self._lock:
            self._users[user_id] = UserRecord(
                id=user_id,
                is_subscribed=is_subscribed,
                subscription_id=subscription_id,
            )

    def __len__(self) -> int:
        return len(self._users)


class JsonFileUserBackend(UserBackend):
    name = "json"

    def __init__(self, data_dir: Path) -> None:
        self.path = data_dir / JSON_FILENAME
        self._lock = threading.Lock()
        data_dir.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            self._write({"users": {}})

    def _read(self) -> dict[str, Any]:
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                document = json.load(handle)
        except FileNotFoundError:
            return {"users": {}}
        except (OSError, json.JSONDecodeError) as exc:
            raise StorageError(f"Could not read {self.path}: {exc}") from exc
        if not isinstance(document, dict) or not isinstance(document.get("users"), dict):
            raise StorageError(f"Malformed user document in {self.path}")
        return document

    def _write(self, document: dict[str, Any]) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=str(self.path.parent), prefix=".users.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(document, handle, indent=2)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise StorageError(f"Could not write {self.path}: {exc}") from exc

    def get_by_id(self, user_id: str) -> Optional[UserRecord]:
        with self._lock:
            data = self._read()["users"].get(user_id)
            return UserRecord.from_dict(data) if data else None

    def create(self, user_id: str) -> UserRecord:
        with self._lock:
            document = self._read()
            users = document["users"]
            if user_id not in users:
                users[user_id] = UserRecord(id=user_id).to_dict()
                self._write(document)
            return UserRecord.from_dict(users[user_id])

    def upsert(self, user_id: str, is_subscribed: bool, subscription_id: Optional[str]) -> None:
        with self._lock:
            document = self._read()
            document["users"][user_id] = UserRecord(
                id=user_id,
                is_subscribed=is_subscribed,
                subscription_id=subscription_id,
            ).to_dict()
            self._write(document)


class SQLiteUserBackend(UserBackend):
    name = "sqlite"

    def __init__(self, data_dir: Path) -> None:
        self.engine = create_sqlite_engine(data_dir)
        init_db(self.engine)
        self.SessionLocal = create_session_factory(self.engine)

    @staticmethod
    def _to_record(row: User) -> UserRecord:
        return UserRecord(
            id=row.id,
            is_subscribed=bool(row.is_subscribed),
            subscription_id=row.subscription_id,
        )

    def get_by_id(self, user_id: str) -> Optional[UserRecord]:
        with self.SessionLocal() as db:
            row = db.get(User, user_id)
            return self._to_record(row) if row is not None else None

    def create(self, user_id: str) -> UserRecord:
        stmt = sqlite_insert(User).values(id=user_id, is_subscribed=False)
        stmt = stmt.on_conflict_do_nothing(index_elements=[User.id])
        with self.SessionLocal() as db:
            db.execute(stmt)
            db.commit()
            row = db.get(User, user_id)
            if row is None:
                raise StorageError(f"User {user_id!r} missing after insert")
            return self._to_record(row)

    def upsert(self, user_id: str, is_subscribed: bool, subscription_id: Optional[str]) -> None:
        stmt = sqlite_insert(User).values(
            id=user_id,
            is_subscribed=is_subscribed,
            subscription_id=subscription_id,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[User.id],
            set_={
                "is_subscribed": stmt.excluded.is_subscribed,
                "subscription_id": stmt.excluded.subscription_id,
            },
        )
        with self.SessionLocal() as db:
            db.execute(stmt)
            db.commit()


def select_backend(settings: Settings) -> UserBackend:
    """Pick the storage backend for this process."""
    choice = settings.storage_backend
    if choice == "auto":
        choice = "memory" if settings.serverless else "sqlite"
        if settings.serverless:
            logger.info("Restricted filesystem detected; using in-memory user store")

    if choice == "memory":
        return MemoryUserBackend()

    try:
        if choice == "json":
            backend: UserBackend = JsonFileUserBackend(settings.data_dir)
        else:
            backend = SQLiteUserBackend(settings.data_dir)
    except Exception as exc:
        logger.error(
            "%s user store initialization failed, falling back to memory: %s",
            choice,
            exc,
        )
        return MemoryUserBackend()

    logger.info("Using %s user store in %s", backend.name, settings.data_dir)
    return backend
