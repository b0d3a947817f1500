"""
SQLite-backed key/value storage via SQLAlchemy. One row per storage key.

Several contexts (even separate processes) may point at the same file; each
operation runs in its own short-lived session, so the last committed write
for a key wins.
"""
from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, List, Optional

from sqlalchemy import BigInteger, Column, String, Text, create_engine, delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from ..core.exceptions import StorageWriteError, StoreError

logger = logging.getLogger(__name__)

Base = declarative_base()


class KeyValueEntry(Base):
    __tablename__ = "kv_store"

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(BigInteger, nullable=False)


class SQLiteStorage:
    def __init__(self, path: Optional[str] = None, *, db_url: Optional[str] = None):
        """
        path: SQLite file; parent directories are created.
        db_url: optional SQLAlchemy URL override.
        """
        if db_url is None:
            if path:
                resolved = Path(path).expanduser().resolve()
            else:
                resolved = Path.home() / ".attendance_sync" / "storage.db"
            resolved.parent.mkdir(parents=True, exist_ok=True)
            db_url = f"sqlite:///{resolved}"

        self._engine = create_engine(db_url, echo=False, future=True)
        Base.metadata.create_all(self._engine)
        self._SessionLocal = sessionmaker(bind=self._engine, autocommit=False, autoflush=False, expire_on_commit=False)
        logger.info(f"SQLite storage ready: {db_url.split('?')[0]}")

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """Context manager for a single DB session. Commits on success, rolls back on error."""
        session = self._SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def get_item(self, key: str) -> Optional[str]:
        try:
            with self.session_scope() as session:
                entry = session.get(KeyValueEntry, key)
                return entry.value if entry else None
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to read {key!r}: {e}", key=key) from e

    def set_item(self, key: str, value: str) -> None:
        try:
            with self.session_scope() as session:
                entry = session.get(KeyValueEntry, key)
                now_ms = int(time.time() * 1000)
                if entry is None:
                    session.add(KeyValueEntry(key=key, value=value, updated_at=now_ms))
                else:
                    entry.value = value
                    entry.updated_at = now_ms
        except SQLAlchemyError as e:
            raise StorageWriteError(f"Failed to write {key!r}: {e}", key=key) from e

    def remove_item(self, key: str) -> None:
        try:
            with self.session_scope() as session:
                session.execute(delete(KeyValueEntry).where(KeyValueEntry.key == key))
        except SQLAlchemyError as e:
            raise StorageWriteError(f"Failed to remove {key!r}: {e}", key=key) from e

    def keys(self) -> List[str]:
        with self.session_scope() as session:
            return list(session.scalars(select(KeyValueEntry.key)))

    def clear(self) -> None:
        with self.session_scope() as session:
            session.execute(delete(KeyValueEntry))

    def dispose(self) -> None:
        self._engine.dispose()
