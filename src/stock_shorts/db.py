"""Database setup for persisting the article store."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker


class Base(DeclarativeBase):
    pass


def _build_sqlite_url(path: str) -> str:
    db_path = Path(path)
    if not db_path.parent.exists():
        db_path.parent.mkdir(parents=True, exist_ok=True)
    resolved = db_path.resolve()
    return f"sqlite+pysqlite:///{resolved}"  # pragma: no cover - deterministic path


def _enable_wal(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA busy_timeout=30000")
    finally:
        cursor.close()


class Database:
    """Owns one engine and session factory; several may coexist in a process."""

    def __init__(self, sqlite_path: str, *, echo: bool = False) -> None:
        self.url = _build_sqlite_url(sqlite_path)
        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None
        self._echo = echo

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = create_engine(
                self.url,
                echo=self._echo,
                connect_args={"check_same_thread": False, "timeout": 30},
            )
            event.listen(self._engine, "connect", _enable_wal)
        return self._engine

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self.engine, class_=Session, autoflush=False, expire_on_commit=False
            )
        return self._session_factory

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def init_db(self) -> None:
        from . import models  # noqa: F401 - ensure models are imported

        Base.metadata.create_all(bind=self.engine)

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._session_factory = None


__all__ = ["Base", "Database"]
