"""SQLAlchemy-backed units of work for import reconciliation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from recordsync.adapters.sqlalchemy.localization import SqlAlchemyLocaleCollaborator
from recordsync.adapters.sqlalchemy.mappings import start_mappers
from recordsync.adapters.sqlalchemy.migrations import upgrade_head
from recordsync.adapters.sqlalchemy.repositories import (
    SqlAlchemyHoldingArea,
    SqlAlchemyMetadataStore,
    SqlAlchemyRecordStore,
    SqlAlchemyTaxonomyStore,
)
from recordsync.config import get_database_config, get_importer_config
from recordsync.domain.ports import ImportRepositories, RepositoryCollection

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Connection, Engine

    from recordsync.config import ImporterConfig


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call recordsync.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def enable_sqlite_savepoints(engine: Engine) -> Engine:
    """Let pysqlite honour SAVEPOINTs by emitting BEGIN ourselves."""

    if engine.dialect.name != "sqlite":
        return engine

    @event.listens_for(engine, "connect")
    def _do_connect(  # pyright: ignore[reportUnusedFunction]
        dbapi_connection: Any, connection_record: Any
    ) -> None:
        _ = connection_record
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _do_begin(conn: Connection) -> None:  # pyright: ignore[reportUnusedFunction]
        conn.exec_driver_sql("BEGIN")

    return engine


def create_store_engine(database_uri: str) -> Engine:
    """Create an engine for the content store."""

    return enable_sqlite_savepoints(create_engine(database_uri, future=True))


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the SQLAlchemy engine, metadata, and session factory."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    resolved_engine = engine or create_store_engine(database_uri or get_database_config().uri)
    start_mappers()
    upgrade_head(engine=resolved_engine)
    _STATE.engine = resolved_engine


def is_started() -> bool:
    """Return whether the adapter has been initialised."""

    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """Generic SQLAlchemy unit of work with pluggable repository collections."""

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self.session_factory: sessionmaker[Session] = session_factory or _STATE.session_factory
        self._session: Session | None = None

    @abstractmethod
    def _build_repositories(self, session: Session) -> TRepositories: ...

    def __enter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        self.session = self.session_factory()
        self._repositories = self._build_repositories(self.session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        self.session.close()
        self.session = None
        return False

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def repositories(self) -> TRepositories:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: Session | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session


class SqlAlchemyImportUnitOfWork(BaseSqlAlchemyUnitOfWork[ImportRepositories]):
    """Unit of work handing out the stores one import batch writes to."""

    def __init__(
        self,
        config: ImporterConfig | None = None,
        *,
        session_factory: sessionmaker[Session] | None = None,
    ) -> None:
        super().__init__(session_factory)
        self.config = config or get_importer_config()

    def _build_repositories(self, session: Session) -> ImportRepositories:
        return ImportRepositories(
            records=SqlAlchemyRecordStore(session),
            metadata=SqlAlchemyMetadataStore(session),
            taxonomy=SqlAlchemyTaxonomyStore(session),
            holding=SqlAlchemyHoldingArea(session),
            locale_collaborators=(
                SqlAlchemyLocaleCollaborator(
                    session,
                    languages=self.config.languages,
                    active=self.config.locale_linking,
                ),
            ),
        )


if TYPE_CHECKING:
    from recordsync.domain.ports import ImportUnitOfWork

    _uow_import_check: ImportUnitOfWork = SqlAlchemyImportUnitOfWork()
