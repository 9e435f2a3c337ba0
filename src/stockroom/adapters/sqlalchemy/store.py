"""SQLAlchemy-backed entity store and adapter lifecycle."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from sqlalchemy import ColumnElement, create_engine, delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from stockroom.config.storage import get_database_config
from stockroom.domain.errors import RecordNotFoundError, StoreUnavailableError
from stockroom.domain.model import Record, values_equal

from .mappings import create_all_tables, document_table

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy import Row
    from sqlalchemy.engine import Engine

    from stockroom.domain.model import EntityKind, FieldValue
    from stockroom.domain.ports import EntityStore

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the SQLAlchemy store is used before initialisation."""


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
                "SQLAlchemy adapter not initialised. Call stockroom.adapters.sqlalchemy."
                "startup() before creating a store."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the SQLAlchemy engine, tables, and session factory."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    if engine is not None:
        resolved_engine = engine
    elif database_uri is not None:
        resolved_engine = create_engine(database_uri, future=True)
    else:
        config = get_database_config()
        resolved_engine = create_engine(config.uri, echo=config.echo, future=True)
    create_all_tables(resolved_engine)
    _STATE.engine = resolved_engine


def configured_engine() -> Engine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def is_started() -> bool:
    """Return whether the adapter has been initialised."""

    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None


@contextmanager
def _store_errors(action: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        log.error("Database error while trying to %s: %s", action, exc)
        raise StoreUnavailableError(f"Database error while trying to {action}") from exc


def _to_record(row: Row[Any]) -> Record:
    return Record(
        natural_key=row.natural_key,
        fields=dict(row.data),
        id=row.id,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _field_clause(name: str, value: FieldValue) -> ColumnElement[bool] | None:
    """SQL predicate for ``value``, or ``None`` when it must be matched in Python.

    Only text is compared in SQL: boolean and numeric accessors cast the JSON
    value of every row, which fails on some backends when another row holds text.
    """

    if isinstance(value, str):
        return document_table.c.data[name].as_string() == value
    return None


class SqlAlchemyEntityStore:
    """Entity store keeping every collection in one ``document`` table."""

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self.session_factory = session_factory or _STATE.session_factory

    def list_all(self, kind: EntityKind) -> list[Record]:
        statement = (
            select(document_table)
            .where(document_table.c.collection == kind.collection)
            .order_by(document_table.c.natural_key, document_table.c.id)
        )
        with _store_errors(f"list {kind.name} records"), self.session_factory() as session:
            return [_to_record(row) for row in session.execute(statement)]

    def find_by_field(self, kind: EntityKind, name: str, value: FieldValue) -> list[Record]:
        if name == kind.natural_key_field:
            if not isinstance(value, str):
                return []
            clause: ColumnElement[bool] | None = document_table.c.natural_key == value
        else:
            clause = _field_clause(name, value)
        statement = (
            select(document_table)
            .where(document_table.c.collection == kind.collection)
            .order_by(document_table.c.natural_key, document_table.c.id)
        )
        if clause is not None:
            statement = statement.where(clause)
        with _store_errors(f"query {kind.name} records"), self.session_factory() as session:
            records = [_to_record(row) for row in session.execute(statement)]
        # Exact match on the decoded values; also the only filter for non-text values.
        return [record for record in records if values_equal(kind.value_of(record, name), value)]

    def natural_keys(self, kind: EntityKind) -> list[str]:
        statement = select(document_table.c.natural_key).where(
            document_table.c.collection == kind.collection
        )
        with _store_errors(f"list {kind.name} keys"), self.session_factory() as session:
            return list(session.scalars(statement))

    def get(self, kind: EntityKind, record_id: str) -> Record | None:
        statement = select(document_table).where(
            document_table.c.collection == kind.collection,
            document_table.c.id == record_id,
        )
        with _store_errors(f"get {kind.name} record"), self.session_factory() as session:
            row = session.execute(statement).one_or_none()
        return _to_record(row) if row is not None else None

    def insert(self, kind: EntityKind, record: Record) -> str:
        record_id = uuid4().hex
        statement = insert(document_table).values(
            collection=kind.collection,
            id=record_id,
            natural_key=record.natural_key,
            data=dict(record.fields),
            created_at=record.created_at,
            updated_at=record.updated_at,
        )
        with _store_errors(f"add {kind.name} record"), self.session_factory.begin() as session:
            session.execute(statement)
        return record_id

    def replace(self, kind: EntityKind, record: Record) -> None:
        if record.id is None:
            raise RecordNotFoundError(kind=kind.name, record_id="")
        statement = (
            update(document_table)
            .where(
                document_table.c.collection == kind.collection,
                document_table.c.id == record.id,
            )
            .values(
                natural_key=record.natural_key,
                data=dict(record.fields),
                created_at=record.created_at,
                updated_at=record.updated_at,
            )
        )
        with _store_errors(f"update {kind.name} record"), self.session_factory.begin() as session:
            matched = session.execute(statement).rowcount
        if not matched:
            raise RecordNotFoundError(kind=kind.name, record_id=record.id)

    def delete(self, kind: EntityKind, record_id: str) -> None:
        statement = delete(document_table).where(
            document_table.c.collection == kind.collection,
            document_table.c.id == record_id,
        )
        with _store_errors(f"delete {kind.name} record"), self.session_factory.begin() as session:
            session.execute(statement)


if TYPE_CHECKING:
    _store_check: EntityStore = SqlAlchemyEntityStore()
