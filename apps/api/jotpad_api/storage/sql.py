from __future__ import annotations

import logging

from sqlalchemy import (
    Column,
    DateTime,
    Integer,
    MetaData,
    Table,
    Text,
    asc,
    create_engine,
    delete,
    desc,
    func,
    insert,
    select,
    update,
)
from sqlalchemy.engine import Engine, Row
from sqlalchemy.exc import SQLAlchemyError

from jotpad_api.domain.entities import SORT_ORDERS, Note, SortOrder
from jotpad_api.domain.exceptions import NotFound, StoreUnavailable, ValidationError, require_title
from jotpad_api.util import ensure_utc, next_timestamp, utc_now

logger = logging.getLogger("jotpad.storage")

# SQLite INTEGER PRIMARY KEY is a signed 64-bit value; larger ids can never exist.
MAX_NOTE_ID = 2**63 - 1

metadata = MetaData()

notes_table = Table(
    "notes",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", Text, nullable=False),
    Column("content", Text, nullable=False, server_default=""),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)


def _order_by(sort_by: str):
    if sort_by not in SORT_ORDERS:
        raise ValidationError(f"invalid_sort_order:{sort_by}")
    field, direction = sort_by.rsplit("_", 1)
    direct = asc if direction == "asc" else desc
    if field == "title":
        column = func.lower(notes_table.c.title)
    elif field == "created":
        column = notes_table.c.created_at
    else:
        column = notes_table.c.updated_at
    return (direct(column), direct(notes_table.c.id))


def _storable_id(note_id: int) -> bool:
    return -MAX_NOTE_ID - 1 <= note_id <= MAX_NOTE_ID


def _row_to_note(row: Row) -> Note:
    return Note(
        id=int(row.id),
        title=row.title,
        content=row.content,
        created_at=ensure_utc(row.created_at),
        updated_at=ensure_utc(row.updated_at),
    )


def create_engine_for_url(database_url: str) -> Engine:
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(database_url, connect_args=connect_args)


class SqlNoteRepository:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    @classmethod
    def from_url(cls, database_url: str) -> "SqlNoteRepository":
        repo = cls(create_engine_for_url(database_url))
        repo.init_schema()
        return repo

    def init_schema(self) -> None:
        try:
            metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            logger.exception("schema_init_failed")
            raise StoreUnavailable("store_unavailable") from e

    def dispose(self) -> None:
        self.engine.dispose()

    def list_notes(self, sort_by: SortOrder = "updated_desc") -> list[Note]:
        stmt = select(notes_table).order_by(*_order_by(sort_by))
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).all()
        except SQLAlchemyError as e:
            logger.exception("note_list_failed", extra={"sort_by": sort_by})
            raise StoreUnavailable("store_unavailable") from e
        return [_row_to_note(r) for r in rows]

    def count(self) -> int:
        try:
            with self.engine.connect() as conn:
                return int(conn.execute(select(func.count()).select_from(notes_table)).scalar_one())
        except SQLAlchemyError as e:
            raise StoreUnavailable("store_unavailable") from e

    def create_note(self, title: str, content: str = "") -> Note:
        if not title:
            raise ValidationError("title_required")
        now = utc_now()
        stmt = insert(notes_table).values(title=title, content=content, created_at=now, updated_at=now)
        try:
            with self.engine.begin() as conn:
                note_id = conn.execute(stmt).inserted_primary_key[0]
                row = conn.execute(select(notes_table).where(notes_table.c.id == note_id)).one()
        except SQLAlchemyError as e:
            logger.exception("note_create_failed")
            raise StoreUnavailable("store_unavailable") from e
        return _row_to_note(row)

    def get_note(self, note_id: int) -> Note | None:
        if not _storable_id(note_id):
            return None
        try:
            with self.engine.connect() as conn:
                row = conn.execute(select(notes_table).where(notes_table.c.id == note_id)).first()
        except SQLAlchemyError as e:
            logger.exception("note_get_failed", extra={"id": note_id})
            raise StoreUnavailable("store_unavailable") from e
        return _row_to_note(row) if row is not None else None

    def update_note(self, note_id: int, title: str | None = None, content: str | None = None) -> Note:
        require_title(title)
        if not _storable_id(note_id):
            raise NotFound(note_id)
        try:
            with self.engine.begin() as conn:
                current = conn.execute(select(notes_table).where(notes_table.c.id == note_id)).first()
                if current is None:
                    raise NotFound(note_id)

                values: dict = {"updated_at": next_timestamp(current.updated_at)}
                if title is not None:
                    values["title"] = title
                if content is not None:
                    values["content"] = content

                conn.execute(update(notes_table).where(notes_table.c.id == note_id).values(**values))
                row = conn.execute(select(notes_table).where(notes_table.c.id == note_id)).one()
        except SQLAlchemyError as e:
            logger.exception("note_update_failed", extra={"id": note_id})
            raise StoreUnavailable("store_unavailable") from e
        return _row_to_note(row)

    def delete_note(self, note_id: int) -> bool:
        if not _storable_id(note_id):
            return False
        try:
            with self.engine.begin() as conn:
                result = conn.execute(delete(notes_table).where(notes_table.c.id == note_id))
        except SQLAlchemyError as e:
            logger.exception("note_delete_failed", extra={"id": note_id})
            raise StoreUnavailable("store_unavailable") from e
        return (result.rowcount or 0) > 0
