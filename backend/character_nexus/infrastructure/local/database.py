"""
SQLite database configuration, ORM models and the persistence gateway.

Repositories talk to the store only through a Database handle, which is
created once by the application lifespan and passed in explicitly.
"""

import logging
from contextlib import asynccontextmanager, contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, AsyncIterator, Iterator, Optional

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    event,
)
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.sql import Executable
from sqlalchemy.types import TypeDecorator

from character_nexus.core.exceptions import DatabaseError, DatabaseNotInitializedError
from character_nexus.utils.datetime_utils import ensure_utc

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""

    pass


class UTCDateTime(TypeDecorator):
    """Stores naive UTC, returns timezone-aware UTC."""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return ensure_utc(value).replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        return ensure_utc(value)


# ===========================================
# ORM Models
# ===========================================


class CharacterORM(Base):
    """Character ORM model. List-valued fields are stored as JSON text."""

    __tablename__ = "characters"

    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False, index=True)
    chat_name = Column(String(255), nullable=True)
    universe = Column(String(255), nullable=False, index=True)
    image = Column(String(255), nullable=True)
    bio = Column(Text, nullable=True)
    personality = Column(Text, nullable=True)
    scenario = Column(Text, nullable=True)
    intro_message = Column(Text, nullable=True)
    example_dialogues = Column(Text, nullable=False, default="[]")
    tags = Column(Text, nullable=False, default="[]")
    content_rating = Column(String(10), nullable=False, default="sfw", index=True)
    notes = Column(Text, nullable=True)
    relationships = Column(Text, nullable=False, default="[]")
    custom_tags = Column(Text, nullable=False, default="[]")
    source = Column(String(2083), nullable=True)
    last_synced_from = Column(String(2083), nullable=True)
    created = Column(UTCDateTime, nullable=False, index=True)
    modified = Column(UTCDateTime, nullable=False)


class ConversationORM(Base):
    """Conversation ORM model."""

    __tablename__ = "conversations"

    id = Column(String(36), primary_key=True)
    character_id = Column(
        String(36),
        ForeignKey("characters.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    title = Column(String(500), nullable=False, default="New Conversation")
    persona_name = Column(String(255), nullable=True)
    message_count = Column(Integer, nullable=False, default=0)
    source_url = Column(String(2083), nullable=True)
    # "metadata" is reserved on declarative classes
    metadata_json = Column("metadata", Text, nullable=False, default="{}")
    created = Column(UTCDateTime, nullable=False)
    modified = Column(UTCDateTime, nullable=False, index=True)


class MessageORM(Base):
    """Message ORM model. order_index is dense from 0 per conversation."""

    __tablename__ = "messages"
    __table_args__ = (
        UniqueConstraint("conversation_id", "order_index", name="uq_messages_conversation_order"),
    )

    id = Column(String(36), primary_key=True)
    conversation_id = Column(
        String(36),
        ForeignKey("conversations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role = Column(String(20), nullable=False)
    content = Column(Text, nullable=False, default="")
    timestamp = Column(UTCDateTime, nullable=False)
    order_index = Column(Integer, nullable=False)
    metadata_json = Column("metadata", Text, nullable=False, default="{}")


characters_table = CharacterORM.__table__
conversations_table = ConversationORM.__table__
messages_table = MessageORM.__table__


# ===========================================
# Persistence Gateway
# ===========================================


@dataclass(frozen=True)
class ExecuteResult:
    """Outcome of a write statement."""

    inserted_id: Optional[int]
    rows_affected: int


class Executor:
    """Runs statements on one connection."""

    def __init__(self, conn: AsyncConnection):
        self._conn = conn

    async def execute(self, statement: Executable) -> ExecuteResult:
        result = await self._conn.execute(statement)
        return ExecuteResult(
            inserted_id=getattr(result, "lastrowid", None),
            rows_affected=result.rowcount,
        )

    async def fetch_one(self, statement: Executable) -> Optional[dict[str, Any]]:
        result = await self._conn.execute(statement)
        row = result.mappings().first()
        return dict(row) if row is not None else None

    async def fetch_all(self, statement: Executable) -> list[dict[str, Any]]:
        result = await self._conn.execute(statement)
        return [dict(row) for row in result.mappings().all()]


def _configure_sqlite(engine: AsyncEngine) -> None:
    """
    Enable foreign keys on every connection and let SQLAlchemy own BEGIN.

    The sqlite3 driver defers BEGIN until the first write, which would leave
    reads at the start of a transaction outside of it.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


class Database:
    """
    Persistence gateway over an async SQLAlchemy engine.

    Lifecycle: init() exactly once, then any number of operations, then
    close(). Operations outside that window raise DatabaseNotInitializedError.
    close() may be called repeatedly.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self._echo = echo
        self._engine: Optional[AsyncEngine] = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise DatabaseNotInitializedError("Database not initialized. Call init() first.")
        return self._engine

    @property
    def is_initialized(self) -> bool:
        return self._engine is not None

    async def init(self) -> None:
        """Create the engine and any missing tables."""
        if self._engine is not None:
            raise RuntimeError("Database already initialized")

        url = make_url(self.url)
        is_sqlite = url.get_backend_name() == "sqlite"
        if is_sqlite and url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)

        engine = create_async_engine(self.url, echo=self._echo)
        if is_sqlite:
            _configure_sqlite(engine)

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        self._engine = engine
        logger.info("Database initialized: %s", url.render_as_string(hide_password=True))

    async def close(self) -> None:
        if self._engine is None:
            return
        engine, self._engine = self._engine, None
        await engine.dispose()
        logger.info("Database connection closed")

    async def execute(self, statement: Executable) -> ExecuteResult:
        """Run a write statement in its own transaction."""
        async with self.engine.begin() as conn:
            return await Executor(conn).execute(statement)

    async def fetch_one(self, statement: Executable) -> Optional[dict[str, Any]]:
        async with self.engine.connect() as conn:
            return await Executor(conn).fetch_one(statement)

    async def fetch_all(self, statement: Executable) -> list[dict[str, Any]]:
        async with self.engine.connect() as conn:
            return await Executor(conn).fetch_all(statement)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Executor]:
        """Commit on normal exit, roll back if the block raises."""
        async with self.engine.begin() as conn:
            yield Executor(conn)


@contextmanager
def wrap_database_errors(action: str) -> Iterator[None]:
    """
    Re-raise SQLAlchemy failures as a generic DatabaseError.

    The underlying error is logged with its traceback and never reaches the
    caller. Application errors raised inside the block pass through.
    """
    try:
        yield
    except SQLAlchemyError as e:
        logger.error("Database error while %s", action, exc_info=True)
        raise DatabaseError() from e
