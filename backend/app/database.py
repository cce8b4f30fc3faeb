"""
Notekeeper Backend: Persistence Gateway
========================================

What:  Async SQLAlchemy engine wrapper with parameterized execution and
       scoped transactions, plus the declarative Base and FastAPI dependency.
How:   A `Database` object owns one AsyncEngine (and therefore one
       connection pool). It is constructed in the application lifespan,
       stored on `app.state`, handed to repositories through `get_database`,
       and disposed on shutdown.
Who:   Used by NoteRepository exclusively (plus the health probe).

Connection Pooling:
    pool_size:     Persistent connections; bounds concurrent database work
    max_overflow:  Temporary connections above pool_size
    pool_timeout:  How long a request queues for a free connection
    pool_pre_ping: Validates connections before use

    SQLite URLs (tests) skip the sizing arguments; the aiosqlite dialect
    selects its own pool class.

Error Contract:
    Every SQLAlchemyError leaving this module is re-raised as StorageError
    carrying the store-specific code. Nothing here retries.
"""

import logging
from contextlib import asynccontextmanager, contextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Iterator, List, Optional, TypeVar, Union

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.sql import Executable

from app.config import Settings
from app.exceptions import StorageError

logger = logging.getLogger(__name__)

T = TypeVar("T")
Statement = Union[Executable, str]
Parameters = Optional[Union[Dict[str, Any], List[Dict[str, Any]]]]


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object used by Alembic and by
    Database.create_schema().
    """
    pass


@dataclass
class QueryResult:
    """
    Materialized result of one statement.

    rows:      Result rows as plain dicts (empty for statements without rows)
    rowcount:  Rows affected by INSERT/UPDATE/DELETE (driver-defined for SELECT)
    """

    rows: List[Dict[str, Any]] = field(default_factory=list)
    rowcount: int = 0

    def first(self) -> Optional[Dict[str, Any]]:
        return self.rows[0] if self.rows else None


@contextmanager
def _storage_errors() -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        error = StorageError.from_exception(exc)
        logger.error("Database statement failed [%s]: %s", error.code, error.detail)
        raise error from exc


async def _run(conn: AsyncConnection, statement: Statement, parameters: Parameters) -> QueryResult:
    if isinstance(statement, str):
        statement = text(statement)
    with _storage_errors():
        result = await conn.execute(statement, parameters)
        rows = [dict(row) for row in result.mappings().all()] if result.returns_rows else []
        return QueryResult(rows=rows, rowcount=result.rowcount)


class Transaction:
    """Handle passed to work running inside Database.transaction()."""

    def __init__(self, connection: AsyncConnection):
        self._connection = connection

    async def execute(self, statement: Statement, parameters: Parameters = None) -> QueryResult:
        return await _run(self._connection, statement, parameters)


class Database:
    """
    Pooled connection to the relational store.

    Lifecycle:
        db = Database.from_settings(settings)   # startup
        await db.create_schema()                # optional
        ...                                     # serve requests
        await db.dispose()                      # shutdown
    """

    def __init__(
        self,
        url: str,
        *,
        pool_size: int = 10,
        max_overflow: int = 0,
        pool_timeout: int = 30,
        pool_pre_ping: bool = True,
        echo: bool = False,
    ):
        engine_kwargs: Dict[str, Any] = {"echo": echo}
        if make_url(url).get_backend_name() != "sqlite":
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_timeout=pool_timeout,
                pool_pre_ping=pool_pre_ping,
                pool_recycle=3600,
            )
        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,
            pool_pre_ping=settings.db_pool_pre_ping,
            echo=settings.log_level == "DEBUG",
        )

    async def execute(self, statement: Statement, parameters: Parameters = None) -> QueryResult:
        """
        Execute one parameterized statement in its own short transaction.

        Args:
            statement:  SQLAlchemy Core statement, or raw SQL with :named params
            parameters: Dict of bind values, or a list of dicts for executemany

        Raises:
            StorageError: Connectivity failure or statement rejected by the store
        """
        with _storage_errors():
            async with self.engine.begin() as conn:
                return await _run(conn, statement, parameters)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Transaction]:
        """
        Acquire a dedicated connection and run a transaction on it.

        Commits when the block exits normally; rolls back and re-raises on
        any exception inside the block. The connection always goes back to
        the pool.
        """
        with _storage_errors():
            conn = await self.engine.connect()
        try:
            with _storage_errors():
                trans = await conn.begin()
            try:
                yield Transaction(conn)
            except Exception:
                logger.warning("Transaction rolled back")
                with _storage_errors():
                    await trans.rollback()
                raise
            with _storage_errors():
                await trans.commit()
        finally:
            await conn.close()

    async def run_in_transaction(self, work: Callable[[Transaction], Awaitable[T]]) -> T:
        """Run `work(tx)` inside transaction() and return its result."""
        async with self.transaction() as tx:
            return await work(tx)

    async def ping(self) -> None:
        """Lightweight connectivity probe (SELECT 1)."""
        await self.execute("SELECT 1")

    @property
    def dialect_name(self) -> str:
        """Backend name of the engine, e.g. "postgresql" or "sqlite"."""
        return self.engine.dialect.name

    async def create_schema(self) -> None:
        """
        Create missing tables and indexes registered on Base.metadata.

        On PostgreSQL the pg_trgm extension is enabled first; the search
        index uses its trigram operator class.
        """
        import app.models.note  # noqa: F401  (registers the notes table)

        with _storage_errors():
            async with self.engine.begin() as conn:
                if self.dialect_name == "postgresql":
                    await conn.execute(text("CREATE EXTENSION IF NOT EXISTS pg_trgm"))
                await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Close all pooled connections."""
        await self.engine.dispose()


# ── Dependencies ──────────────────────────────────────────────────────────
def get_database(request: Request) -> Database:
    """
    FastAPI dependency returning the process-wide Database.

    The instance is created by the lifespan handler in app.main and stored
    on `app.state.database`. Tests override this dependency.
    """
    return request.app.state.database
