"""
Persistence adapter for the ordering portal.

One narrow query interface (execute / insert / query_one / query_all /
last_insert_id) over two interchangeable SQLAlchemy engines:

* SQLite file store (embedded, single writer). Every mutation commits before
  returning and mutations are serialized by a process-wide lock.
* PostgreSQL server (networked, multi writer). New ids come back through
  ``RETURNING id`` on the insert statement itself.

Statements are written once with positional ``?`` markers and rows always come
back as plain dicts with canonical timestamps, whichever backend is active.
"""

import logging
import os
import threading
from contextlib import contextmanager
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, Result
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from portal.core.dates import format_timestamp, now_timestamp
from portal.core.security import get_password_hash
from portal.exceptions import PersistenceError

logger = logging.getLogger(__name__)

# Base class for declarative models
Base = declarative_base()

Row = Dict[str, Any]
Params = Sequence[Any]


def translate_placeholders(sql: str, params: Params = ()) -> Tuple[str, Dict[str, Any]]:
    """
    Rewrite positional ``?`` markers into numbered bind parameters.

    ``SELECT * FROM t WHERE a = ? AND b = ?`` becomes
    ``SELECT * FROM t WHERE a = :p1 AND b = :p2``; SQLAlchemy then renders each
    driver's native style. Markers inside quoted literals are left alone.
    """
    params = list(params or ())
    out: List[str] = []
    bound: Dict[str, Any] = {}
    quote: Optional[str] = None
    index = 0

    for char in sql:
        if quote:
            if char == quote:
                quote = None
            out.append(char)
        elif char in ("'", '"'):
            quote = char
            out.append(char)
        elif char == "?":
            if index >= len(params):
                raise PersistenceError("Not enough parameters for statement", sql=sql)
            index += 1
            name = f"p{index}"
            bound[name] = params[index - 1]
            out.append(f":{name}")
        else:
            out.append(char)

    if index != len(params):
        raise PersistenceError(
            f"Statement expects {index} parameters, got {len(params)}", sql=sql
        )
    return "".join(out), bound


def _normalize_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return format_timestamp(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return value


def _to_rows(result: Result) -> List[Row]:
    return [
        {key: _normalize_value(value) for key, value in row._mapping.items()}
        for row in result
    ]


class Database:
    """Common part of both backends."""

    backend = "generic"

    def __init__(self, engine: Engine):
        self.engine = engine
        self._local = threading.local()

    # --- lifecycle -------------------------------------------------------

    def create_schema(self) -> None:
        """Create all tables. Safe to call on an existing database."""
        # Import models to ensure they're registered
        from portal.models import (  # noqa: F401
            admin,
            order,
            password_reset,
            product,
            session,
            shipping_address,
            user,
        )

        Base.metadata.create_all(bind=self.engine)

    def seed(self, admin_username: str, admin_password: str) -> None:
        """Default admin account and starter product, only when absent."""
        if not self.query_one("SELECT id FROM admin_users WHERE username = ?", [admin_username]):
            self.insert(
                "INSERT INTO admin_users (username, password, created_at) VALUES (?, ?, ?)",
                [admin_username, get_password_hash(admin_password), now_timestamp()],
            )
            logger.info(f"Created default admin account '{admin_username}'")

        if not self.query_one("SELECT id FROM products WHERE name = ?", ["BASE"]):
            self.insert(
                "INSERT INTO products (name, flavor, price, image_url, description, "
                "catch_copy, min_quantity, quantity_step, is_active, created_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                [
                    "BASE",
                    "Cocoa",
                    1500,
                    "/product.png",
                    "High-quality protein without unnecessary additives, "
                    "gentle on the gut and balanced for everyday use.",
                    "",
                    10,
                    10,
                    1,
                    now_timestamp(),
                ],
            )
            logger.info("Registered default product")

    def dispose(self) -> None:
        self.engine.dispose()

    # --- query interface ------------------------------------------------

    def execute(self, sql: str, params: Params = ()) -> int:
        """Run a mutating statement, return the affected row count."""
        with self._writing():
            return self._run(sql, params, lambda result: result.rowcount, commit=True)

    def insert(self, sql: str, params: Params = ()) -> int:
        """Run an INSERT and return the id of the new row."""
        with self._writing():
            new_id = self._insert(sql, params)
        self._local.last_insert_id = new_id
        return new_id

    def query_one(self, sql: str, params: Params = ()) -> Optional[Row]:
        rows = self._run(sql, params, _to_rows)
        return rows[0] if rows else None

    def query_all(self, sql: str, params: Params = ()) -> List[Row]:
        return self._run(sql, params, _to_rows)

    def last_insert_id(self) -> Optional[int]:
        """Id produced by the most recent insert() on the calling thread."""
        return getattr(self._local, "last_insert_id", None)

    # --- internals -------------------------------------------------------

    @contextmanager
    def _writing(self):
        yield

    def _insert(self, sql: str, params: Params) -> int:
        raise NotImplementedError

    def _run(
        self,
        sql: str,
        params: Params,
        handler: Callable[[Result], Any],
        commit: bool = False,
    ) -> Any:
        statement, bound = translate_placeholders(sql, params)
        try:
            if commit:
                with self.engine.begin() as conn:
                    return handler(conn.execute(text(statement), bound))
            with self.engine.connect() as conn:
                return handler(conn.execute(text(statement), bound))
        except SQLAlchemyError as e:
            logger.error(f"Query failed ({self.backend}): {e}\nSQL: {sql.strip()[:200]}")
            raise PersistenceError("Database query failed", sql=sql) from e


class SQLiteDatabase(Database):
    """Embedded file-backed store with a single in-process writer."""

    backend = "sqlite"

    def __init__(self, engine: Engine):
        super().__init__(engine)
        self._write_lock = threading.RLock()

    @contextmanager
    def _writing(self):
        with self._write_lock:
            yield

    def _insert(self, sql: str, params: Params) -> int:
        return self._run(sql, params, lambda result: result.lastrowid, commit=True)


class PostgresDatabase(Database):
    """Networked PostgreSQL server."""

    backend = "postgresql"

    def _insert(self, sql: str, params: Params) -> int:
        statement = sql.rstrip().rstrip(";")
        if "returning" not in statement.lower():
            statement += " RETURNING id"
        return self._run(statement, params, lambda result: result.scalar_one(), commit=True)


def _enable_sqlite_foreign_keys(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        """Honour ON DELETE CASCADE on SQLite."""
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_database(url: str, echo: bool = False) -> Database:
    """
    Build the adapter selected by the database URL.

    ``postgresql://...`` selects the server backend, anything else is treated
    as a SQLite URL.
    """
    if url.startswith("postgresql"):
        logger.info("Connecting to PostgreSQL database")
        engine = create_engine(url, echo=echo, pool_pre_ping=True)
        return PostgresDatabase(engine)

    # Create database directory if it doesn't exist
    path = url.replace("sqlite:///", "", 1)
    in_memory = path in ("", ":memory:") or url == "sqlite://"
    if not in_memory:
        db_dir = os.path.dirname(path)
        if db_dir and not os.path.exists(db_dir):
            os.makedirs(db_dir, exist_ok=True)

    engine_kwargs: Dict[str, Any] = {
        "echo": echo,
        "connect_args": {"check_same_thread": False},
    }
    if in_memory:
        # One shared connection, otherwise every connection sees an empty database
        engine_kwargs["poolclass"] = StaticPool

    engine = create_engine(url, **engine_kwargs)
    _enable_sqlite_foreign_keys(engine)
    logger.info(f"Using SQLite database at {path or ':memory:'}")
    return SQLiteDatabase(engine)
