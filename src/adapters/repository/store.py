"""
SQLite store - Single-file relational dataset with snapshot persistence.

The whole database lives in memory (sqlite3 ``:memory:`` connection) and is
mirrored to one file on disk:

- open(): load the file wholesale if present, else start empty, then apply
  the idempotent schema migrations.
- run(): apply a mutation, then serialize the entire database back to the
  file before returning. Inside transaction(), the flush happens once at
  commit instead.

Durability boundary
-------------------
A failed flush is logged and swallowed: in-memory state keeps the mutation
and the next successful flush writes it out. Flushes go through a temp
file and os.replace so a crash mid-write never truncates the previous image.

Concurrency
-----------
One re-entrant lock serializes every statement, reads included, so a
reader sees the dataset either fully before or fully after a mutation.
"""

import logging
import os
import sqlite3
import threading
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

Params = Sequence[Any] | Mapping[str, Any]


class SqliteStore:
    """
    Keyed record sets for users, pending registrations and one-time codes.

    All SQL uses parameterized queries. Table and column names passed to
    upsert() must be trusted constants.
    """

    def __init__(self, path: str | Path | None) -> None:
        """
        Initialize store without touching disk.

        Args:
            path: Backing file, or None for a purely in-memory store
        """
        self._path = Path(path) if path is not None else None
        self._lock = threading.RLock()
        self._depth = 0
        self._conn = sqlite3.connect(":memory:", check_same_thread=False, isolation_level=None)
        self._conn.row_factory = sqlite3.Row

    @property
    def path(self) -> Path | None:
        return self._path

    def open(self) -> None:
        """
        Load or create the dataset and materialize the schema.

        Idempotent; must complete before any repository is used.
        """
        with self._lock:
            if self._path is not None and self._path.exists() and self._path.stat().st_size > 0:
                self._conn.deserialize(self._path.read_bytes())
                logger.info("Loaded existing database: %s", self._path)
            else:
                logger.info("Created new database: %s", self._path or ":memory:")
            run_migrations(self)
            self.persist()

    def close(self) -> None:
        """Flush a final snapshot and release the connection."""
        with self._lock:
            self.persist()
            self._conn.close()

    def get(self, sql: str, params: Params = ()) -> dict[str, Any] | None:
        """Return the first row of a query as a dict, or None."""
        with self._lock:
            row = self._conn.execute(sql, params).fetchone()
            return dict(row) if row is not None else None

    def all(self, sql: str, params: Params = ()) -> list[dict[str, Any]]:
        """Return every row of a query as dicts."""
        with self._lock:
            return [dict(row) for row in self._conn.execute(sql, params).fetchall()]

    def run(self, sql: str, params: Params = ()) -> int:
        """
        Execute a mutating statement and persist.

        Returns:
            Number of rows changed
        """
        with self._lock:
            rowcount = self._conn.execute(sql, params).rowcount
            if not self._depth:
                self.persist()
            return rowcount

    def executescript(self, script: str) -> None:
        """Execute a multi-statement script (schema migrations); does not persist."""
        with self._lock:
            self._conn.executescript(script)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """
        Group statements into one atomic unit with a single flush at commit.

        Any exception rolls the whole unit back and propagates. Nested
        calls run under a SAVEPOINT: an exception escaping the inner block
        undoes only its writes, and the outermost commit flushes everything.
        """
        with self._lock:
            if self._depth:
                savepoint = f"sp_{self._depth}"
                self._conn.execute(f"SAVEPOINT {savepoint}")
                self._depth += 1
                try:
                    yield
                except BaseException:
                    self._conn.execute(f"ROLLBACK TO {savepoint}")
                    self._conn.execute(f"RELEASE {savepoint}")
                    raise
                finally:
                    self._depth -= 1
                self._conn.execute(f"RELEASE {savepoint}")
                return

            self._conn.execute("BEGIN IMMEDIATE")
            self._depth = 1
            try:
                yield
            except BaseException:
                self._depth = 0
                self._conn.execute("ROLLBACK")
                raise
            self._depth = 0
            self._conn.execute("COMMIT")
            self.persist()

    def upsert(self, table: str, key_column: str, values: Mapping[str, Any]) -> None:
        """
        Insert a row; on key collision replace the other given columns instead.

        Columns not present in values (e.g. created_at) keep their stored
        value on update and their default on insert.
        """
        columns = list(values)
        updates = [column for column in columns if column != key_column]
        assignments = ", ".join(f"{column} = ?" for column in updates)
        placeholders = ", ".join("?" for _ in columns)

        with self.transaction():
            changed = self.run(
                f"UPDATE {table} SET {assignments} WHERE {key_column} = ?",
                [values[column] for column in updates] + [values[key_column]],
            )
            if changed == 0:
                self.run(
                    f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})",
                    [values[column] for column in columns],
                )

    def persist(self) -> None:
        """Serialize the whole dataset to the backing file; failures are logged only."""
        if self._path is None:
            return
        with self._lock:
            try:
                data = self._conn.serialize()
                self._path.parent.mkdir(parents=True, exist_ok=True)
                tmp_path = self._path.with_name(self._path.name + ".tmp")
                tmp_path.write_bytes(data)
                os.replace(tmp_path, self._path)
            except (OSError, sqlite3.Error) as e:
                logger.error("Database persist failed: %s - %s", self._path, e)


def run_migrations(store: SqliteStore) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration must be idempotent (use IF NOT EXISTS, etc.).

    Args:
        store: Open SqliteStore instance
    """
    # Structure: src/adapters/repository/store.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        raise RuntimeError(f"Migrations directory not found: {migrations_dir}")

    sql_files = sorted(migrations_dir.glob("*.sql"))
    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            store.executescript(sql_file.read_text())
        except sqlite3.Error as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
