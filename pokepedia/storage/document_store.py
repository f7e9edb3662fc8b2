"""
Insert-only document store backed by SQLite.

Each collection is one table holding the JSON document next to the two
columns that carry its unique keys (``id`` and ``name``). There is no update
or upsert path: inserting a document whose ``id`` or ``name`` already exists
raises :class:`DuplicateKeyError`.
"""

from __future__ import annotations

import json
import logging
import re
import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Union

from pokepedia.configs.constants import Constants
from pokepedia.errors import DuplicateKeyError, MissingFieldError, PersistenceError, StoreConnectionError

LOGGER = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_UNIQUE_FAILED = re.compile(r"UNIQUE constraint failed: \w+\.(\w+)")

SCHEMA = """
CREATE TABLE IF NOT EXISTS {table} (
    id INTEGER NOT NULL UNIQUE,
    name TEXT NOT NULL UNIQUE,
    document TEXT NOT NULL
)
"""


class DocumentStore(Protocol):
    """Interface the catalog driver persists through."""

    def insert(self, document: Dict[str, Any]) -> None:
        """Insert one document; raise DuplicateKeyError or PersistenceError on failure."""

    def close(self) -> None:
        """Release the underlying connection."""


class SQLiteDocumentStore:
    """
    SQLite implementation of :class:`DocumentStore`.

    Parameters
    ----------
    path : Path | str
        Database file (parent directories are created) or ``":memory:"``.
    collection : str
        Table name; must be a plain SQL identifier.
    """

    def __init__(self, path: Union[str, Path] = Constants.STORE_PATH, collection: str = Constants.COLLECTION) -> None:
        if not _IDENTIFIER.match(collection):
            raise ValueError(f"invalid collection name {collection!r}")
        self.path = str(path)
        self.collection = collection
        self._conn: Optional[sqlite3.Connection] = None

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    def open(self) -> "SQLiteDocumentStore":
        """
        Connect and make sure the collection table exists.

        Raises
        ------
        StoreConnectionError
            When the database cannot be opened or initialised.
        """
        if self._conn is not None:
            return self
        try:
            if self.path != ":memory:":
                Path(self.path).parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.path)
            with conn:
                conn.execute(SCHEMA.format(table=self.collection))
        except (sqlite3.Error, OSError) as exc:
            raise StoreConnectionError(f"cannot open document store at {self.path}: {exc}") from exc
        self._conn = conn
        LOGGER.info(f"Opened document store {self.path} (collection {self.collection})")
        return self

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "SQLiteDocumentStore":
        return self.open()

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @property
    def connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StoreConnectionError("document store is not open")
        return self._conn

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert(self, document: Dict[str, Any]) -> None:
        """
        Insert *document*; the write is committed before this returns.

        Raises
        ------
        DuplicateKeyError
            A document with the same ``id`` or ``name`` already exists.
        PersistenceError
            Any other write failure (locked database, disk I/O, a value
            SQLite or JSON cannot encode).
        """
        for key in ("id", "name"):
            if document.get(key) is None:
                raise MissingFieldError("document", key)
        conn = self.connection
        try:
            body = json.dumps(document, ensure_ascii=False)
            with conn:
                conn.execute(
                    f"INSERT INTO {self.collection} (id, name, document) VALUES (?, ?, ?)",
                    (document["id"], document["name"], body),
                )
        except sqlite3.IntegrityError as exc:
            match = _UNIQUE_FAILED.search(str(exc))
            key = match.group(1) if match else "id"
            raise DuplicateKeyError(key, document.get(key)) from exc
        except (sqlite3.Error, OverflowError, TypeError, ValueError) as exc:
            raise PersistenceError(document.get("id"), exc) from exc

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, document_id: int) -> Optional[Dict[str, Any]]:
        row = self.connection.execute(
            f"SELECT document FROM {self.collection} WHERE id = ?", (document_id,)
        ).fetchone()
        return json.loads(row[0]) if row else None

    def find_by_name(self, name: str) -> Optional[Dict[str, Any]]:
        row = self.connection.execute(
            f"SELECT document FROM {self.collection} WHERE name = ?", (name,)
        ).fetchone()
        return json.loads(row[0]) if row else None

    def count(self) -> int:
        return self.connection.execute(f"SELECT COUNT(*) FROM {self.collection}").fetchone()[0]

    def names(self) -> List[str]:
        """Stored names in insertion order."""
        rows = self.connection.execute(f"SELECT name FROM {self.collection} ORDER BY rowid").fetchall()
        return [row[0] for row in rows]
