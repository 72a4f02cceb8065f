"""
Embedded database adapter.

The highlighter never talks to the database; this module opens a SQLite file,
runs one statement and hands back plain rows for results.simplify().
"""
import logging
import sqlite3
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

DATABASE_SUFFIXES = {".db", ".sqlite", ".sqlite3"}
DEFAULT_MAX_ROWS = 10000


class QueryEngineError(Exception):
    """Raised when a database cannot be opened or a query fails."""
    pass


@dataclass
class PickerRequest:
    """What to ask a file dialog for; each toolkit uses the fields it supports."""
    title: str = "Select a SQLite database"
    initial_dir: Optional[str] = None
    file_types: List[Tuple[str, str]] = field(default_factory=lambda: [
        ("SQLite databases", "*.db *.sqlite *.sqlite3"),
        ("All files", "*.*"),
    ])

    def as_dialog_options(self):
        options = {"title": self.title, "filetypes": self.file_types}
        if self.initial_dir:
            options["initialdir"] = self.initial_dir
        return options


class QueryEngine:
    """One open database at a time; rows come back as column→value dicts."""

    def __init__(self, max_rows=DEFAULT_MAX_ROWS):
        self.max_rows = max_rows
        self._connection = None
        self._path: Optional[Path] = None

    @property
    def is_open(self) -> bool:
        return self._connection is not None

    @property
    def path(self) -> Optional[Path]:
        return self._path

    @property
    def name(self) -> Optional[str]:
        return self._path.stem if self._path else None

    def open(self, path):
        path = Path(path).expanduser()
        if not path.exists():
            raise QueryEngineError(f"The selected file does not exist: {path}")
        if not path.is_file():
            raise QueryEngineError(f"The selected path is not a file: {path}")
        if path.suffix.lower() not in DATABASE_SUFFIXES:
            raise QueryEngineError(
                f"The selected file is not a SQLite database ({', '.join(sorted(DATABASE_SUFFIXES))}): {path.name}"
            )

        self.close()
        connection = None
        try:
            # The IDE runs queries on a worker thread
            connection = sqlite3.connect(str(path), check_same_thread=False)
            # Touch the schema so a non-database file fails here, not on first query
            connection.execute("SELECT name FROM sqlite_master LIMIT 1").fetchall()
        except sqlite3.Error as e:
            if connection is not None:
                connection.close()
            raise QueryEngineError(f"Failed to open database: {e}") from e
        self._connection = connection
        self._path = path.resolve()
        logger.info("Opened database %s", self._path)

    def execute(self, sql) -> List[Dict[str, Any]]:
        if self._connection is None:
            raise QueryEngineError("Please open a database first.")
        sql = (sql or "").strip()
        if not sql:
            raise QueryEngineError("Enter a query to execute.")

        try:
            with self._connection:
                cursor = self._connection.execute(sql)
                if cursor.description is None:
                    rows = []
                else:
                    columns = [d[0] for d in cursor.description]
                    rows = [dict(zip(columns, values))
                            for values in cursor.fetchmany(self.max_rows)]
        except (sqlite3.Error, sqlite3.Warning) as e:
            raise QueryEngineError(str(e)) from e
        logger.info("Query returned %d row(s)", len(rows))
        return rows

    def close(self):
        if self._connection is not None:
            self._connection.close()
            logger.info("Closed database %s", self._path)
        self._connection = None
        self._path = None

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
        return False
