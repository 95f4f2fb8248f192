import logging
import sqlite3
from pathlib import Path

from core import StoreUnavailableError


logger = logging.getLogger(__name__)


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS questions (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    topics TEXT NOT NULL DEFAULT '[]',
    difficulty TEXT NOT NULL,
    source TEXT,
    link TEXT,
    date_solved TEXT,
    code TEXT,
    explanation TEXT,
    tags TEXT NOT NULL DEFAULT '[]',
    created_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS companies (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    salary TEXT,
    status TEXT NOT NULL DEFAULT 'APPLIED',
    feedback TEXT,
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_questions_created_at ON questions(created_at);
CREATE INDEX IF NOT EXISTS idx_companies_created_at ON companies(created_at);
"""


def connect(db_path: Path) -> sqlite3.Connection:
    """Connect to the SQLite database and create the schema."""
    try:
        db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(db_path))
        conn.row_factory = sqlite3.Row
        conn.executescript(SCHEMA_SQL)
        conn.commit()
    except (OSError, sqlite3.Error) as exc:
        logger.error("Cannot open record store at %s: %s", db_path, exc)
        raise StoreUnavailableError(f"Cannot open record store: {exc}") from exc
    return conn
