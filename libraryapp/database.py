import logging
import os
import sqlite3
from contextlib import contextmanager
from typing import Iterator, Optional

from dotenv import load_dotenv

from libraryapp.config import settings

# Make sure .env is loaded before LIBRARY_DB_FILE is read below.
load_dotenv()

logger = logging.getLogger(__name__)

# Default database file.
# Priority:
# 1) LIBRARY_DB_FILE (explicit override)
# 2) settings.data_file (LIBRARY_DATA_FILE or "library.db")
DATABASE_FILE = os.environ.get("LIBRARY_DB_FILE") or settings.data_file


def get_db_connection(db_file: Optional[str] = None) -> sqlite3.Connection:
    """Open a connection to the SQLite database with foreign keys enforced."""
    conn = sqlite3.connect(db_file or DATABASE_FILE)
    conn.row_factory = sqlite3.Row
    # SQLite ignores ON DELETE CASCADE unless this is set on every connection
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


@contextmanager
def session(db_file: Optional[str] = None) -> Iterator[sqlite3.Connection]:
    """One transaction: commit on success, roll back on any error, always close."""
    conn = get_db_connection(db_file)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def create_tables(db_file: Optional[str] = None) -> None:
    """Create the tables if they do not exist yet."""
    conn = get_db_connection(db_file)
    try:
        cursor = conn.cursor()
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS users (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                age INTEGER
            )
        """)
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS books (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                type TEXT NOT NULL
            )
        """)
        # book_name is denormalized on purpose: histories survive book deletion
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS user_loan_history (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id INTEGER NOT NULL,
                book_name TEXT NOT NULL,
                status TEXT NOT NULL CHECK(status IN ('LOANED', 'RETURNED')),
                FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
            )
        """)

        cursor.execute("CREATE INDEX IF NOT EXISTS idx_users_name ON users(name)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_books_name ON books(name)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_books_type ON books(type)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_user_loan_history_user_id ON user_loan_history(user_id)")
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_user_loan_history_book_status "
            "ON user_loan_history(book_name, status)"
        )
        conn.commit()
    finally:
        conn.close()


def initialize_database(db_file: Optional[str] = None) -> None:
    """Initialize the database, creating the tables when needed."""
    create_tables(db_file)
    logger.debug(f"Database ready at {db_file or DATABASE_FILE}")
