"""Repository helpers over a single SQLite connection.

Each repository wraps the connection of the current ``database.session`` so
that everything a service does in one call commits or rolls back together.
"""
from __future__ import annotations

import sqlite3
from typing import Iterable, List, Optional

from libraryapp.book import Book, BookStat, BookType
from libraryapp.user import User, UserLoanHistory, UserLoanStatus


class UserLoanHistoryRepository:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def save(self, history: UserLoanHistory) -> UserLoanHistory:
        if history.id is None:
            cursor = self.conn.execute(
                "INSERT INTO user_loan_history (user_id, book_name, status) VALUES (?, ?, ?)",
                (history.user_id, history.book_name, history.status.value),
            )
            history.id = cursor.lastrowid
        else:
            self.conn.execute(
                "UPDATE user_loan_history SET status = ? WHERE id = ?",
                (history.status.value, history.id),
            )
        return history

    def save_all(self, histories: Iterable[UserLoanHistory]) -> List[UserLoanHistory]:
        return [self.save(h) for h in histories]

    def find_all(self) -> List[UserLoanHistory]:
        rows = self.conn.execute(
            "SELECT id, user_id, book_name, status FROM user_loan_history ORDER BY id"
        ).fetchall()
        return [UserLoanHistory.from_dict(dict(row)) for row in rows]

    def find_by_user_id(self, user_id: int) -> List[UserLoanHistory]:
        rows = self.conn.execute(
            "SELECT id, user_id, book_name, status FROM user_loan_history WHERE user_id = ? ORDER BY id",
            (user_id,),
        ).fetchall()
        return [UserLoanHistory.from_dict(dict(row)) for row in rows]

    def find_by_book_name_and_status(self, book_name: str, status: UserLoanStatus) -> Optional[UserLoanHistory]:
        row = self.conn.execute(
            "SELECT id, user_id, book_name, status FROM user_loan_history "
            "WHERE book_name = ? AND status = ? ORDER BY id LIMIT 1",
            (book_name, status.value),
        ).fetchone()
        return UserLoanHistory.from_dict(dict(row)) if row else None

    def count_by_status(self, status: UserLoanStatus) -> int:
        row = self.conn.execute(
            "SELECT COUNT(*) FROM user_loan_history WHERE status = ?", (status.value,)
        ).fetchone()
        return int(row[0])


class UserRepository:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        self.histories = UserLoanHistoryRepository(conn)

    def save(self, user: User) -> User:
        """Insert or update the user, then write its loan histories."""
        if user.id is None:
            cursor = self.conn.execute(
                "INSERT INTO users (name, age) VALUES (?, ?)", (user.name, user.age)
            )
            user.id = cursor.lastrowid
        else:
            self.conn.execute(
                "UPDATE users SET name = ?, age = ? WHERE id = ?", (user.name, user.age, user.id)
            )
        for history in user.loan_histories:
            history.user_id = user.id
            self.histories.save(history)
        return user

    def save_all(self, users: Iterable[User]) -> List[User]:
        return [self.save(u) for u in users]

    def _load(self, row: Optional[sqlite3.Row]) -> Optional[User]:
        if row is None:
            return None
        user = User.from_dict(dict(row))
        user.loan_histories = self.histories.find_by_user_id(user.id)
        return user

    def find_by_id(self, user_id: int) -> Optional[User]:
        row = self.conn.execute("SELECT id, name, age FROM users WHERE id = ?", (user_id,)).fetchone()
        return self._load(row)

    def find_by_name(self, name: str) -> Optional[User]:
        row = self.conn.execute(
            "SELECT id, name, age FROM users WHERE name = ? ORDER BY id LIMIT 1", (name,)
        ).fetchone()
        return self._load(row)

    def find_all(self) -> List[User]:
        rows = self.conn.execute("SELECT id, name, age FROM users ORDER BY id").fetchall()
        return [self._load(row) for row in rows]

    def delete(self, user: User) -> None:
        # loan histories go with the user through ON DELETE CASCADE
        self.conn.execute("DELETE FROM users WHERE id = ?", (user.id,))
        user.loan_histories = []

    def delete_all(self) -> None:
        self.conn.execute("DELETE FROM users")


class BookRepository:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def save(self, book: Book) -> Book:
        if book.id is None:
            cursor = self.conn.execute(
                "INSERT INTO books (name, type) VALUES (?, ?)", (book.name, book.type.value)
            )
            book.id = cursor.lastrowid
        else:
            self.conn.execute(
                "UPDATE books SET name = ?, type = ? WHERE id = ?", (book.name, book.type.value, book.id)
            )
        return book

    def save_all(self, books: Iterable[Book]) -> List[Book]:
        return [self.save(b) for b in books]

    def find_by_name(self, name: str) -> Optional[Book]:
        row = self.conn.execute(
            "SELECT id, name, type FROM books WHERE name = ? ORDER BY id LIMIT 1", (name,)
        ).fetchone()
        return Book.from_dict(dict(row)) if row else None

    def find_all(self) -> List[Book]:
        rows = self.conn.execute("SELECT id, name, type FROM books ORDER BY id").fetchall()
        return [Book.from_dict(dict(row)) for row in rows]

    def count_by_type(self) -> List[BookStat]:
        rows = self.conn.execute(
            "SELECT type, COUNT(*) AS count FROM books GROUP BY type ORDER BY type"
        ).fetchall()
        return [BookStat(BookType(row["type"]), int(row["count"])) for row in rows]

    def delete_all(self) -> None:
        self.conn.execute("DELETE FROM books")
