from __future__ import annotations

from enum import Enum

from libraryapp.book import Book
from libraryapp.errors import ConflictError, NotFoundError, ValidationError


class UserLoanStatus(Enum):
    """Loan history states. LOANED -> RETURNED is the only transition."""
    LOANED = "LOANED"
    RETURNED = "RETURNED"


class UserLoanHistory:
    """One user borrowing one named book."""

    def __init__(self, user_id: int | None, book_name: str,
                 status: UserLoanStatus = UserLoanStatus.LOANED, id: int | None = None) -> None:
        self.user_id = user_id
        self.book_name = book_name
        self.status = UserLoanStatus(status)
        self.id = id

    @property
    def is_return(self) -> bool:
        return self.status == UserLoanStatus.RETURNED

    def do_return(self) -> None:
        if self.is_return:
            raise ConflictError(f"'{self.book_name}' has already been returned.")
        self.status = UserLoanStatus.RETURNED

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "book_name": self.book_name,
            "status": self.status.value,
        }

    @staticmethod
    def from_dict(data: dict) -> "UserLoanHistory":
        return UserLoanHistory(
            user_id=data["user_id"],
            book_name=data["book_name"],
            status=UserLoanStatus(data["status"]),
            id=data.get("id"),
        )


class User:
    """A library member. Owns its loan histories; deleting it deletes them."""

    def __init__(self, name: str, age: int | None = None,
                 loan_histories: list[UserLoanHistory] | None = None, id: int | None = None) -> None:
        self._check_name(name)
        self.name = name
        self.age = age
        self.loan_histories: list[UserLoanHistory] = loan_histories or []
        self.id = id

    @staticmethod
    def _check_name(name: str | None) -> None:
        if name is None or not name.strip():
            raise ValidationError("name", "User name cannot be blank.")

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.name} (id={self.id})"

    def update_name(self, name: str) -> None:
        self._check_name(name)
        self.name = name

    def loan_book(self, book: Book) -> UserLoanHistory:
        history = UserLoanHistory(self.id, book.name, UserLoanStatus.LOANED)
        self.loan_histories.append(history)
        return history

    def return_book(self, book_name: str) -> UserLoanHistory:
        """Mark the first outstanding loan of ``book_name`` as returned."""
        history = next(
            (h for h in self.loan_histories
             if h.book_name == book_name and h.status == UserLoanStatus.LOANED),
            None,
        )
        if history is None:
            raise NotFoundError(f"User '{self.name}' has no outstanding loan for '{book_name}'.")
        history.do_return()
        return history

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "age": self.age}

    @staticmethod
    def from_dict(data: dict) -> "User":
        return User(name=data["name"], age=data.get("age"), id=data.get("id"))
