from __future__ import annotations

from enum import Enum

from libraryapp.errors import ValidationError


class BookType(Enum):
    """Book categories"""
    COMPUTER = "COMPUTER"
    ECONOMY = "ECONOMY"
    SOCIETY = "SOCIETY"
    LANGUAGE = "LANGUAGE"
    SCIENCE = "SCIENCE"


class Book:
    """Represents a single book registered in the library."""

    def __init__(self, name: str, type: BookType, id: int | None = None) -> None:
        if name is None or not name.strip():
            raise ValidationError("name", "Book name cannot be blank.")
        self.name = name
        self.type = BookType(type)
        self.id = id

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.name} ({self.type.value})"

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "type": self.type.value}

    @staticmethod
    def from_dict(data: dict) -> "Book":
        return Book(name=data["name"], type=BookType(data["type"]), id=data.get("id"))


class BookStat:
    """Number of books registered under one category."""

    def __init__(self, type: BookType, count: int) -> None:
        self.type = type
        self.count = count

    def __repr__(self) -> str:  # pragma: no cover
        return f"BookStat(type={self.type.value}, count={self.count})"

    def to_dict(self) -> dict:
        return {"type": self.type.value, "count": self.count}
