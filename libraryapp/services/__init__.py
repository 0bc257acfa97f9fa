"""Library App - Services Package

This package contains the domain services:
- User service (register, rename, delete users)
- Book service (register books, loans, returns, statistics)
"""

from libraryapp.services.book_service import BookService
from libraryapp.services.user_service import UserService

__all__ = ["BookService", "UserService"]
