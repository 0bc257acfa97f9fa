import logging
from typing import List, Optional

from libraryapp import database
from libraryapp.book import Book, BookStat, BookType
from libraryapp.errors import ConflictError, NotFoundError
from libraryapp.repositories import BookRepository, UserLoanHistoryRepository, UserRepository
from libraryapp.user import UserLoanHistory, UserLoanStatus

logger = logging.getLogger(__name__)


class BookService:
    """Book registration, loans, returns and statistics."""

    def __init__(self, db_file: Optional[str] = None) -> None:
        self.db_file = db_file or database.DATABASE_FILE
        database.initialize_database(self.db_file)

    def create(self, name: str, type: BookType) -> Book:
        book = Book(name, type)
        with database.session(self.db_file) as conn:
            BookRepository(conn).save(book)
        logger.info(f"Book created: id={book.id}, name={book.name}, type={book.type.value}")
        return book

    def list_books(self) -> List[Book]:
        with database.session(self.db_file) as conn:
            return BookRepository(conn).find_all()

    def loan(self, user_name: str, book_name: str) -> UserLoanHistory:
        """Lend ``book_name`` to ``user_name``.

        The conflict check looks at every user's histories: a book name that is
        LOANED anywhere cannot be lent again until it is returned.
        """
        with database.session(self.db_file) as conn:
            users = UserRepository(conn)
            user = users.find_by_name(user_name)
            if user is None:
                logger.warning(f"Loan rejected: no user named {user_name}")
                raise NotFoundError(f"User '{user_name}' not found.")

            book = BookRepository(conn).find_by_name(book_name)
            if book is None:
                logger.warning(f"Loan rejected: no book named {book_name}")
                raise NotFoundError(f"Book '{book_name}' not found.")

            existing = UserLoanHistoryRepository(conn).find_by_book_name_and_status(
                book_name, UserLoanStatus.LOANED
            )
            if existing is not None:
                logger.warning(f"Loan rejected: '{book_name}' is already loaned")
                raise ConflictError(f"Book '{book_name}' is already loaned.")

            history = user.loan_book(book)
            users.save(user)
        logger.info(f"Book loaned: user={user_name}, book={book_name}")
        return history

    def return_book(self, user_name: str, book_name: str) -> UserLoanHistory:
        with database.session(self.db_file) as conn:
            users = UserRepository(conn)
            user = users.find_by_name(user_name)
            if user is None:
                logger.warning(f"Return rejected: no user named {user_name}")
                raise NotFoundError(f"User '{user_name}' not found.")
            history = user.return_book(book_name)
            users.save(user)
        logger.info(f"Book returned: user={user_name}, book={book_name}")
        return history

    def count_loaned(self) -> int:
        with database.session(self.db_file) as conn:
            return UserLoanHistoryRepository(conn).count_by_status(UserLoanStatus.LOANED)

    def stats_by_category(self) -> List[BookStat]:
        """Book count per category; categories without books are omitted."""
        with database.session(self.db_file) as conn:
            return BookRepository(conn).count_by_type()
