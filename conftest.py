import pytest

from libraryapp import database
from libraryapp.services import BookService, UserService


@pytest.fixture
def db_file(tmp_path):
    # Fresh SQLite file per test
    return str(tmp_path / "library_test.db")

@pytest.fixture
def user_service(db_file):
    return UserService(db_file=db_file)

@pytest.fixture
def book_service(db_file):
    return BookService(db_file=db_file)

@pytest.fixture
def db(db_file):
    """Open a committed session on the test database, for seeding and assertions."""
    database.initialize_database(db_file)
    return lambda: database.session(db_file)
