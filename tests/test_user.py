import pytest

from libraryapp.book import Book, BookType
from libraryapp.errors import ConflictError, NotFoundError, ValidationError
from libraryapp.user import User, UserLoanHistory, UserLoanStatus


@pytest.mark.parametrize("name", ["", "   ", None])
def test_user_blank_name_rejected(name):
    with pytest.raises(ValidationError):
        User(name, None)

def test_validation_error_is_value_error():
    with pytest.raises(ValueError, match="User name cannot be blank."):
        User("")

def test_book_blank_name_rejected():
    with pytest.raises(ValidationError, match="Book name cannot be blank."):
        Book(" ", BookType.COMPUTER)

def test_update_name():
    user = User("A", 20)
    user.update_name("B")
    assert user.name == "B"
    assert user.age == 20

def test_update_name_blank_keeps_old_name():
    user = User("A")
    with pytest.raises(ValidationError):
        user.update_name("")
    assert user.name == "A"

def test_loan_book_appends_loaned_history():
    user = User("userA", id=7)
    history = user.loan_book(Book("A", BookType.COMPUTER))

    assert user.loan_histories == [history]
    assert history.user_id == 7
    assert history.book_name == "A"
    assert history.status == UserLoanStatus.LOANED

def test_return_book_marks_history_returned():
    user = User("userA")
    user.loan_book(Book("A", BookType.SCIENCE))

    history = user.return_book("A")

    assert history.status == UserLoanStatus.RETURNED
    assert history.is_return

def test_return_book_without_loan_raises():
    user = User("userA")
    with pytest.raises(NotFoundError):
        user.return_book("A")

def test_return_book_skips_already_returned_entries():
    user = User("userA", loan_histories=[
        UserLoanHistory(1, "A", UserLoanStatus.RETURNED, id=1),
        UserLoanHistory(1, "A", UserLoanStatus.LOANED, id=2),
    ])

    history = user.return_book("A")

    assert history.id == 2
    assert all(h.is_return for h in user.loan_histories)

def test_return_book_when_only_returned_entries_raises():
    user = User("userA", loan_histories=[UserLoanHistory(1, "A", UserLoanStatus.RETURNED)])
    with pytest.raises(NotFoundError):
        user.return_book("A")

def test_do_return_twice_is_conflict():
    history = UserLoanHistory(1, "A")
    history.do_return()
    with pytest.raises(ConflictError):
        history.do_return()
    assert history.status == UserLoanStatus.RETURNED
