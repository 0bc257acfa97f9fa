import logging
from typing import List, Optional

from libraryapp import database
from libraryapp.errors import NotFoundError
from libraryapp.repositories import UserRepository
from libraryapp.user import User

logger = logging.getLogger(__name__)


class UserService:
    """Registers, renames and deletes library users."""

    def __init__(self, db_file: Optional[str] = None) -> None:
        self.db_file = db_file or database.DATABASE_FILE
        database.initialize_database(self.db_file)

    def create(self, name: str, age: Optional[int] = None) -> User:
        """Persist a new user. A blank name raises ValidationError before anything is written."""
        user = User(name, age)
        with database.session(self.db_file) as conn:
            UserRepository(conn).save(user)
        logger.info(f"User created: id={user.id}, name={user.name}")
        return user

    def list_users(self) -> List[User]:
        with database.session(self.db_file) as conn:
            return UserRepository(conn).find_all()

    def list_loan_histories(self) -> List[User]:
        """Every user together with their loan histories."""
        with database.session(self.db_file) as conn:
            return UserRepository(conn).find_all()

    def update_name(self, user_id: int, name: str) -> User:
        with database.session(self.db_file) as conn:
            users = UserRepository(conn)
            user = users.find_by_id(user_id)
            if user is None:
                logger.warning(f"Rename rejected: no user with id={user_id}")
                raise NotFoundError(f"User with id {user_id} not found.")
            user.update_name(name)
            users.save(user)
        logger.info(f"User renamed: id={user_id}, name={name}")
        return user

    def delete(self, name: str) -> None:
        """Delete the first user called ``name`` along with their loan histories."""
        with database.session(self.db_file) as conn:
            users = UserRepository(conn)
            user = users.find_by_name(name)
            if user is None:
                logger.warning(f"Delete rejected: no user named {name}")
                raise NotFoundError(f"User '{name}' not found.")
            users.delete(user)
        logger.info(f"User deleted: id={user.id}, name={name}")
