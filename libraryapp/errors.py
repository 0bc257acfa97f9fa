"""
Domain Exceptions
=================

Errors raised by the services when a business rule is violated. The API and
CLI layers translate them; nothing here is retried or recovered.
"""


class LibraryError(Exception):
    """Base exception for all domain errors"""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(LibraryError, LookupError):
    """A referenced user, book or loan does not exist"""


class ConflictError(LibraryError):
    """The operation clashes with the current state (e.g. a book already on loan)"""


class ValidationError(LibraryError, ValueError):
    """Input rejected before anything is persisted (e.g. a blank name)"""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message)
