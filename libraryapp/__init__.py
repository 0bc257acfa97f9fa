"""Library App - Core Application Package

This package contains the core application modules including:
- API endpoints (api.py)
- CLI interface (main.py)
- Domain models (book.py, user.py)
- Database layer (database.py, repositories.py)
- User and book services (services/)
"""

__version__ = "1.0.0"
