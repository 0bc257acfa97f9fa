import logging
from datetime import datetime
from functools import lru_cache
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, Security
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import APIKeyHeader
from pydantic import BaseModel, Field

from libraryapp.book import BookType
from libraryapp.config import settings
from libraryapp.database import get_db_connection
from libraryapp.errors import ConflictError, LibraryError, NotFoundError, ValidationError
from libraryapp.services import BookService, UserService
from libraryapp.user import User

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Library Management API", version=settings.app_version)

# --- CORS ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Services ---
@lru_cache()
def get_user_service() -> UserService:
    return UserService()

@lru_cache()
def get_book_service() -> BookService:
    return BookService()

# --- Security ---
api_key_header = APIKeyHeader(name="X-API-Key")

def get_api_key(api_key: str = Security(api_key_header)):
    """Dependency validating the API key on mutating endpoints."""
    if api_key == settings.api_key:
        return api_key
    else:
        raise HTTPException(
            status_code=403,
            detail="Could not validate credentials",
        )

# --- Error mapping ---
_STATUS_BY_ERROR = {
    NotFoundError: 404,
    ConflictError: 409,
    ValidationError: 400,
}

@app.exception_handler(LibraryError)
async def library_error_handler(request: Request, exc: LibraryError):
    status_code = next((code for cls, code in _STATUS_BY_ERROR.items() if isinstance(exc, cls)), 400)
    logger.info(f"{request.method} {request.url.path} -> {status_code}: {exc.message}")
    return JSONResponse(status_code=status_code, content={"detail": exc.message})

# --- Models ---
class UserCreateRequest(BaseModel):
    name: str
    age: Optional[int] = None

class UserUpdateRequest(BaseModel):
    id: int
    name: str

class UserResponse(BaseModel):
    id: int
    name: str
    age: Optional[int] = None

class BookHistoryResponse(BaseModel):
    name: str
    is_return: bool

class UserLoanHistoryResponse(BaseModel):
    name: str
    books: List[BookHistoryResponse]

class BookRequest(BaseModel):
    name: str
    type: BookType

class BookResponse(BaseModel):
    id: int
    name: str
    type: BookType

class BookLoanRequest(BaseModel):
    user_name: str = Field(description="Name of the borrowing user")
    book_name: str = Field(description="Name of the book to lend")

class BookReturnRequest(BaseModel):
    user_name: str
    book_name: str

class BookStatResponse(BaseModel):
    type: BookType
    count: int

class MessageResponse(BaseModel):
    message: str

def _user_loan_response(user: User) -> UserLoanHistoryResponse:
    return UserLoanHistoryResponse(
        name=user.name,
        books=[BookHistoryResponse(name=h.book_name, is_return=h.is_return) for h in user.loan_histories],
    )

# --- Health ---
@app.get("/health")
def health(users: UserService = Depends(get_user_service)):
    """Lightweight health endpoint with a quick database round trip."""
    db_ok = True
    try:
        conn = get_db_connection(users.db_file)
        try:
            conn.execute("SELECT 1")
        finally:
            conn.close()
    except Exception as e:
        logger.error(f"Health check database probe failed: {e}")
        db_ok = False
    return {
        "status": "healthy" if db_ok else "degraded",
        "timestamp": datetime.utcnow().isoformat() + "Z",
        "version": settings.app_version,
        "db": db_ok,
    }

# --- Users ---
@app.post("/user", response_model=UserResponse, dependencies=[Depends(get_api_key)])
def save_user(request: UserCreateRequest, users: UserService = Depends(get_user_service)):
    """Register a new user."""
    user = users.create(request.name, request.age)
    return UserResponse(**user.to_dict())

@app.get("/user", response_model=List[UserResponse])
def get_users(users: UserService = Depends(get_user_service)):
    return [UserResponse(**u.to_dict()) for u in users.list_users()]

@app.put("/user", response_model=UserResponse, dependencies=[Depends(get_api_key)])
def update_user_name(request: UserUpdateRequest, users: UserService = Depends(get_user_service)):
    """Rename the user with the given id."""
    user = users.update_name(request.id, request.name)
    return UserResponse(**user.to_dict())

@app.delete("/user", response_model=MessageResponse, dependencies=[Depends(get_api_key)])
def delete_user(name: str = Query(..., description="Name of the user to delete"),
                users: UserService = Depends(get_user_service)):
    """Delete a user by name; their loan histories are deleted too."""
    users.delete(name)
    return MessageResponse(message=f"User '{name}' deleted.")

@app.get("/user/loan", response_model=List[UserLoanHistoryResponse])
def get_user_loan_histories(users: UserService = Depends(get_user_service)):
    return [_user_loan_response(u) for u in users.list_loan_histories()]

# --- Books ---
@app.post("/book", response_model=BookResponse, dependencies=[Depends(get_api_key)])
def save_book(request: BookRequest, books: BookService = Depends(get_book_service)):
    book = books.create(request.name, request.type)
    return BookResponse(**book.to_dict())

@app.get("/book", response_model=List[BookResponse])
def get_books(books: BookService = Depends(get_book_service)):
    return [BookResponse(**b.to_dict()) for b in books.list_books()]

@app.post("/book/loan", response_model=MessageResponse, dependencies=[Depends(get_api_key)])
def loan_book(request: BookLoanRequest, books: BookService = Depends(get_book_service)):
    """Lend a book. 409 when the book is already on loan."""
    books.loan(request.user_name, request.book_name)
    return MessageResponse(message=f"'{request.book_name}' loaned to {request.user_name}.")

@app.put("/book/return", response_model=MessageResponse, dependencies=[Depends(get_api_key)])
def return_book(request: BookReturnRequest, books: BookService = Depends(get_book_service)):
    books.return_book(request.user_name, request.book_name)
    return MessageResponse(message=f"'{request.book_name}' returned by {request.user_name}.")

@app.get("/book/loan", response_model=int)
def count_loaned_books(books: BookService = Depends(get_book_service)):
    """Number of books currently on loan."""
    return books.count_loaned()

@app.get("/book/stat", response_model=List[BookStatResponse])
def get_book_statistics(books: BookService = Depends(get_book_service)):
    """Number of books per category."""
    return [BookStatResponse(type=s.type, count=s.count) for s in books.stats_by_category()]
