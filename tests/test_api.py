import pytest
from fastapi.testclient import TestClient

from libraryapp.api import app, get_book_service, get_user_service
from libraryapp.config import settings
from libraryapp.services import BookService, UserService

HEADERS = {"X-API-Key": settings.api_key}


@pytest.fixture
def client(db_file):
    # Point the API at a per-test database
    app.dependency_overrides[get_user_service] = lambda: UserService(db_file=db_file)
    app.dependency_overrides[get_book_service] = lambda: BookService(db_file=db_file)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["db"] is True

def test_create_user_requires_api_key(client):
    response = client.post("/user", headers={"X-API-Key": "invalid-key"}, json={"name": "A"})
    assert response.status_code == 403

def test_create_and_list_users(client):
    response = client.post("/user", headers=HEADERS, json={"name": "A", "age": 20})
    assert response.status_code == 200
    assert response.json()["name"] == "A"

    response = client.get("/user")
    assert response.status_code == 200
    assert response.json() == [{"id": 1, "name": "A", "age": 20}]

def test_create_user_blank_name(client):
    response = client.post("/user", headers=HEADERS, json={"name": " "})
    assert response.status_code == 400
    assert response.json()["detail"] == "User name cannot be blank."

def test_update_user_name(client):
    user_id = client.post("/user", headers=HEADERS, json={"name": "A"}).json()["id"]

    response = client.put("/user", headers=HEADERS, json={"id": user_id, "name": "B"})

    assert response.status_code == 200
    assert response.json()["name"] == "B"

def test_update_missing_user(client):
    response = client.put("/user", headers=HEADERS, json={"id": 42, "name": "B"})
    assert response.status_code == 404

def test_delete_user(client):
    client.post("/user", headers=HEADERS, json={"name": "A"})

    response = client.delete("/user", headers=HEADERS, params={"name": "A"})

    assert response.status_code == 200
    assert client.get("/user").json() == []
    assert client.delete("/user", headers=HEADERS, params={"name": "A"}).status_code == 404

def test_create_book_invalid_type(client):
    response = client.post("/book", headers=HEADERS, json={"name": "A", "type": "COOKING"})
    assert response.status_code == 422

def test_loan_flow(client):
    client.post("/user", headers=HEADERS, json={"name": "userA"})
    client.post("/user", headers=HEADERS, json={"name": "userB"})
    client.post("/book", headers=HEADERS, json={"name": "A", "type": "COMPUTER"})
    payload = {"user_name": "userA", "book_name": "A"}

    assert client.post("/book/loan", headers=HEADERS, json=payload).status_code == 200
    assert client.get("/book/loan").json() == 1

    conflict = client.post("/book/loan", headers=HEADERS, json={"user_name": "userB", "book_name": "A"})
    assert conflict.status_code == 409
    assert conflict.json()["detail"] == "Book 'A' is already loaned."

    histories = client.get("/user/loan").json()
    assert histories[0] == {"name": "userA", "books": [{"name": "A", "is_return": False}]}
    assert histories[1] == {"name": "userB", "books": []}

    assert client.put("/book/return", headers=HEADERS, json=payload).status_code == 200
    assert client.get("/book/loan").json() == 0
    assert client.put("/book/return", headers=HEADERS, json=payload).status_code == 404

def test_loan_unknown_user(client):
    client.post("/book", headers=HEADERS, json={"name": "A", "type": "COMPUTER"})
    response = client.post("/book/loan", headers=HEADERS, json={"user_name": "ghost", "book_name": "A"})
    assert response.status_code == 404

def test_book_statistics(client):
    for name, book_type in [("A", "COMPUTER"), ("B", "COMPUTER"), ("C", "SCIENCE")]:
        client.post("/book", headers=HEADERS, json={"name": name, "type": book_type})

    response = client.get("/book/stat")

    assert response.status_code == 200
    stats = {item["type"]: item["count"] for item in response.json()}
    assert stats == {"COMPUTER": 2, "SCIENCE": 1}
    assert len(client.get("/book").json()) == 3
