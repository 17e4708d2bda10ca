import os
import tempfile

# settings are read on import, so point them at a scratch dir first
_TMP_DIR = tempfile.mkdtemp(prefix="helloworld-tests-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_TMP_DIR, "test.db")
os.environ["UPLOAD_DIR"] = os.path.join(_TMP_DIR, "uploads")
os.environ["SECRET_KEY"] = "test-secret"
os.environ["SESSION_TTL_MINUTES"] = "30"

import pytest
from fastapi.testclient import TestClient

from app.db.base_class import Base
from app.db.session import SessionLocal, engine
from app.main import app
from app.models import friendship, user  # noqa: F401

PASSWORD = "Gomsu1045!0$%"


@pytest.fixture(autouse=True)
def clean_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def session_factory():
    return SessionLocal


@pytest.fixture
def client():
    # entering the client runs the lifespan, so each test gets a fresh registry
    with TestClient(app) as c:
        yield c


def signup(client, user_id, password=PASSWORD, **extra):
    body = {"user_id": user_id, "password": password, "email": f"{user_id}@test.com"}
    body.update(extra)
    response = client.post("/users/signup", json=body)
    assert response.status_code == 201, response.text
    return response


def login(client, user_id, password=PASSWORD):
    return client.post("/users/login", json={"user_id": user_id, "password": password})


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def logged_in(client):
    """Sign up and log in users by id, returning auth headers for each."""

    def _make(*user_ids):
        headers = []
        for user_id in user_ids:
            signup(client, user_id)
            response = login(client, user_id)
            assert response.status_code == 200, response.text
            headers.append(auth_headers(response.json()["access_token"]))
        return headers if len(headers) > 1 else headers[0]

    return _make
