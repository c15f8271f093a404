from fastapi.testclient import TestClient
from unittest.mock import MagicMock
from sqlalchemy.orm import Session
from fastapi import Depends
from identity_platform.identity_platform.identity_service.main import app, get_user_service, status_code_for
from identity_platform.identity_platform.identity_service.auth import PasswordHasher, TokenIssuer
from identity_platform.identity_platform.identity_service.service import UserService
from identity_platform.identity_platform.identity_service.store import SqlAlchemyUserStore
import pytest
import uuid
from identity_platform.identity_platform.identity_service.db import Base, engine, get_db
from identity_platform.identity_platform.identity_service.errors import (
    ClientError,
    ServerError,
    DuplicateEmailError,
    TokenIssuanceError,
    StoreError,
)

@pytest.fixture(scope="session", autouse=True)
def setup_database():
    Base.metadata.create_all(bind=engine)


@pytest.fixture(scope="session")
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture(autouse=True)
def reset_database():
    # Drop all tables and recreate them before each test
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


def unique_email():
    return f"user_{uuid.uuid4().hex[:8]}@example.com"


def register(client, email, password="testing12345"):
    response = client.post("/register", json={"email": email, "password": password})
    assert response.status_code == 200
    return response.json()


def test_register_and_login(client):
    email = unique_email()
    password = "testing12345"

    registered = register(client, email, password)
    assert registered["email"] == email
    assert registered["biometric_key"] is None
    # Registration does not log the user in
    assert registered["access_token"] is None
    assert "password" not in registered

    login = client.post("/login", json={"email": email, "password": password})
    assert login.status_code == 200
    body = login.json()
    assert body["id"] == registered["id"]
    assert body["access_token"]
    assert "password" not in body


def test_register_duplicate_email(client):
    email = unique_email()
    register(client, email)

    response = client.post("/register", json={"email": email, "password": "another"})
    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Email is already taken"
    assert body["code"] == 400
    assert body["path"] == "/register"
    assert body["timestamp"]


def test_register_missing_fields(client):
    # Missing required fields should return 422
    response = client.post("/register", json={"email": unique_email()})
    assert response.status_code == 422


def test_register_rejects_invalid_input(client):
    assert client.post("/register", json={"email": "not-an-email", "password": "pw"}).status_code == 422
    assert client.post("/register", json={"email": unique_email(), "password": ""}).status_code == 422


def test_login_invalid_password(client):
    email = unique_email()
    register(client, email, "goodpassword")

    bad_login = client.post("/login", json={"email": email, "password": "wrongpassword"})
    assert bad_login.status_code == 401


def test_login_unknown_email_matches_wrong_password(client):
    email = unique_email()
    register(client, email, "goodpassword")

    unknown = client.post("/login", json={"email": unique_email(), "password": "goodpassword"})
    wrong = client.post("/login", json={"email": email, "password": "wrongpassword"})
    assert unknown.status_code == wrong.status_code == 401
    assert unknown.json()["message"] == wrong.json()["message"]


def test_biometric_flow(client):
    user = register(client, unique_email())

    missing = client.post("/biometric-login", json={"biometric_key": "face-123"})
    assert missing.status_code == 401
    assert missing.json()["message"] == "Biometric key not found"

    update = client.post("/biometric-key", json={"user_id": user["id"], "biometric_key": "face-123"})
    assert update.status_code == 200
    assert update.json() == {"message": "Update Biometrics successfully"}

    login = client.post("/biometric-login", json={"biometric_key": "face-123"})
    assert login.status_code == 200
    assert login.json()["id"] == user["id"]
    assert login.json()["biometric_key"] == "face-123"
    assert login.json()["access_token"]


def test_biometric_key_conflict(client):
    user_a = register(client, unique_email())
    user_b = register(client, unique_email())

    first = client.post("/biometric-key", json={"user_id": user_a["id"], "biometric_key": "face-123"})
    assert first.status_code == 200

    second = client.post("/biometric-key", json={"user_id": user_b["id"], "biometric_key": "face-123"})
    assert second.status_code == 400
    assert second.json()["message"] == "Biometric key already belongs to another user"

    owner = client.get(f"/users/{user_a['id']}")
    assert owner.json()["biometric_key"] == "face-123"


def test_biometric_key_resubmission_is_idempotent(client):
    user = register(client, unique_email())
    for _ in range(2):
        response = client.post("/biometric-key", json={"user_id": user["id"], "biometric_key": "face-123"})
        assert response.status_code == 200


def test_biometric_key_unknown_user(client):
    response = client.post("/biometric-key", json={"user_id": "missing", "biometric_key": "face-123"})
    assert response.status_code == 500
    assert response.json()["code"] == 500


def test_get_user_by_id(client):
    user = register(client, unique_email())

    found = client.get(f"/users/{user['id']}")
    assert found.status_code == 200
    assert found.json()["email"] == user["email"]
    assert found.json()["access_token"] is None

    missing = client.get("/users/missing")
    assert missing.status_code == 404
    assert missing.json()["message"] == "User not found"


def test_status_code_fallbacks():
    class UnmappedClientError(ClientError):
        pass

    assert status_code_for(DuplicateEmailError()) == 400
    assert status_code_for(TokenIssuanceError()) == 500
    assert status_code_for(UnmappedClientError()) == 400
    assert status_code_for(ServerError()) == 500
    assert status_code_for(StoreError()) == 500


def test_login_signer_failure_returns_error_body(client):
    email = unique_email()
    register(client, email, "goodpassword")

    def broken_signer_service(db: Session = Depends(get_db)):
        return UserService(SqlAlchemyUserStore(db), PasswordHasher(), TokenIssuer(algorithm="not-an-algorithm"))

    app.dependency_overrides[get_user_service] = broken_signer_service
    try:
        response = client.post("/login", json={"email": email, "password": "goodpassword"})
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    body = response.json()
    assert body["message"] == "Failed to issue access token"
    assert body["code"] == 500
    assert body["path"] == "/login"
    assert body["timestamp"]
    assert "access_token" not in body


def test_unexpected_error_returns_error_body():
    store = MagicMock()
    store.find_by_email.side_effect = RuntimeError("connection reset")
    app.dependency_overrides[get_user_service] = lambda: UserService(store, PasswordHasher(), TokenIssuer())
    try:
        # Server errors are answered by the app rather than re-raised into the test
        response = TestClient(app, raise_server_exceptions=False).post(
            "/login", json={"email": unique_email(), "password": "pw"}
        )
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    body = response.json()
    assert body["message"] == "Internal server error"
    assert body["code"] == 500
    assert body["path"] == "/login"
    assert "connection reset" not in body["message"]
