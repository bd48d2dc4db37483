from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from minimal_api.core.services import UserManagementService

VALID_PASSWORD = "Passw0rd!"


@pytest.fixture
def user_management(session: Session) -> UserManagementService:
    return UserManagementService(session)


@pytest.fixture
def registration() -> dict[str, str]:
    return {"username": "alice", "email": "alice@example.com", "password": VALID_PASSWORD}


@pytest.fixture
def auth_token(client: TestClient, registration: dict[str, str]) -> str:
    """Token returned by registering the default test account."""
    response = client.post("/register", json=registration)
    assert response.status_code == 200, response.text
    return response.json()


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def product_payload() -> dict:
    return {
        "name": "Keyboard",
        "description": "Mechanical keyboard with brown switches",
        "price": 59.9,
        "amount": 12.5,
        "active": True,
        "teste": False,
    }
