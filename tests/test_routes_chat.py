import jwt
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from unittest.mock import MagicMock

from app.api.auth import AuthError, auth_error_handler
from app.api.routes import chat
from config_loader import AuthConfig

SECRET = "test-secret"


def make_token(payload=None, secret=SECRET):
    return jwt.encode(payload or {"id": "user-1"}, secret, algorithm="HS256")


# -------------------------------------------------------------------
# Test App Fixture
# -------------------------------------------------------------------

@pytest.fixture
def service():
    service = MagicMock()
    service.handle_message.return_value = {
        "reply": "Hello!", "searchUrl": None, "suggestions": ["Find flats"], "sessionId": "s1",
    }
    service.clear_session.return_value = {
        "reply": "Hi!", "searchUrl": None, "suggestions": [], "sessionId": None,
    }
    service.describe_session.return_value = None
    return service


@pytest.fixture
def client(service):
    """
    Creates a FastAPI test app with a mocked ChatService
    """
    app = FastAPI()
    app.state.auth_config = AuthConfig(secret_key=SECRET)
    app.state.chat_service = service
    app.add_exception_handler(AuthError, auth_error_handler)
    app.include_router(chat.router, prefix="/api/assistant")
    return TestClient(app)


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {make_token()}"}


# -------------------------------------------------------------------
# /chat
# -------------------------------------------------------------------

def test_chat(client, service, auth_headers):
    response = client.post("/api/assistant/chat", json={"message": "hello", "sessionId": "s1"},
                           headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {
        "reply": "Hello!", "searchUrl": None, "suggestions": ["Find flats"], "sessionId": "s1",
        "preferences": None,
    }
    service.handle_message.assert_called_once_with("hello", "s1")


def test_chat_without_session_id(client, service, auth_headers):
    client.post("/api/assistant/chat", json={"message": "hello"}, headers=auth_headers)

    service.handle_message.assert_called_once_with("hello", None)


@pytest.mark.parametrize("body", [{"message": ""}, {"message": "   \n"}, {}])
def test_chat_empty_message(client, service, auth_headers, body):
    response = client.post("/api/assistant/chat", json=body, headers=auth_headers)

    assert response.status_code == 400
    assert response.json() == {"message": "Message is required"}
    service.handle_message.assert_not_called()


# -------------------------------------------------------------------
# /session
# -------------------------------------------------------------------

def test_clear_session(client, service, auth_headers):
    response = client.post("/api/assistant/session/clear", json={"sessionId": "s1"}, headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["sessionId"] is None
    service.clear_session.assert_called_once_with("s1")


def test_get_unknown_session(client, auth_headers):
    response = client.get("/api/assistant/session/nope", headers=auth_headers)

    assert response.status_code == 404
    assert response.json() == {"error": "Session not found"}


def test_get_session(client, service, auth_headers):
    service.describe_session.return_value = {
        "createdAt": "2026-01-01T00:00:00+00:00",
        "lastActivity": "2026-01-01T00:05:00+00:00",
        "messageCount": 4,
        "preferences": {"bedrooms": 2},
    }

    response = client.get("/api/assistant/session/s1", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["messageCount"] == 4
    service.describe_session.assert_called_once_with("s1")


# -------------------------------------------------------------------
# Authentication
# -------------------------------------------------------------------

def test_missing_token_is_401(client, service):
    response = client.post("/api/assistant/chat", json={"message": "hello"})

    assert response.status_code == 401
    assert response.json() == {"message": "Not Authenticated!"}
    service.handle_message.assert_not_called()


def test_invalid_token_is_403(client, service):
    headers = {"Authorization": f"Bearer {make_token(secret='other-secret')}"}

    response = client.post("/api/assistant/chat", json={"message": "hello"}, headers=headers)

    assert response.status_code == 403
    assert response.json() == {"message": "Token is not Valid!"}
    service.handle_message.assert_not_called()


def test_token_without_user_id_is_403(client):
    headers = {"Authorization": f"Bearer {make_token({'role': 'x'})}"}

    response = client.get("/api/assistant/session/s1", headers=headers)

    assert response.status_code == 403


def test_cookie_token_is_accepted(client, service):
    client.cookies.set("token", make_token())

    response = client.post("/api/assistant/chat", json={"message": "hello"})

    assert response.status_code == 200


def test_missing_secret_rejects_every_token(client, service):
    client.app.state.auth_config = AuthConfig(secret_key="")
    headers = {"Authorization": f"Bearer {make_token()}"}

    response = client.post("/api/assistant/chat", json={"message": "hello"}, headers=headers)

    assert response.status_code == 403
    service.handle_message.assert_not_called()
