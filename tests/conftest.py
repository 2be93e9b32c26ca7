"""
Shared fixtures: an in-memory SQLite app with the LLM and vision clients replaced by fakes.
"""
import json

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from app import create_app
from config import Settings


class FakeLLM:
    """Stands in for ChatCompletionClient; returns a canned completion."""

    def __init__(self, response: str = "", error: Exception = None):
        self.response = response
        self.error = error
        self.calls = []

    def complete(self, system_message, user_message, max_tokens):
        self.calls.append({"system": system_message, "user": user_message, "max_tokens": max_tokens})
        if self.error is not None:
            raise self.error
        return self.response


class FakeDescriber:
    def __init__(self, description: str = "Photosynthesis turns light into chemical energy."):
        self.description = description
        self.calls = []

    def describe_image(self, image_bytes, mime_type="image/png"):
        self.calls.append((image_bytes, mime_type))
        return self.description


FLASHCARDS_JSON = json.dumps([
    {"question": "What does photosynthesis produce?", "answer": "Glucose and oxygen"},
    {"question": "Where does it happen?", "answer": "In the chloroplasts"},
])

QUIZ_JSON = json.dumps([
    {
        "question": "Which are products of photosynthesis?",
        "options": ["Oxygen", "Nitrogen", "Glucose", "Helium"],
        "correctOptions": [0, 2],
        "explanation": "Photosynthesis releases oxygen and stores energy in glucose.",
    }
])


@pytest.fixture
def fake_llm():
    return FakeLLM(FLASHCARDS_JSON)


@pytest.fixture
def fake_describer():
    return FakeDescriber()


@pytest.fixture
def engine():
    eng = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    yield eng
    eng.dispose()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url="sqlite://",
        openai_api_key=None,
        upload_dir=str(tmp_path / "uploads"),
        max_upload_bytes=1024 * 1024,
        log_level="WARNING",
    )


@pytest.fixture
def client(settings, engine, fake_llm, fake_describer):
    app = create_app(settings=settings, engine=engine, llm=fake_llm, describer=fake_describer)
    with TestClient(app) as c:
        yield c


def register(client, email="student@example.org", password="correct-horse"):
    resp = client.post("/auth/signup", json={"user_email": email, "user_password": password})
    assert resp.status_code == 200, resp.text
    user_id = json.loads(resp.json()["data"])["user_id"]
    resp = client.post("/auth/login", json={"user_email": email, "user_password": password})
    assert resp.status_code == 200, resp.text
    token = json.loads(resp.json()["data"])["token"]
    return user_id, {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user(client):
    return register(client)
