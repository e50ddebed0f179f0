"""Shared test fixtures for the Vinted manager backend."""

import os
import sys
import tempfile
from pathlib import Path

import pytest

# Ensure the flat backend modules are importable
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "backend"))

# Settings are read at import time: in-memory database, throwaway upload dir, no real Gemini key
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="vinted-uploads-")
os.environ["GEMINI_API_KEY"] = ""
os.environ["GOOGLE_AI_API_KEY"] = ""
os.environ["IMPORT_BROWSER_ENABLED"] = "false"

from fastapi.testclient import TestClient

from database import Base, SessionLocal, engine
from main import app
from schemas.ai import GeneratedContent
from services.gemini import get_ai_service
from utils.errors import AIServiceError


class FakeAIService:
    """Stands in for GeminiContentService and records every call."""

    def __init__(self):
        self.calls = []
        self.fail = False
        self.generated = GeneratedContent(title="Veste en jean Levi's ✨", description="Superbe veste, très bon état.")
        self.responses = [
            "Bonjour ! Oui, l'article est toujours disponible 😊",
            "Bonjour, l'article est disponible et expédié sous 24h 📦",
            "Oui dispo ! 👍",
        ]

    def generate_article_description(self, image_bytes, mime_type, price, size, brand, comment=None):
        self.calls.append(("description", {"mime_type": mime_type, "price": price, "size": size, "brand": brand, "comment": comment}))
        if self.fail:
            raise AIServiceError("AI generation failed, please try again")
        return self.generated

    def generate_customer_responses(self, customer_message):
        self.calls.append(("responses", customer_message))
        if self.fail:
            raise AIServiceError("AI generation failed, please try again")
        return list(self.responses)


@pytest.fixture(autouse=True)
def reset_database():
    """Start every test from empty tables."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def fake_ai() -> FakeAIService:
    return FakeAIService()


@pytest.fixture
def client(fake_ai):
    app.dependency_overrides[get_ai_service] = lambda: fake_ai
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def image_file():
    """A multipart file tuple for an uploaded JPEG."""
    return ("veste.jpg", b"\xff\xd8\xff\xe0fake-jpeg-bytes", "image/jpeg")


@pytest.fixture
def create_article(client):
    """POST a multipart article and return the JSON body."""

    def _create(**overrides):
        data = {"name": "Veste en jean", "brand": "Levi's", "size": "M", "price": "25.00", "purchasePrice": "10.00"}
        data.update(overrides)
        response = client.post("/api/articles", data=data)
        assert response.status_code == 200, response.text
        return response.json()

    return _create
