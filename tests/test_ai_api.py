"""Tests for the Gemini-backed routes and service."""

import json

import pytest

from services.gemini import GeminiContentService
from utils.errors import AIServiceError


class TestGenerateDescriptionRoute:
    """Test POST /api/generate-description."""

    def test_without_image_never_calls_ai(self, client, fake_ai):
        response = client.post("/api/generate-description", data={"price": "20", "size": "M", "brand": "Zara"})
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "image"
        assert fake_ai.calls == []

    def test_missing_fields(self, client, fake_ai, image_file):
        response = client.post("/api/generate-description", data={"price": "20"}, files={"image": image_file})
        assert response.status_code == 400
        assert sorted(e["field"] for e in response.json()["errors"]) == ["brand", "size"]
        assert fake_ai.calls == []

    def test_non_numeric_price(self, client, fake_ai, image_file):
        response = client.post(
            "/api/generate-description", data={"price": "abc", "size": "M", "brand": "Zara"}, files={"image": image_file}
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "price"
        assert fake_ai.calls == []

    def test_generates(self, client, fake_ai, image_file):
        response = client.post(
            "/api/generate-description",
            data={"price": "20,00 €", "size": "M", "brand": "Levi's", "comment": "Porté deux fois"},
            files={"image": image_file},
        )
        assert response.status_code == 200
        assert response.json() == {"title": fake_ai.generated.title, "description": fake_ai.generated.description}
        kind, args = fake_ai.calls[0]
        assert kind == "description"
        assert args["price"] == "20.00"
        assert args["mime_type"] == "image/jpeg"
        assert args["comment"] == "Porté deux fois"

    def test_stores_on_article(self, client, fake_ai, image_file, create_article):
        article = create_article()
        response = client.post(
            "/api/generate-description",
            data={"price": "25", "size": "M", "brand": "Levi's", "articleId": str(article["id"])},
            files={"image": image_file},
        )
        assert response.status_code == 200
        stored = client.get(f"/api/articles/{article['id']}").json()
        assert stored["generatedTitle"] == fake_ai.generated.title
        assert stored["generatedDescription"] == fake_ai.generated.description

    def test_unknown_article_is_404(self, client, fake_ai, image_file):
        response = client.post(
            "/api/generate-description",
            data={"price": "25", "size": "M", "brand": "Levi's", "articleId": "404"},
            files={"image": image_file},
        )
        assert response.status_code == 404
        assert fake_ai.calls == []

    def test_ai_failure_is_502(self, client, fake_ai, image_file):
        fake_ai.fail = True
        response = client.post(
            "/api/generate-description", data={"price": "25", "size": "M", "brand": "Levi's"}, files={"image": image_file}
        )
        assert response.status_code == 502
        assert response.json()["retryable"] is True


class TestGenerateResponsesRoute:
    def test_three_tones(self, client, fake_ai):
        response = client.post("/api/generate-responses", json={"customerMessage": "Toujours dispo ?"})
        assert response.status_code == 200
        body = response.json()
        assert body["responses"] == fake_ai.responses
        assert body["tones"] == ["warm", "precise", "brief"]

    def test_empty_message(self, client, fake_ai):
        response = client.post("/api/generate-responses", json={"customerMessage": ""})
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "customerMessage"
        assert fake_ai.calls == []

    def test_conversation_saved(self, client, fake_ai, db):
        from models.conversation import Conversation

        client.post("/api/generate-responses", json={"customerMessage": "Prix ferme ?"})
        conversation = db.query(Conversation).one()
        assert conversation.customer_message == "Prix ferme ?"
        assert conversation.generated_responses == fake_ai.responses


class _FakeResponse:
    def __init__(self, text):
        self.text = text


@pytest.fixture
def fake_model(monkeypatch):
    """Replace genai.GenerativeModel; set .text (or .error) before calling."""
    state = {"text": "{}", "error": None, "models": [], "contents": []}

    class _Model:
        def __init__(self, model_name, generation_config=None):
            state["models"].append(model_name)

        def generate_content(self, contents):
            state["contents"].append(contents)
            if state["error"]:
                raise state["error"]
            return _FakeResponse(state["text"])

    monkeypatch.setattr("services.gemini.genai.GenerativeModel", _Model)
    monkeypatch.setattr("services.gemini.genai.configure", lambda **kwargs: None)
    return state


class TestGeminiContentService:
    """Test GeminiContentService parsing with a stubbed SDK."""

    def test_no_key(self):
        service = GeminiContentService(api_key=None)
        with pytest.raises(AIServiceError):
            service.generate_customer_responses("Bonjour")

    def test_description(self, fake_model):
        fake_model["text"] = json.dumps({"title": "Pull 🧶", "description": "Tout doux"})
        service = GeminiContentService(api_key="key", description_model="desc-model")
        result = service.generate_article_description(b"img", "image/png", "12.00", "S", "Zara")
        assert result.title == "Pull 🧶"
        assert fake_model["models"] == ["desc-model"]
        image_part, prompt = fake_model["contents"][0]
        assert image_part == {"mime_type": "image/png", "data": b"img"}
        assert "Zara" in prompt and "12.00" in prompt

    def test_description_missing_key(self, fake_model):
        fake_model["text"] = json.dumps({"title": "Pull"})
        service = GeminiContentService(api_key="key")
        with pytest.raises(AIServiceError):
            service.generate_article_description(b"img", "image/png", "12.00", "S", "Zara")

    def test_responses(self, fake_model):
        fake_model["text"] = json.dumps({"responses": [" Bonjour ! ", "Oui", "Ok 👍"]})
        service = GeminiContentService(api_key="key", responses_model="fast-model")
        assert service.generate_customer_responses("Dispo ?") == ["Bonjour !", "Oui", "Ok 👍"]
        assert fake_model["models"] == ["fast-model"]

    @pytest.mark.parametrize("text", ["not json", "[1, 2]", json.dumps({"responses": ["a", "b"]})])
    def test_bad_answers(self, fake_model, text):
        fake_model["text"] = text
        service = GeminiContentService(api_key="key")
        with pytest.raises(AIServiceError):
            service.generate_customer_responses("Dispo ?")

    def test_sdk_error_wrapped(self, fake_model):
        fake_model["error"] = RuntimeError("quota exceeded")
        service = GeminiContentService(api_key="key")
        with pytest.raises(AIServiceError):
            service.generate_customer_responses("Dispo ?")
