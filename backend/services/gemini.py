# backend/services/gemini.py
import json
import logging
from functools import lru_cache
from typing import Any, Dict, List, Optional

import google.generativeai as genai
from pydantic import ValidationError

from config import settings
from schemas.ai import RESPONSE_TONES, GeneratedContent
from utils.errors import AIServiceError

logger = logging.getLogger(__name__)

# Plain JSON output; the expected shape is spelled out in the prompt and
# checked here with pydantic instead of passing response_schema to the SDK.
_JSON_OUTPUT = {"response_mime_type": "application/json", "temperature": 0.7}

_DESCRIPTION_PROMPT = """Tu es un vendeur expert sur Vinted. Rédige un titre et une description pour l'article photographié.

Informations :
- Prix : {price} €
- Taille : {size}
- Marque : {brand}
{comment_line}
À partir de la photo :
1. un titre court et accrocheur avec quelques émojis ;
2. une description Vinted complète : accroche, détails techniques, points forts, hashtags pertinents.

Réponds uniquement en JSON : {{"title": "...", "description": "..."}}"""

_RESPONSES_PROMPT = """Tu es un vendeur expérimenté sur Vinted. Un client t'écrit :
"{message}"

Propose exactement 3 réponses en français, dans cet ordre :
1. chaleureuse et détaillée ;
2. précise et professionnelle ;
3. courte et amicale.
Chaque réponse est polie, utile et contient un émoji adapté.

Réponds uniquement en JSON : {{"responses": ["...", "...", "..."]}}"""


class GeminiContentService:
    """Drafts listing texts and customer replies with Gemini."""

    def __init__(
        self,
        api_key: Optional[str],
        description_model: str = "gemini-2.5-pro",
        responses_model: str = "gemini-2.5-flash",
    ):
        self.api_key = api_key
        self.description_model = description_model
        self.responses_model = responses_model
        if api_key:
            genai.configure(api_key=api_key)

    def _model(self, name: str):
        if not self.api_key:
            raise AIServiceError("AI service is not configured (missing GEMINI_API_KEY)")
        return genai.GenerativeModel(model_name=name, generation_config=_JSON_OUTPUT)

    def _generate(self, model_name: str, contents: List[Any]) -> Dict[str, Any]:
        model = self._model(model_name)
        try:
            response = model.generate_content(contents)
            text = response.text
        except Exception as e:
            logger.error("Gemini call to %s failed: %s", model_name, e)
            raise AIServiceError("AI generation failed, please try again") from e
        try:
            data = json.loads(text or "{}")
        except json.JSONDecodeError as e:
            logger.error("Gemini returned non-JSON output from %s: %.200s", model_name, text)
            raise AIServiceError("AI service returned an unreadable answer, please try again") from e
        if not isinstance(data, dict):
            raise AIServiceError("AI service returned an unexpected answer, please try again")
        return data

    def generate_article_description(
        self,
        image_bytes: bytes,
        mime_type: str,
        price: str,
        size: str,
        brand: str,
        comment: Optional[str] = None,
    ) -> GeneratedContent:
        prompt = _DESCRIPTION_PROMPT.format(
            price=price,
            size=size,
            brand=brand,
            comment_line=f"- Commentaire : {comment}\n" if comment else "",
        )
        data = self._generate(
            self.description_model,
            [{"mime_type": mime_type or "image/jpeg", "data": image_bytes}, prompt],
        )
        try:
            return GeneratedContent.model_validate(data)
        except ValidationError as e:
            raise AIServiceError("AI service returned an incomplete description, please try again") from e

    def generate_customer_responses(self, customer_message: str) -> List[str]:
        """Three reply drafts, ordered warm, precise, brief."""
        data = self._generate(self.responses_model, [_RESPONSES_PROMPT.format(message=customer_message)])
        responses = data.get("responses")
        if (
            not isinstance(responses, list)
            or len(responses) != len(RESPONSE_TONES)
            or not all(isinstance(r, str) and r.strip() for r in responses)
        ):
            raise AIServiceError("AI service did not return three responses, please try again")
        return [r.strip() for r in responses]


@lru_cache()
def get_ai_service() -> GeminiContentService:
    return GeminiContentService(
        api_key=settings.gemini_key,
        description_model=settings.GEMINI_DESCRIPTION_MODEL,
        responses_model=settings.GEMINI_RESPONSES_MODEL,
    )
