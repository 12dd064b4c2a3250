"""
Google Gemini generateContent adapter.

POST {endpoint}/{model}:generateContent?key={apiKey}
Response text path: candidates[0].content.parts[0].text
"""

from typing import Any, Dict

from hybrid_inference.models.enums import OperationType, ProviderName
from .base import AuthStrategy, ProviderAdapter, dig


class GeminiAdapter(ProviderAdapter):
    """Key travels as the `key` query parameter."""

    name = ProviderName.GEMINI
    auth_strategy = AuthStrategy.QUERY_PARAM
    auth_field = "key"
    models = {
        OperationType.SUMMARISE: "gemini-1.5-flash",
        OperationType.DRAFT: "gemini-1.5-pro",
    }

    TOP_K = 40
    TOP_P = 0.95
    SAFETY_SETTINGS = [
        {
            "category": "HARM_CATEGORY_HARASSMENT",
            "threshold": "BLOCK_MEDIUM_AND_ABOVE",
        }
    ]

    def build_url(self, operation: OperationType) -> str:
        return f"{self.endpoint}/{self.model_for(operation)}:generateContent"

    def build_request(self, prompt: str, operation: OperationType) -> Dict[str, Any]:
        params = self.params_for(operation)
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": params.temperature,
                "topK": self.TOP_K,
                "topP": self.TOP_P,
                "maxOutputTokens": params.max_tokens,
            },
            "safetySettings": [dict(s) for s in self.SAFETY_SETTINGS],
        }

    def extract_text(self, body: Any) -> str:
        text = dig(body, "candidates", 0, "content", "parts", 0, "text")
        return text if isinstance(text, str) else ""
