"""
OpenAI chat completions adapter.

POST {endpoint} with Authorization: Bearer {apiKey}
Response text path: choices[0].message.content
"""

from typing import Any, Dict

from hybrid_inference.models.enums import OperationType, ProviderName
from .base import AuthStrategy, ProviderAdapter, dig


class OpenAIAdapter(ProviderAdapter):
    name = ProviderName.OPENAI
    auth_strategy = AuthStrategy.BEARER
    auth_field = "Authorization"
    models = {
        OperationType.SUMMARISE: "gpt-4o-mini",
        OperationType.DRAFT: "gpt-4o",
    }

    def build_request(self, prompt: str, operation: OperationType) -> Dict[str, Any]:
        params = self.params_for(operation)
        return {
            "model": self.model_for(operation),
            "messages": [{"role": "user", "content": prompt}],
            "temperature": params.temperature,
            "max_tokens": params.max_tokens,
        }

    def extract_text(self, body: Any) -> str:
        text = dig(body, "choices", 0, "message", "content")
        return text if isinstance(text, str) else ""
