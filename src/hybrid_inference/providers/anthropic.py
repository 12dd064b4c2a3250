"""
Anthropic messages adapter.

POST {endpoint} with x-api-key and anthropic-version headers
Response text path: content[0].text
"""

from typing import Any, Dict

from hybrid_inference.models.enums import OperationType, ProviderName
from .base import AuthStrategy, ProviderAdapter, dig


class AnthropicAdapter(ProviderAdapter):
    name = ProviderName.ANTHROPIC
    auth_strategy = AuthStrategy.HEADER
    auth_field = "x-api-key"
    models = {
        OperationType.SUMMARISE: "claude-3-haiku-20240307",
        OperationType.DRAFT: "claude-3-5-sonnet-20241022",
    }

    def __init__(self, endpoint: str, api_version: str = "2023-06-01"):
        super().__init__(endpoint)
        self.api_version = api_version

    def build_headers(self, api_key: str) -> Dict[str, str]:
        headers = super().build_headers(api_key)
        headers["anthropic-version"] = self.api_version
        return headers

    def build_request(self, prompt: str, operation: OperationType) -> Dict[str, Any]:
        params = self.params_for(operation)
        return {
            "model": self.model_for(operation),
            "max_tokens": params.max_tokens,
            "temperature": params.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }

    def extract_text(self, body: Any) -> str:
        text = dig(body, "content", 0, "text")
        return text if isinstance(text, str) else ""
