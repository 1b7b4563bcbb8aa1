"""Single-turn text generation wire format (Hugging Face Inference API)."""

from src.chat.models import ConversationMessage
from src.providers.base import ProviderAdapter
from src.providers.catalog import ProviderConfig

MAX_LENGTH = 200
TEMPERATURE = 0.7

# Returned when the model answers without a generated_text field
PLACEHOLDER_REPLY = "I understand your question. Let me help you with that."


class TextGenerationAdapter(ProviderAdapter):
    """Sends only the newest message; the model sees no history or system prompt."""

    def build_request(
        self, messages: list[ConversationMessage], config: ProviderConfig
    ) -> tuple[dict, dict]:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {config.credential}",
        }
        body = {
            "inputs": messages[-1].content if messages else "",
            "parameters": {
                "max_length": MAX_LENGTH,
                "temperature": TEMPERATURE,
                "do_sample": True,
            },
        }
        return headers, body

    def parse_response(self, raw) -> str:
        # The Inference API answers with either an object or a one-element list
        if isinstance(raw, list) and raw and isinstance(raw[0], dict):
            raw = raw[0]
        if isinstance(raw, dict):
            text = raw.get("generated_text")
            if isinstance(text, str) and text:
                return text
        return PLACEHOLDER_REPLY
