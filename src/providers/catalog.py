"""Provider catalog — the ordered list of candidate upstream backends.

Declaration order is priority order: the first provider with a usable
credential serves every request. Nothing is retried against a second
provider.
"""

from dataclasses import dataclass, field
from enum import Enum

from src.config.settings import Settings

MIN_CREDENTIAL_LENGTH = 21

# Placeholder values shipped in the sample .env
PLACEHOLDER_CREDENTIALS = frozenset({
    "your_openai_api_key_here",
    "your_huggingface_api_key_here",
    "your_groq_api_key_here",
    "your_anthropic_api_key_here",
})


class WireFormat(str, Enum):
    CHAT_COMPLETIONS = "chat-completions"
    SINGLE_TURN_GENERATION = "single-turn-generation"
    MESSAGES_EXTERNAL_SYSTEM = "messages-with-external-system-prompt"


@dataclass(frozen=True)
class ProviderConfig:
    name: str
    endpoint_url: str
    credential: str = field(repr=False)
    model_id: str
    wire_format: WireFormat


def is_usable_credential(credential: str | None) -> bool:
    """Present, not a known placeholder, and long enough to be a real key."""
    if not credential:
        return False
    if credential in PLACEHOLDER_CREDENTIALS:
        return False
    return len(credential) >= MIN_CREDENTIAL_LENGTH


class ProviderCatalog:
    """Static, ordered set of provider configs."""

    def __init__(self, providers: list[ProviderConfig]):
        self._providers = list(providers)

    @property
    def providers(self) -> list[ProviderConfig]:
        return list(self._providers)

    def usable_providers(self) -> list[ProviderConfig]:
        return [p for p in self._providers if is_usable_credential(p.credential)]

    def select(self) -> ProviderConfig | None:
        for provider in self._providers:
            if is_usable_credential(provider.credential):
                return provider
        return None


def build_catalog(settings: Settings) -> ProviderCatalog:
    """Build the default catalog: openai, huggingface, groq, anthropic."""
    return ProviderCatalog([
        ProviderConfig(
            name="openai",
            endpoint_url="https://api.openai.com/v1/chat/completions",
            credential=settings.openai_api_key,
            model_id=settings.openai_model,
            wire_format=WireFormat.CHAT_COMPLETIONS,
        ),
        ProviderConfig(
            name="huggingface",
            endpoint_url=f"https://api-inference.huggingface.co/models/{settings.huggingface_model}",
            credential=settings.huggingface_api_key,
            model_id=settings.huggingface_model,
            wire_format=WireFormat.SINGLE_TURN_GENERATION,
        ),
        ProviderConfig(
            name="groq",
            endpoint_url="https://api.groq.com/openai/v1/chat/completions",
            credential=settings.groq_api_key,
            model_id=settings.groq_model,
            wire_format=WireFormat.CHAT_COMPLETIONS,
        ),
        ProviderConfig(
            name="anthropic",
            endpoint_url="https://api.anthropic.com/v1/messages",
            credential=settings.anthropic_api_key,
            model_id=settings.anthropic_model,
            wire_format=WireFormat.MESSAGES_EXTERNAL_SYSTEM,
        ),
    ])
