"""Shared fixtures for the NeuralBot chat gateway test suite."""

import pytest

from src.chat.models import ConversationMessage
from src.config.settings import get_settings
from src.providers.catalog import ProviderConfig, WireFormat

REAL_LOOKING_KEY = "sk-test-0123456789abcdefghij"  # 28 chars, passes the usability check


@pytest.fixture
def chat_messages() -> list[ConversationMessage]:
    """System prompt, one prior exchange and a new user turn."""
    return [
        ConversationMessage(role="system", content="You are NeuralBot."),
        ConversationMessage(role="user", content="Hi there"),
        ConversationMessage(role="assistant", content="Hello! How can I help?"),
        ConversationMessage(role="user", content="What is an API?"),
    ]


@pytest.fixture
def openai_config() -> ProviderConfig:
    return ProviderConfig(
        name="openai",
        endpoint_url="https://api.openai.com/v1/chat/completions",
        credential=REAL_LOOKING_KEY,
        model_id="gpt-3.5-turbo",
        wire_format=WireFormat.CHAT_COMPLETIONS,
    )


@pytest.fixture
def huggingface_config() -> ProviderConfig:
    return ProviderConfig(
        name="huggingface",
        endpoint_url="https://api-inference.huggingface.co/models/microsoft/DialoGPT-large",
        credential=REAL_LOOKING_KEY,
        model_id="microsoft/DialoGPT-large",
        wire_format=WireFormat.SINGLE_TURN_GENERATION,
    )


@pytest.fixture
def anthropic_config() -> ProviderConfig:
    return ProviderConfig(
        name="anthropic",
        endpoint_url="https://api.anthropic.com/v1/messages",
        credential=REAL_LOOKING_KEY,
        model_id="claude-3-sonnet-20240229",
        wire_format=WireFormat.MESSAGES_EXTERNAL_SYSTEM,
    )


@pytest.fixture
def override_settings(monkeypatch):
    """Factory fixture: set env vars and clear settings cache.

    Provider keys default to empty so a developer's real environment never
    leaks into a test.

    Usage:
        override_settings(OPENAI_API_KEY="sk-...", RATE_LIMIT_MAX_REQUESTS=3)
    """
    for key in ("OPENAI_API_KEY", "HUGGINGFACE_API_KEY", "GROQ_API_KEY", "ANTHROPIC_API_KEY"):
        monkeypatch.setenv(key, "")

    def _override(**kwargs):
        for key, value in kwargs.items():
            monkeypatch.setenv(key.upper(), str(value))
        # Clear lru_cache so Settings re-reads env
        get_settings.cache_clear()

    yield _override

    # Always clear cache on teardown so other tests get fresh settings
    get_settings.cache_clear()
