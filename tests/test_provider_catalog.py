"""Tests for src/providers/catalog.py — provider catalog and credential checks."""

import pytest

from src.config.settings import get_settings
from src.providers.catalog import (
    ProviderCatalog,
    ProviderConfig,
    WireFormat,
    build_catalog,
    is_usable_credential,
)

REAL_LOOKING_KEY = "sk-test-0123456789abcdefghij"


def _config(name: str, credential: str) -> ProviderConfig:
    return ProviderConfig(
        name=name,
        endpoint_url=f"https://{name}.example/v1",
        credential=credential,
        model_id=f"{name}-model",
        wire_format=WireFormat.CHAT_COMPLETIONS,
    )


class TestIsUsableCredential:

    @pytest.mark.parametrize("credential", [
        None,
        "",
        "your_openai_api_key_here",
        "your_anthropic_api_key_here",
        "x" * 20,
    ])
    def test_unusable(self, credential):
        assert is_usable_credential(credential) is False

    def test_21_chars_is_usable(self):
        assert is_usable_credential("x" * 21) is True


class TestProviderCatalog:

    def test_usable_keeps_declaration_order(self):
        catalog = ProviderCatalog([
            _config("zeta", REAL_LOOKING_KEY),
            _config("alpha", ""),
            _config("beta", REAL_LOOKING_KEY),
        ])
        assert [p.name for p in catalog.usable_providers()] == ["zeta", "beta"]

    def test_select_first_usable(self):
        catalog = ProviderCatalog([
            _config("a", "short"),
            _config("b", REAL_LOOKING_KEY),
            _config("c", REAL_LOOKING_KEY),
        ])
        assert catalog.select().name == "b"

    def test_select_is_deterministic(self):
        catalog = ProviderCatalog([_config("b", REAL_LOOKING_KEY), _config("a", REAL_LOOKING_KEY)])
        assert {catalog.select().name for _ in range(20)} == {"b"}

    def test_select_none_when_nothing_usable(self):
        catalog = ProviderCatalog([_config("a", ""), _config("b", "your_groq_api_key_here")])
        assert catalog.select() is None
        assert catalog.usable_providers() == []

    def test_credential_hidden_from_repr(self):
        assert REAL_LOOKING_KEY not in repr(_config("a", REAL_LOOKING_KEY))


class TestBuildCatalog:

    def test_default_order_and_formats(self, override_settings):
        override_settings()
        catalog = build_catalog(get_settings())
        assert [(p.name, p.wire_format) for p in catalog.providers] == [
            ("openai", WireFormat.CHAT_COMPLETIONS),
            ("huggingface", WireFormat.SINGLE_TURN_GENERATION),
            ("groq", WireFormat.CHAT_COMPLETIONS),
            ("anthropic", WireFormat.MESSAGES_EXTERNAL_SYSTEM),
        ]

    def test_no_credentials_means_demo(self, override_settings):
        override_settings()
        assert build_catalog(get_settings()).select() is None

    def test_openai_preferred_over_groq(self, override_settings):
        override_settings(OPENAI_API_KEY=REAL_LOOKING_KEY, GROQ_API_KEY=REAL_LOOKING_KEY)
        assert build_catalog(get_settings()).select().name == "openai"

    def test_anthropic_only(self, override_settings):
        override_settings(ANTHROPIC_API_KEY=REAL_LOOKING_KEY, OPENAI_API_KEY="your_openai_api_key_here")
        selected = build_catalog(get_settings()).select()
        assert selected.name == "anthropic"
        assert selected.model_id == "claude-3-sonnet-20240229"

    def test_huggingface_url_follows_model(self, override_settings):
        override_settings(HUGGINGFACE_MODEL="gpt2")
        hf = build_catalog(get_settings()).providers[1]
        assert hf.endpoint_url == "https://api-inference.huggingface.co/models/gpt2"
