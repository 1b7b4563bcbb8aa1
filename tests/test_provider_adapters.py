"""Tests for the wire-format adapters in src/providers/ — pure build/parse logic."""

import pytest

from src.providers.chat_completions import ChatCompletionsAdapter
from src.providers.messages import MessagesAdapter
from src.providers.text_generation import PLACEHOLDER_REPLY, TextGenerationAdapter
from src.proxy.errors import MalformedResponse


class TestChatCompletionsAdapter:

    adapter = ChatCompletionsAdapter()

    def test_body_includes_all_messages(self, chat_messages, openai_config):
        _, body = self.adapter.build_request(chat_messages, openai_config)
        assert body["model"] == "gpt-3.5-turbo"
        assert body["max_tokens"] == 500
        assert body["temperature"] == 0.7
        assert body["messages"][0] == {"role": "system", "content": "You are NeuralBot."}
        assert body["messages"][-1] == {"role": "user", "content": "What is an API?"}
        assert len(body["messages"]) == 4

    def test_bearer_auth(self, chat_messages, openai_config):
        headers, _ = self.adapter.build_request(chat_messages, openai_config)
        assert headers["Authorization"] == f"Bearer {openai_config.credential}"
        assert "x-api-key" not in headers

    def test_parse_recovers_mock_reply(self, chat_messages, openai_config):
        _, body = self.adapter.build_request(chat_messages, openai_config)
        mock_reply = {
            "model": body["model"],
            "choices": [{"index": 0, "message": {"role": "assistant", "content": "An API is a contract."}}],
        }
        assert self.adapter.parse_response(mock_reply) == "An API is a contract."

    @pytest.mark.parametrize("raw", [
        {},
        {"choices": []},
        {"choices": [{}]},
        {"choices": [{"message": {"role": "assistant"}}]},
        {"choices": [{"message": {"content": None}}]},
        ["not", "an", "object"],
    ])
    def test_malformed(self, raw):
        with pytest.raises(MalformedResponse):
            self.adapter.parse_response(raw)


class TestTextGenerationAdapter:

    adapter = TextGenerationAdapter()

    def test_sends_last_message_only(self, chat_messages, huggingface_config):
        _, body = self.adapter.build_request(chat_messages, huggingface_config)
        assert body == {
            "inputs": "What is an API?",
            "parameters": {"max_length": 200, "temperature": 0.7, "do_sample": True},
        }

    def test_bearer_auth(self, chat_messages, huggingface_config):
        headers, _ = self.adapter.build_request(chat_messages, huggingface_config)
        assert headers["Authorization"].startswith("Bearer ")

    def test_parse_object(self):
        assert self.adapter.parse_response({"generated_text": "Sure."}) == "Sure."

    def test_parse_list(self):
        assert self.adapter.parse_response([{"generated_text": "From a list."}]) == "From a list."

    @pytest.mark.parametrize("raw", [{}, [], [{}], {"generated_text": ""}, "text", None])
    def test_placeholder_when_absent(self, raw):
        assert self.adapter.parse_response(raw) == PLACEHOLDER_REPLY


class TestMessagesAdapter:

    adapter = MessagesAdapter()

    def test_drops_leading_system_message(self, chat_messages, anthropic_config):
        _, body = self.adapter.build_request(chat_messages, anthropic_config)
        assert body["model"] == "claude-3-sonnet-20240229"
        assert body["max_tokens"] == 500
        assert [m["role"] for m in body["messages"]] == ["user", "assistant", "user"]
        assert "system" not in body
        assert all("NeuralBot" not in m["content"] for m in body["messages"])

    def test_api_key_header_not_bearer(self, chat_messages, anthropic_config):
        headers, _ = self.adapter.build_request(chat_messages, anthropic_config)
        assert headers["x-api-key"] == anthropic_config.credential
        assert headers["anthropic-version"] == "2023-06-01"
        assert "Authorization" not in headers

    def test_parse(self):
        raw = {"content": [{"type": "text", "text": "Hello from Claude"}]}
        assert self.adapter.parse_response(raw) == "Hello from Claude"

    @pytest.mark.parametrize("raw", [{}, {"content": []}, {"content": [{"type": "text"}]}, None])
    def test_malformed(self, raw):
        with pytest.raises(MalformedResponse):
            self.adapter.parse_response(raw)
