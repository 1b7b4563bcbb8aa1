"""Tests for src/chat/conversation.py — request validation and message assembly."""

import pytest

from src.chat.conversation import build_messages, parse_chat_request
from src.chat.models import ChatOutcome, ConversationMessage
from src.proxy.errors import InvalidInput


class TestParseChatRequest:

    def test_valid_message_is_trimmed(self):
        message, history = parse_chat_request({"message": "  hello  "})
        assert message == "hello"
        assert history == []

    @pytest.mark.parametrize("body", [
        {"message": ""},
        {"message": "   \n\t"},
        {"message": None},
        {"message": 42},
        {},
        None,
        ["message"],
    ])
    def test_rejected(self, body):
        with pytest.raises(InvalidInput):
            parse_chat_request(body)

    def test_exactly_max_length_accepted(self):
        message, _ = parse_chat_request({"message": "a" * 1000})
        assert len(message) == 1000

    def test_over_max_length_rejected(self):
        with pytest.raises(InvalidInput, match="Maximum 1000"):
            parse_chat_request({"message": "a" * 1001})

    def test_length_measured_after_trim(self):
        message, _ = parse_chat_request({"message": "  " + "a" * 1000 + "  "})
        assert len(message) == 1000

    def test_history_must_be_list(self):
        with pytest.raises(InvalidInput, match="conversationHistory"):
            parse_chat_request({"message": "hi", "conversationHistory": "nope"})

    def test_public_message_is_descriptive(self):
        with pytest.raises(InvalidInput) as exc_info:
            parse_chat_request({"message": ""})
        assert exc_info.value.public_message == "Message is required and must be a non-empty string"


class TestBuildMessages:

    def test_system_prompt_first_user_last(self):
        messages = build_messages("What now?", [], "SYS")
        assert messages == [
            ConversationMessage(role="system", content="SYS"),
            ConversationMessage(role="user", content="What now?"),
        ]

    def test_keeps_last_ten_history_entries(self):
        history = [
            {"role": "user" if i % 2 == 0 else "assistant", "content": f"turn {i}"}
            for i in range(15)
        ]
        messages = build_messages("latest", history, "SYS", history_limit=10)
        assert len(messages) == 12
        assert messages[1].content == "turn 5"
        assert messages[-2].content == "turn 14"
        assert messages[-1].content == "latest"

    def test_invalid_entries_skipped(self):
        history = [
            {"role": "user", "content": "ok"},
            {"role": "wizard", "content": "unknown role"},
            {"role": "assistant", "content": 7},
            "just a string",
            {"role": "assistant", "content": "fine"},
        ]
        messages = build_messages("latest", history, "SYS")
        assert [m.content for m in messages] == ["SYS", "ok", "fine", "latest"]

    def test_zero_history_limit(self):
        messages = build_messages("latest", [{"role": "user", "content": "old"}], "SYS", history_limit=0)
        assert [m.role for m in messages] == ["system", "user"]


class TestChatOutcome:

    def test_to_dict_uses_api_field_names(self):
        outcome = ChatOutcome(response="Hi", is_demo=True, provider="demo")
        data = outcome.to_dict()
        assert data["response"] == "Hi"
        assert data["isDemo"] is True
        assert data["provider"] == "demo"
        assert data["timestamp"].endswith("Z")
