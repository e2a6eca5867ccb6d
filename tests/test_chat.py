"""
Tests for the assistant chat session.
"""

import pytest

from name_corrector.chat import ChatMode, ChatSession, ChatTurn
from name_corrector.errors import RemoteServiceError


class FakeChatClient:
    def __init__(self, fail=False):
        self.fail = fail
        self.requests = []

    async def chat(self, mode, message, client_profile=None, target_name=None, history=None):
        self.requests.append({
            "mode": mode,
            "message": message,
            "client_profile": client_profile,
            "target_name": target_name,
            "history": history,
        })
        if self.fail:
            raise RemoteServiceError("Too Many Requests", status_code=429)
        return f"answer to {message}"


class TestChatSession:
    """Tests for modes, context and history."""

    @pytest.mark.asyncio
    async def test_general_chat_sends_no_context(self, client_profile):
        client = FakeChatClient()
        chat = ChatSession(client, client_profile)

        assert await chat.send("What is a Life Path?") == "answer to What is a Life Path?"
        assert client.requests[0]["mode"] == "general"
        assert client.requests[0]["client_profile"] is None
        assert chat.history == (
            ChatTurn("user", "What is a Life Path?"),
            ChatTurn("assistant", "answer to What is a Life Path?"),
        )

    def test_name_validation_needs_a_target(self, client_profile):
        chat = ChatSession(FakeChatClient(), client_profile)

        assert chat.set_mode("name_validation") is False
        assert chat.mode is ChatMode.GENERAL
        assert chat.notices[-1].kind == "missing_target"

    def test_unknown_mode_is_refused(self, client_profile):
        chat = ChatSession(FakeChatClient(), client_profile)

        assert chat.set_mode("bogus") is False
        assert chat.mode is ChatMode.GENERAL
        assert chat.notices[-1].kind == "unknown_mode"

    def test_name_validation_needs_a_profile(self):
        chat = ChatSession(FakeChatClient())
        chat.select_target("Edna Doe")

        assert chat.set_mode(ChatMode.NAME_VALIDATION) is False

    def test_blank_target_is_refused(self, client_profile):
        chat = ChatSession(FakeChatClient(), client_profile)

        assert chat.select_target("  ") is False
        assert chat.target_name is None

    @pytest.mark.asyncio
    async def test_name_validation_sends_profile_target_and_history(self, client_profile):
        client = FakeChatClient()
        chat = ChatSession(client, client_profile)
        chat.select_target("Edna Doe")
        assert chat.set_mode("name_validation") is True

        await chat.send("Does it suit me?")
        await chat.send("And for career?")

        second = client.requests[1]
        assert second["mode"] == "name_validation"
        assert second["target_name"] == "Edna Doe"
        assert second["client_profile"]["life_path_number"] == 3
        assert second["history"] == [
            {"role": "user", "content": "Does it suit me?"},
            {"role": "assistant", "content": "answer to Does it suit me?"},
        ]

    @pytest.mark.asyncio
    async def test_failure_leaves_history_unchanged(self, client_profile):
        chat = ChatSession(FakeChatClient(fail=True), client_profile)

        assert await chat.send("hello") is None
        assert chat.history == ()
        assert chat.notices[-1].kind == "chat_failed"

    @pytest.mark.asyncio
    async def test_blank_message_is_not_sent(self, client_profile):
        client = FakeChatClient()
        chat = ChatSession(client, client_profile)

        assert await chat.send("   ") is None
        assert client.requests == []
