"""
Tests for the model-facing helpers, using langchain-core's fake chat model.
"""

import json

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from name_corrector import llm as llm_module
from name_corrector.config import Settings
from name_corrector.errors import LLMUnavailableError, SuggestionGenerationError
from name_corrector.llm import (
    LLMManager,
    NameSuggestionEngine,
    build_chat_messages,
    generate_chat_response,
    generate_report_markdown,
)


def test_manager_needs_api_key():
    with pytest.raises(LLMUnavailableError):
        LLMManager(Settings(google_api_key=None))


def test_manager_builds_two_models(monkeypatch):
    created = []
    monkeypatch.setattr(llm_module, "ChatGoogleGenerativeAI", lambda **kwargs: created.append(kwargs) or kwargs)

    manager = LLMManager(Settings(google_api_key="test-key", gemini_model="gemini-test"))

    assert [c["temperature"] for c in created] == [0.7, 0.9]
    assert manager.llm["temperature"] == 0.7
    assert manager.creative_llm["temperature"] == 0.9
    assert not hasattr(manager, "analytical_llm")


class TestTargetNumbers:
    def test_outcome_keywords(self):
        assert NameSuggestionEngine.determine_target_numbers_for_outcome("love and wealth") == [2, 5, 6, 8, 9, 22, 33]

    def test_default_targets(self):
        assert NameSuggestionEngine.determine_target_numbers_for_outcome(None) == [1, 3, 5, 6, 8, 9, 11, 22, 33]
        assert NameSuggestionEngine.determine_target_numbers_for_outcome("peace") == [1, 3, 5, 6, 8, 9, 11, 22, 33]


class TestNameSuggestions:
    @pytest.mark.asyncio
    async def test_expression_numbers_are_recomputed(self):
        payload = {
            "suggestions": [
                {"name": "Edna Doe", "rationale": "Harmony.", "expression_number": 1},
                {"name": "John Doe", "rationale": "Original.", "expression_number": 3},
            ],
            "reasoning": "Minimal spelling changes.",
        }
        llm = FakeListChatModel(responses=[json.dumps(payload)])

        output = await NameSuggestionEngine.generate_name_suggestions(llm, "John Doe", [1, 3, 5])

        assert [s.expression_number for s in output.suggestions] == [4, 7]
        assert output.reasoning == "Minimal spelling changes."

    @pytest.mark.asyncio
    async def test_unparseable_output(self):
        llm = FakeListChatModel(responses=["Here are some names: Edna, Adam"])

        with pytest.raises(SuggestionGenerationError):
            await NameSuggestionEngine.generate_name_suggestions(llm, "John Doe", [1])


class TestReportAndChat:
    @pytest.mark.asyncio
    async def test_report_markdown(self):
        llm = FakeListChatModel(responses=["## Executive Summary"])
        assert await generate_report_markdown(llm, {"full_name": "John Doe"}) == "## Executive Summary"

    @pytest.mark.asyncio
    async def test_chat_response(self):
        llm = FakeListChatModel(responses=["Hello!"])
        assert await generate_chat_response(llm, [HumanMessage(content="hi")]) == "Hello!"

    def test_general_messages(self):
        messages = build_chat_messages("general", "What is 11?")

        assert isinstance(messages[0], SystemMessage)
        assert isinstance(messages[-1], HumanMessage)
        assert len(messages) == 2

    def test_history_window(self):
        history = []
        for i in range(4):
            history.append({"role": "user", "content": f"q{i}"})
            history.append({"role": "assistant", "content": f"a{i}"})

        messages = build_chat_messages("general", "next", history=history, window=2)

        assert [m.content for m in messages[1:]] == ["q2", "a2", "q3", "a3", "next"]
        assert isinstance(messages[2], AIMessage)

    def test_name_validation_context(self):
        messages = build_chat_messages(
            "name_validation", "Why?",
            client_profile={"full_name": "John Doe", "life_path_number": 3},
            target_name="Edna Doe",
        )
        system = messages[0].content

        assert '"life_path_number": 3' in system
        assert '"Edna Doe" (Expression Number 4)' in system
