"""
Test suite for CompletionClient.

Tests prompt budgets (document characters, history window), error mapping
to BackendError, malformed-reply fallbacks, suggested question parsing, and
the missing API key failure.

System role: Verification of the generative-text backend adapter
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.messages import AIMessage, HumanMessage

from docchat.configs.completion import CompletionSettings
from docchat.core.completion import CHAT_FALLBACK, SUMMARY_FALLBACK, CompletionClient
from docchat.core.completion.completion_client import (
    DEFAULT_QUESTIONS,
    extract_text,
    format_history,
    parse_questions,
)
from docchat.core.exceptions import BackendError, ConfigurationError, ResponseFormatError


def make_model(reply) -> MagicMock:
    """Chat model mock whose ainvoke returns ``reply``."""
    model = MagicMock()
    model.ainvoke = AsyncMock(return_value=reply)
    return model


def sent_text(model: MagicMock) -> str:
    """Concatenate all prompt messages passed to the model."""
    messages = model.ainvoke.call_args.args[0]
    return "\n".join(m.content for m in messages)


class TestComplete:
    """Test suite for CompletionClient.complete."""

    @pytest.mark.asyncio
    async def test_complete_should_return_reply_text(self, completion_settings: CompletionSettings) -> None:
        # Arrange
        model = make_model(AIMessage(content="  The answer.  "))
        client = CompletionClient(completion_settings, model=model)

        # Act
        reply = await client.complete("Document text", [], "What is it?")

        # Assert
        assert reply == "The answer."
        assert "What is it?" in sent_text(model)
        assert "Document text" in sent_text(model)

    @pytest.mark.asyncio
    async def test_complete_should_truncate_document_to_budget(self) -> None:
        """Test only the first document_char_budget characters are sent."""
        settings = CompletionSettings(api_key="k", document_char_budget=8000)
        model = make_model(AIMessage(content="ok"))
        client = CompletionClient(settings, model=model)
        document = "a" * 8000 + "TAIL_MARKER"

        await client.complete(document, [], "question")

        assert "a" * 8000 in sent_text(model)
        assert "TAIL_MARKER" not in sent_text(model)

    @pytest.mark.asyncio
    async def test_complete_should_send_only_recent_history(self) -> None:
        """Test history is cut to the last history_window messages."""
        settings = CompletionSettings(api_key="k", history_window=3)
        model = make_model(AIMessage(content="ok"))
        client = CompletionClient(settings, model=model)
        history = [HumanMessage(content=f"turn-{i:02d}") for i in range(8)]

        await client.complete("doc", history, "question")

        text = sent_text(model)
        assert "turn-04" not in text
        assert all(f"turn-{i:02d}" in text for i in (5, 6, 7))

    @pytest.mark.asyncio
    async def test_complete_should_return_fallback_for_empty_reply(
        self, completion_settings: CompletionSettings
    ) -> None:
        client = CompletionClient(completion_settings, model=make_model(AIMessage(content="")))

        assert await client.complete("doc", [], "q") == CHAT_FALLBACK

    @pytest.mark.asyncio
    async def test_complete_should_return_fallback_for_missing_payload(
        self, completion_settings: CompletionSettings
    ) -> None:
        client = CompletionClient(completion_settings, model=make_model(None))

        assert await client.complete("doc", [], "q") == CHAT_FALLBACK

    @pytest.mark.asyncio
    async def test_complete_should_raise_backend_error_on_failure(
        self, completion_settings: CompletionSettings, failing_chat_model: MagicMock
    ) -> None:
        """Test a failed remote call surfaces as BackendError without retries."""
        client = CompletionClient(completion_settings, model=failing_chat_model)

        with pytest.raises(BackendError, match="503"):
            await client.complete("doc", [], "q")

        assert failing_chat_model.ainvoke.await_count == 1

    @pytest.mark.asyncio
    async def test_complete_should_raise_backend_error_on_timeout(self) -> None:
        settings = CompletionSettings(api_key="k", timeout_seconds=0.01)

        async def slow(_messages):
            await asyncio.sleep(1)

        model = MagicMock()
        model.ainvoke = slow
        client = CompletionClient(settings, model=model)

        with pytest.raises(BackendError, match="timed out"):
            await client.complete("doc", [], "q")

    @pytest.mark.asyncio
    async def test_missing_api_key_should_raise_configuration_error(self) -> None:
        """Test there is no silent default key."""
        client = CompletionClient(CompletionSettings(api_key=None))

        with pytest.raises(ConfigurationError, match="GEMINI_API_KEY"):
            await client.complete("doc", [], "q")


class TestSummarize:
    """Test suite for CompletionClient.summarize."""

    @pytest.mark.asyncio
    async def test_summarize_should_return_summary(self, completion_settings: CompletionSettings) -> None:
        model = make_model(AIMessage(content="Short summary."))
        client = CompletionClient(completion_settings, model=model)

        assert await client.summarize("Long document") == "Short summary."
        assert "summary" in sent_text(model)

    @pytest.mark.asyncio
    async def test_summarize_should_fallback_on_malformed_reply(
        self, completion_settings: CompletionSettings
    ) -> None:
        client = CompletionClient(completion_settings, model=make_model(AIMessage(content=[])))

        assert await client.summarize("doc") == SUMMARY_FALLBACK

    @pytest.mark.asyncio
    async def test_summarize_should_raise_on_backend_failure(
        self, completion_settings: CompletionSettings, failing_chat_model: MagicMock
    ) -> None:
        client = CompletionClient(completion_settings, model=failing_chat_model)

        with pytest.raises(BackendError):
            await client.summarize("doc")


class TestSuggestQuestions:
    """Test suite for CompletionClient.suggest_questions."""

    @pytest.mark.asyncio
    async def test_should_keep_only_question_lines(self, completion_settings: CompletionSettings) -> None:
        reply = "\n".join([
            "What is the main topic of the paper?",
            "Short?",
            "A statement, not a question.",
            "How was the data collected?",
        ])
        client = CompletionClient(completion_settings, model=make_model(AIMessage(content=reply)))

        questions = await client.suggest_questions("doc")

        assert questions == [
            "What is the main topic of the paper?",
            "How was the data collected?",
        ]

    @pytest.mark.asyncio
    async def test_should_fall_back_to_defaults_on_backend_failure(
        self, completion_settings: CompletionSettings, failing_chat_model: MagicMock
    ) -> None:
        client = CompletionClient(completion_settings, model=failing_chat_model)

        assert await client.suggest_questions("doc") == DEFAULT_QUESTIONS

    @pytest.mark.asyncio
    async def test_should_use_questions_budget(self) -> None:
        settings = CompletionSettings(api_key="k", questions_char_budget=100)
        model = make_model(AIMessage(content="What does it say about testing?"))
        client = CompletionClient(settings, model=model)

        await client.suggest_questions("b" * 100 + "TAIL_MARKER")

        assert "TAIL_MARKER" not in sent_text(model)


class TestHelpers:
    """Test suite for module helpers."""

    def test_format_history_labels_roles(self) -> None:
        text = format_history([HumanMessage(content="hi"), AIMessage(content="hello")])

        assert "User: hi" in text
        assert "Assistant: hello" in text

    def test_format_history_empty(self) -> None:
        assert format_history([]) == ""

    def test_extract_text_joins_content_parts(self) -> None:
        response = AIMessage(content=[{"type": "text", "text": "Hello "}, "world"])

        assert extract_text(response) == "Hello world"

    def test_extract_text_rejects_blank(self) -> None:
        with pytest.raises(ResponseFormatError):
            extract_text(AIMessage(content="   "))

    def test_parse_questions_caps_at_five(self) -> None:
        text = "\n".join(f"Question number {i} about the text?" for i in range(8))

        assert len(parse_questions(text)) == 5
