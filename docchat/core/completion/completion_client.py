"""
Completion client for the Gemini generative-text backend.

Stateless adapter: builds a bounded prompt from document text and recent
history, makes a single request, and returns plain text. No retries are
performed. Malformed replies are replaced by a fixed fallback string so a
bad payload never blocks the chat.

Dependencies: langchain_google_genai, langchain_core, docchat.configs
System role: Generative-text backend adapter
"""

import asyncio
import logging
from collections.abc import Sequence

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import BaseMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from docchat.configs.completion import CompletionSettings
from docchat.core.completion.completion_prompt import (
    CHAT_PROMPT,
    QUESTIONS_PROMPT,
    SUMMARY_PROMPT,
)
from docchat.core.exceptions import (
    BackendError,
    CompletionError,
    ConfigurationError,
    ResponseFormatError,
)

logger = logging.getLogger(__name__)

CHAT_FALLBACK = "I couldn't generate a response."
SUMMARY_FALLBACK = "Unable to generate summary."
DEFAULT_QUESTIONS = [
    "What is this document about?",
    "Can you explain the main concepts?",
    "What are the key takeaways?",
    "Are there any important details I should know?",
]
MAX_QUESTIONS = 5
MIN_QUESTION_LENGTH = 10


def format_history(chat_history: Sequence[BaseMessage]) -> str:
    """Render transcript messages as ``User:`` / ``Assistant:`` lines."""
    if not chat_history:
        return ""
    formatted_messages = [
        f"{'User' if msg.type == 'human' else 'Assistant'}: {msg.content}"
        for msg in chat_history
    ]
    return "Previous conversation:\n" + "\n".join(formatted_messages)


def extract_text(response: object) -> str:
    """
    Pull the reply text out of a chat model response.

    Handles both string and list-of-parts content.

    Raises:
        ResponseFormatError: If the payload carries no text
    """
    content = getattr(response, "content", None)
    if isinstance(content, list):
        content = "".join(
            item if isinstance(item, str) else (item.get("text", "") if isinstance(item, dict) else "")
            for item in content
        )
    if not isinstance(content, str) or not content.strip():
        raise ResponseFormatError(
            "Completion reply is empty or malformed",
            {"response_type": type(response).__name__},
        )
    return content.strip()


def parse_questions(text: str) -> list[str]:
    """Keep lines that look like real questions, at most MAX_QUESTIONS."""
    questions = [line.strip() for line in text.splitlines()]
    questions = [q for q in questions if len(q) > MIN_QUESTION_LENGTH and q.endswith("?")]
    return questions[:MAX_QUESTIONS]


class CompletionClient:
    """
    Gemini completion adapter.

    The chat model is built lazily on first use so that a missing API key
    fails the first call loudly rather than the import.
    """

    def __init__(
        self,
        settings: CompletionSettings,
        model: BaseChatModel | None = None,
    ) -> None:
        """
        Initialize completion client.

        Args:
            settings: Completion settings (model, budgets, API key)
            model: Optional pre-built chat model, used by tests
        """
        self._settings = settings
        self._model = model

    @property
    def model(self) -> BaseChatModel:
        """Return the chat model, building it on first access."""
        if self._model is None:
            if not self._settings.api_key:
                raise ConfigurationError("GEMINI_API_KEY environment variable is required")
            self._model = ChatGoogleGenerativeAI(
                model=self._settings.model,
                temperature=self._settings.temperature,
                google_api_key=self._settings.api_key,
                timeout=self._settings.timeout_seconds,
                max_retries=0,
            )
            logger.info("Completion model initialized", extra={"model": self._settings.model})
        return self._model

    async def _generate(self, messages: list[BaseMessage], operation: str) -> str:
        """
        Run one completion round trip.

        Raises:
            ConfigurationError: If no API key is configured
            BackendError: If the call fails or times out
            ResponseFormatError: If the reply has no usable text
        """
        model = self.model
        try:
            response = await asyncio.wait_for(
                model.ainvoke(messages),
                timeout=self._settings.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise BackendError(
                f"Completion request timed out after {self._settings.timeout_seconds}s",
                operation,
            ) from e
        except CompletionError:
            raise
        except Exception as e:
            raise BackendError(f"Completion request failed: {e}", operation) from e

        return extract_text(response)

    async def complete(
        self,
        system_context: str,
        history: Sequence[BaseMessage],
        user_message: str,
    ) -> str:
        """
        Answer a user message about a document.

        Args:
            system_context: Document text, truncated to the character budget
            history: Transcript so far, oldest first; only the last
                ``history_window`` messages are sent
            user_message: The new user utterance

        Returns:
            str: Reply text, or CHAT_FALLBACK when the reply is malformed

        Raises:
            ConfigurationError: If no API key is configured
            BackendError: If the backend call fails
        """
        window = self._settings.history_window
        recent = list(history)[-window:] if window else []
        messages = CHAT_PROMPT.invoke({
            "document": system_context[: self._settings.document_char_budget],
            "chat_history": format_history(recent),
            "question": user_message,
        }).to_messages()

        try:
            return await self._generate(messages, "complete")
        except ResponseFormatError as e:
            logger.warning("Malformed completion reply, using fallback", extra={"error_msg": e.message})
            return CHAT_FALLBACK

    async def summarize(self, document_text: str) -> str:
        """
        Summarize a document.

        Returns:
            str: Summary text, or SUMMARY_FALLBACK when the reply is malformed

        Raises:
            ConfigurationError: If no API key is configured
            BackendError: If the backend call fails
        """
        messages = SUMMARY_PROMPT.invoke({
            "document": document_text[: self._settings.document_char_budget],
        }).to_messages()

        try:
            return await self._generate(messages, "summarize")
        except ResponseFormatError as e:
            logger.warning("Malformed summary reply, using fallback", extra={"error_msg": e.message})
            return SUMMARY_FALLBACK

    async def suggest_questions(self, document_text: str) -> list[str]:
        """
        Suggest questions a reader might ask about a document.

        Backend failures fall back to a generic list.

        Raises:
            ConfigurationError: If no API key is configured
        """
        messages = QUESTIONS_PROMPT.invoke({
            "document": document_text[: self._settings.questions_char_budget],
        }).to_messages()

        try:
            questions = parse_questions(await self._generate(messages, "questions"))
        except (BackendError, ResponseFormatError) as e:
            logger.warning(
                "Question generation failed, using defaults",
                extra={"error_type": type(e).__name__, "error_msg": e.message},
            )
            return list(DEFAULT_QUESTIONS)

        return questions or list(DEFAULT_QUESTIONS)
