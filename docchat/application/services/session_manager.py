"""
Session manager for document chat.

Owns the one chat session per document and the user-turn cycle:
persist user message -> resolve document -> typing signal -> completion ->
persist assistant message -> deliver to the owning connection.

Turns on the same session are serialized with a per-session asyncio lock so
the transcript keeps submission order. Turns run as background tasks; a
client disconnect does not cancel them, and a reply produced after the
disconnect is persisted and its delivery dropped.

Dependencies: docchat.boundary.store, docchat.core.completion, docchat.core.realtime
System role: Chat session orchestration layer
"""

import asyncio
import logging
import weakref

from docchat.application.adapters.chat_history_adapter import ChatHistoryAdapter
from docchat.boundary.store import RecordStore
from docchat.core.completion import CompletionClient
from docchat.core.exceptions import (
    CompletionError,
    DocChatError,
    DocumentNotFoundError,
    SessionNotFoundError,
)
from docchat.core.realtime import EnvelopeSink
from docchat.models.chat import Message
from docchat.models.session import ChatSession
from docchat.models.streaming import Envelope

logger = logging.getLogger(__name__)

SESSION_NOT_FOUND_MESSAGE = "Chat session not found"
DOCUMENT_NOT_FOUND_MESSAGE = "Document not found"
COMPLETION_FAILED_MESSAGE = "Failed to generate AI response"
TURN_FAILED_MESSAGE = "An error occurred processing your message"


class SessionManager:
    """
    Chat session orchestrator.

    Coordinates session lookup, transcript persistence and completion calls
    for multi-turn conversations about a document.
    """

    def __init__(self, store: RecordStore, completion_client: CompletionClient) -> None:
        """
        Initialize session manager.

        Args:
            store: Shared record store
            completion_client: Generative-text backend adapter
        """
        self.store = store
        self.completion_client = completion_client
        self._turn_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()
        self._background_tasks: set[asyncio.Task] = set()

    def _turn_lock(self, session_id: str) -> asyncio.Lock:
        lock = self._turn_locks.get(session_id)
        if lock is None:
            lock = asyncio.Lock()
            self._turn_locks[session_id] = lock
        return lock

    async def _require_document(self, document_id: str):
        document = await self.store.get_document(document_id)
        if document is None:
            raise DocumentNotFoundError(document_id)
        return document

    async def get_session(self, session_id: str) -> ChatSession | None:
        return await self.store.get_session(session_id)

    async def get_or_create_session(self, document_id: str) -> ChatSession:
        """
        Return the document's chat session, creating it on first access.

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        session, created = await self.store.get_or_create_session(document_id)
        if created:
            logger.info(
                "Chat session created",
                extra={"document_id": document_id, "session_id": session.id},
            )
        return session

    async def get_transcript(self, session_id: str) -> list[Message]:
        """
        Get all messages of a session, oldest first.

        Raises:
            SessionNotFoundError: If the session does not exist
        """
        if await self.store.get_session(session_id) is None:
            raise SessionNotFoundError(session_id)
        return await ChatHistoryAdapter(session_id, self.store).get_records()

    async def get_chat(self, document_id: str) -> tuple[ChatSession, list[Message]]:
        """Resolve a document's session and transcript for the chat view."""
        session = await self.get_or_create_session(document_id)
        return session, await self.get_transcript(session.id)

    def submit_user_turn(self, session_id: str, text: str, sink: EnvelopeSink) -> asyncio.Task:
        """
        Schedule a user turn without waiting for it.

        The task is tracked until it finishes so it survives the connection
        that submitted it.
        """
        task = asyncio.create_task(self.handle_user_turn(session_id, text, sink))
        self._background_tasks.add(task)

        def on_done(finished: asyncio.Task) -> None:
            self._background_tasks.discard(finished)
            if finished.cancelled():
                return
            exc = finished.exception()
            if exc is not None:
                logger.error(
                    "User turn task failed",
                    exc_info=exc,
                    extra={"session_id": session_id, "error_type": type(exc).__name__},
                )

        task.add_done_callback(on_done)
        return task

    async def drain(self) -> None:
        """Wait for all in-flight turns to finish."""
        if self._background_tasks:
            await asyncio.gather(*self._background_tasks, return_exceptions=True)

    async def handle_user_turn(self, session_id: str, text: str, sink: EnvelopeSink) -> None:
        """
        Process one user utterance and deliver the outcome through ``sink``.

        Flow:
        1. Resolve session (missing: error envelope, nothing persisted)
        2. Persist the user message
        3. Resolve document (missing: error envelope)
        4. Send typing envelope
        5. Invoke completion with prior transcript and document text
        6. Persist assistant message and send it as a message envelope

        Any failure after step 2 leaves the user message persisted and sends
        exactly one error envelope.

        Args:
            session_id: Chat session ID
            text: User message content
            sink: Connection that owns the session
        """
        async with self._turn_lock(session_id):
            logger.info(
                "User turn started",
                extra={"session_id": session_id, "message_length": len(text)},
            )

            session = await self.store.get_session(session_id)
            if session is None:
                logger.warning("User turn for unknown session", extra={"session_id": session_id})
                await sink.send(Envelope.error(SESSION_NOT_FOUND_MESSAGE))
                return

            chat_adapter = ChatHistoryAdapter(session_id=session_id, store=self.store)

            try:
                history = await chat_adapter.get_messages()
                await chat_adapter.add_user_message(text)
            except SessionNotFoundError:
                logger.warning("Session deleted before user message was stored", extra={"session_id": session_id})
                await sink.send(Envelope.error(SESSION_NOT_FOUND_MESSAGE))
                return

            document = await self.store.get_document(session.document_id)
            if document is None:
                logger.warning(
                    "User turn for session without document",
                    extra={"session_id": session_id, "document_id": session.document_id},
                )
                await sink.send(Envelope.error(DOCUMENT_NOT_FOUND_MESSAGE))
                return

            await sink.send(Envelope.typing())

            try:
                reply = await self.completion_client.complete(
                    system_context=document.content,
                    history=history,
                    user_message=text,
                )
                assistant_message = await chat_adapter.add_ai_message(reply)
            except CompletionError as e:
                logger.error(
                    "Completion failed for user turn",
                    extra={
                        "session_id": session_id,
                        "error_type": type(e).__name__,
                        "error_msg": str(e),
                    },
                )
                await sink.send(Envelope.error(COMPLETION_FAILED_MESSAGE))
                return
            except DocChatError as e:
                logger.warning(
                    "Assistant reply could not be stored",
                    extra={"session_id": session_id, "error_type": type(e).__name__, "error_msg": str(e)},
                )
                await sink.send(Envelope.error(TURN_FAILED_MESSAGE))
                return
            except Exception as e:
                logger.exception(
                    "Unexpected error during user turn",
                    extra={"session_id": session_id, "error_type": type(e).__name__},
                )
                await sink.send(Envelope.error(TURN_FAILED_MESSAGE))
                return

            delivered = await sink.send(
                Envelope.message(assistant_message.content, assistant_message.timestamp)
            )
            logger.info(
                "User turn completed",
                extra={
                    "session_id": session_id,
                    "reply_length": len(assistant_message.content),
                    "delivered": delivered,
                },
            )

    async def summarize(self, document_id: str, record: bool = False) -> str:
        """
        Summarize a document.

        Args:
            document_id: Document ID
            record: Also append the summary to the transcript as an
                assistant message

        Returns:
            str: Summary text

        Raises:
            DocumentNotFoundError: If the document does not exist
            CompletionError: If the backend call fails
        """
        document = await self._require_document(document_id)
        summary = await self.completion_client.summarize(document.content)

        if record:
            session = await self.get_or_create_session(document_id)
            async with self._turn_lock(session.id):
                await ChatHistoryAdapter(session.id, self.store).add_ai_message(summary)
            logger.info(
                "Summary recorded in transcript",
                extra={"document_id": document_id, "session_id": session.id},
            )

        return summary

    async def suggest_questions(self, document_id: str) -> list[str]:
        """
        Suggest questions about a document.

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        document = await self._require_document(document_id)
        return await self.completion_client.suggest_questions(document.content)
