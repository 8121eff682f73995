"""
In-memory record store for documents, chat sessions and messages.

Keyed maps guarded by a re-entrant lock. Reads return snapshots so callers
can iterate while other turns append. Deleting a document cascades to its
sessions and their messages.

Dependencies: docchat.models, docchat.core.exceptions
System role: Shared persistence collaborator for all request handlers
"""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from threading import RLock
from typing import Protocol

from docchat.core.exceptions import DocumentNotFoundError, SessionNotFoundError
from docchat.models.chat import Message
from docchat.models.document import Document, NewDocument
from docchat.models.session import ChatSession

logger = logging.getLogger(__name__)


class RecordStore(Protocol):
    """Persistence contract consumed by the services."""

    async def create_document(self, fields: NewDocument) -> Document: ...

    async def get_document(self, document_id: str) -> Document | None: ...

    async def list_documents(self) -> list[Document]: ...

    async def delete_document(self, document_id: str) -> bool: ...

    async def create_session(self, document_id: str) -> ChatSession: ...

    async def get_session(self, session_id: str) -> ChatSession | None: ...

    async def find_session_by_document(self, document_id: str) -> ChatSession | None: ...

    async def get_or_create_session(self, document_id: str) -> tuple[ChatSession, bool]: ...

    async def delete_session(self, session_id: str) -> bool: ...

    async def create_message(self, session_id: str, content: str, is_user: bool) -> Message: ...

    async def get_message(self, message_id: str) -> Message | None: ...

    async def list_messages(self, session_id: str) -> list[Message]: ...

    async def delete_message(self, message_id: str) -> bool: ...


def _now() -> datetime:
    return datetime.now(UTC)


def _new_id() -> str:
    return str(uuid.uuid4())


class InMemoryRecordStore:
    """
    Process-local RecordStore implementation.

    Constructed once at application startup and shared by every handler.
    ``_sessions_by_document`` is a secondary index so find-or-create of a
    document's session is a single atomic step under the lock.
    """

    def __init__(self) -> None:
        self._documents: dict[str, Document] = {}
        self._sessions: dict[str, ChatSession] = {}
        self._messages: dict[str, Message] = {}
        self._sessions_by_document: dict[str, list[str]] = {}
        self._messages_by_session: dict[str, list[str]] = {}
        self._lock = RLock()

    # Documents

    async def create_document(self, fields: NewDocument) -> Document:
        with self._lock:
            document = Document(
                id=_new_id(),
                uploaded_at=_now(),
                **fields.model_dump(),
            )
            self._documents[document.id] = document
            return document

    async def get_document(self, document_id: str) -> Document | None:
        with self._lock:
            return self._documents.get(document_id)

    async def list_documents(self) -> list[Document]:
        """Return all documents, newest first."""
        with self._lock:
            documents = list(self._documents.values())
        return sorted(documents, key=lambda d: d.uploaded_at, reverse=True)

    async def delete_document(self, document_id: str) -> bool:
        with self._lock:
            if document_id not in self._documents:
                return False
            for session_id in list(self._sessions_by_document.get(document_id, [])):
                self._delete_session_locked(session_id)
            self._sessions_by_document.pop(document_id, None)
            del self._documents[document_id]
            logger.debug("Document deleted", extra={"document_id": document_id})
            return True

    # Chat sessions

    async def create_session(self, document_id: str) -> ChatSession:
        with self._lock:
            return self._create_session_locked(document_id)

    async def get_session(self, session_id: str) -> ChatSession | None:
        with self._lock:
            return self._sessions.get(session_id)

    async def find_session_by_document(self, document_id: str) -> ChatSession | None:
        """Return the first session created for a document, if any."""
        with self._lock:
            session_ids = self._sessions_by_document.get(document_id)
            if not session_ids:
                return None
            return self._sessions[session_ids[0]]

    async def get_or_create_session(self, document_id: str) -> tuple[ChatSession, bool]:
        """
        Atomically return the document's session, creating it when absent.

        Returns:
            tuple[ChatSession, bool]: The session and whether it was created

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        with self._lock:
            session_ids = self._sessions_by_document.get(document_id)
            if session_ids:
                return self._sessions[session_ids[0]], False
            return self._create_session_locked(document_id), True

    async def delete_session(self, session_id: str) -> bool:
        with self._lock:
            return self._delete_session_locked(session_id)

    # Messages

    async def create_message(self, session_id: str, content: str, is_user: bool) -> Message:
        """
        Append a message to a session's transcript.

        Timestamps never go backwards within a session, even if the wall
        clock does.

        Raises:
            SessionNotFoundError: If the session does not exist
        """
        with self._lock:
            if session_id not in self._sessions:
                raise SessionNotFoundError(session_id)
            message_ids = self._messages_by_session.setdefault(session_id, [])
            timestamp = _now()
            if message_ids:
                timestamp = max(timestamp, self._messages[message_ids[-1]].timestamp)
            message = Message(
                id=_new_id(),
                session_id=session_id,
                content=content,
                is_user=is_user,
                timestamp=timestamp,
            )
            self._messages[message.id] = message
            message_ids.append(message.id)
            return message

    async def get_message(self, message_id: str) -> Message | None:
        with self._lock:
            return self._messages.get(message_id)

    async def list_messages(self, session_id: str) -> list[Message]:
        """Return a snapshot of a session's messages, oldest first."""
        with self._lock:
            messages = [self._messages[mid] for mid in self._messages_by_session.get(session_id, [])]
        return sorted(messages, key=lambda m: m.timestamp)

    async def delete_message(self, message_id: str) -> bool:
        with self._lock:
            message = self._messages.pop(message_id, None)
            if message is None:
                return False
            siblings = self._messages_by_session.get(message.session_id, [])
            if message_id in siblings:
                siblings.remove(message_id)
            return True

    # Internal helpers (caller holds the lock)

    def _create_session_locked(self, document_id: str) -> ChatSession:
        if document_id not in self._documents:
            raise DocumentNotFoundError(document_id)
        session = ChatSession(id=_new_id(), document_id=document_id, created_at=_now())
        self._sessions[session.id] = session
        self._sessions_by_document.setdefault(document_id, []).append(session.id)
        self._messages_by_session[session.id] = []
        return session

    def _delete_session_locked(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        for message_id in self._messages_by_session.pop(session_id, []):
            self._messages.pop(message_id, None)
        siblings = self._sessions_by_document.get(session.document_id, [])
        if session_id in siblings:
            siblings.remove(session_id)
        return True
