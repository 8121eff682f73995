"""
Chat history adapter.

High-level business logic for a session's transcript.
Provides a simple interface for adding messages by role and retrieving
history as LangChain messages for the completion client.

Dependencies: docchat.boundary.store, langchain_core.messages
System role: Chat history business logic adapter
"""

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage

from docchat.boundary.store import RecordStore
from docchat.models.chat import Message


def to_langchain_message(message: Message) -> BaseMessage:
    """Map a stored transcript message to a LangChain message."""
    if message.is_user:
        return HumanMessage(content=message.content)
    return AIMessage(content=message.content)


class ChatHistoryAdapter:
    """
    Adapter for one session's chat history.

    Simplifies adding messages by role (user/ai) and retrieving history.
    """

    def __init__(self, session_id: str, store: RecordStore) -> None:
        """
        Initialize chat history adapter.

        Args:
            session_id: Session ID for chat history scope
            store: Record store holding the transcript
        """
        self.session_id = session_id
        self.store = store

    async def add_user_message(self, content: str) -> Message:
        """
        Add user message to chat history.

        Raises:
            SessionNotFoundError: If session does not exist
        """
        return await self.store.create_message(self.session_id, content, is_user=True)

    async def add_ai_message(self, content: str) -> Message:
        """
        Add assistant message to chat history.

        Raises:
            SessionNotFoundError: If session does not exist
        """
        return await self.store.create_message(self.session_id, content, is_user=False)

    async def get_records(self) -> list[Message]:
        """Get the full transcript, oldest first."""
        return await self.store.list_messages(self.session_id)

    async def get_messages(self) -> list[BaseMessage]:
        """Get the full transcript as LangChain messages, oldest first."""
        return [to_langchain_message(m) for m in await self.get_records()]
