"""
Chat domain models and schemas.

Message entity plus request/response schemas for chat operations.

Dependencies: pydantic, docchat.models.session
System role: Chat API contracts
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from docchat.models.common import CamelModel
from docchat.models.session import ChatSession


class Message(CamelModel):
    """A single transcript entry. Never mutated after creation."""

    model_config = ConfigDict(frozen=True)

    id: str
    session_id: str
    content: str
    is_user: bool
    timestamp: datetime


class ChatSessionResponse(CamelModel):
    """Response schema for a document's chat: session plus transcript."""

    session: ChatSession
    messages: list[Message]


class SummaryResponse(BaseModel):
    """Response schema for document summarization."""

    summary: str


class QuestionsResponse(BaseModel):
    """Response schema for suggested questions."""

    questions: list[str] = Field(description="Suggested questions about the document")
