"""
Chat session domain model.

Dependencies: pydantic
System role: ChatSession entity contract
"""

from datetime import datetime

from pydantic import ConfigDict

from docchat.models.common import CamelModel


class ChatSession(CamelModel):
    """The single conversation attached to a document."""

    model_config = ConfigDict(frozen=True)

    id: str
    document_id: str
    created_at: datetime
