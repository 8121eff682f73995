"""
Document domain models and schemas.

The Document entity plus request/response schemas for document operations.

Dependencies: pydantic
System role: Document API contracts
"""

from datetime import datetime

from pydantic import ConfigDict, Field

from docchat.models.common import CamelModel


class Document(CamelModel):
    """An uploaded PDF and its extracted text. Immutable after creation."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    filename: str
    content: str = Field(description="Extracted document text")
    size: int = Field(ge=0, description="File size in bytes")
    page_count: int = Field(ge=1)
    uploaded_at: datetime


class NewDocument(CamelModel):
    """Fields supplied by the caller when creating a Document."""

    title: str
    filename: str
    content: str
    size: int = Field(ge=0)
    page_count: int = Field(ge=1)


class ExtractedContent(CamelModel):
    """Result of PDF text extraction."""

    text: str
    page_count: int = Field(ge=1)
    degraded: bool = Field(default=False, description="True when fallback text was used")


class UploadDocumentResponse(CamelModel):
    """Response schema for a successful upload."""

    document: Document
    session_id: str


class DeleteDocumentResponse(CamelModel):
    """Response schema for document deletion."""

    message: str
