"""
Document API endpoints.

Routes:
- GET /documents - List documents, newest first
- GET /documents/{id} - Get document
- POST /documents - Upload PDF (multipart field ``file``)
- DELETE /documents/{id} - Delete document with its chat
- GET /documents/{id}/chat - Chat session and transcript (created on demand)
- POST /documents/{id}/summarize - Summarize document
- GET /documents/{id}/questions - Suggested questions

Dependencies: docchat.application.services, docchat.models
System role: Document HTTP API
"""

import logging

from fastapi import APIRouter, Depends, File, UploadFile, status

from docchat.api.deps import get_document_service, get_session_manager
from docchat.api.routers.router_utils import handle_document_errors
from docchat.application.services import DocumentService, SessionManager
from docchat.models.chat import ChatSessionResponse, QuestionsResponse, SummaryResponse
from docchat.models.common import ErrorResponse
from docchat.models.document import (
    DeleteDocumentResponse,
    Document,
    UploadDocumentResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/documents",
    tags=["documents"],
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)


@router.get("", response_model=list[Document])
@handle_document_errors("Failed to fetch documents")
async def list_documents(
    document_service: DocumentService = Depends(get_document_service),
) -> list[Document]:
    """List all documents, newest first."""
    return await document_service.list_documents()


@router.get("/{document_id}", response_model=Document)
@handle_document_errors("Failed to fetch document")
async def get_document(
    document_id: str,
    document_service: DocumentService = Depends(get_document_service),
) -> Document:
    """
    Get a single document.

    Raises:
        HTTPException(404): Document not found
    """
    return await document_service.get_document(document_id)


@router.post("", response_model=UploadDocumentResponse, status_code=status.HTTP_201_CREATED)
@handle_document_errors("Failed to upload document")
async def upload_document(
    file: UploadFile | None = File(default=None),
    document_service: DocumentService = Depends(get_document_service),
) -> UploadDocumentResponse:
    """
    Upload a PDF via multipart form.

    At most one byte past the size limit is read so oversized uploads are
    rejected without buffering them whole.

    Args:
        file: Uploaded PDF (multipart field ``file``)
        document_service: Injected DocumentService

    Returns:
        UploadDocumentResponse: Created document and its chat session ID

    Raises:
        HTTPException(400): Missing file, not a PDF, or too large
    """
    if file is None:
        document_service.validate_upload(None, None, 0)

    logger.info(
        "Document upload request received",
        extra={"file_name": file.filename, "content_type": file.content_type},
    )

    limit = document_service.upload_settings.max_file_size_bytes
    try:
        data = await file.read(limit + 1)
    finally:
        await file.close()

    document, session = await document_service.upload_document(
        data=data,
        filename=file.filename,
        content_type=file.content_type,
    )
    return UploadDocumentResponse(document=document, session_id=session.id)


@router.delete("/{document_id}", response_model=DeleteDocumentResponse)
@handle_document_errors("Failed to delete document")
async def delete_document(
    document_id: str,
    document_service: DocumentService = Depends(get_document_service),
) -> DeleteDocumentResponse:
    """
    Delete a document, its chat session and all messages.

    Raises:
        HTTPException(404): Document not found
    """
    await document_service.delete_document(document_id)
    return DeleteDocumentResponse(message="Document deleted successfully")


@router.get("/{document_id}/chat", response_model=ChatSessionResponse)
@handle_document_errors("Failed to get chat session")
async def get_chat(
    document_id: str,
    session_manager: SessionManager = Depends(get_session_manager),
) -> ChatSessionResponse:
    """
    Get the document's chat session and transcript, creating the session if absent.

    Raises:
        HTTPException(404): Document not found
    """
    session, messages = await session_manager.get_chat(document_id)
    return ChatSessionResponse(session=session, messages=messages)


@router.post("/{document_id}/summarize", response_model=SummaryResponse)
@handle_document_errors("Failed to generate summary")
async def summarize_document(
    document_id: str,
    record: bool = False,
    session_manager: SessionManager = Depends(get_session_manager),
) -> SummaryResponse:
    """
    Summarize a document.

    Args:
        document_id: Document ID
        record: Also store the summary in the transcript as an assistant message
        session_manager: Injected SessionManager

    Raises:
        HTTPException(404): Document not found
        HTTPException(500): Completion backend failure
    """
    summary = await session_manager.summarize(document_id, record=record)
    return SummaryResponse(summary=summary)


@router.get("/{document_id}/questions", response_model=QuestionsResponse)
@handle_document_errors("Failed to generate questions")
async def suggest_questions(
    document_id: str,
    session_manager: SessionManager = Depends(get_session_manager),
) -> QuestionsResponse:
    """
    Suggest questions about a document.

    Raises:
        HTTPException(404): Document not found
    """
    questions = await session_manager.suggest_questions(document_id)
    return QuestionsResponse(questions=questions)
