"""
Document service orchestrator.

Validates uploads, extracts PDF text, creates the Document and its initial
chat session, and handles listing and cascade deletion.

Dependencies: docchat.boundary.store, docchat.boundary.pdf, docchat.configs
System role: Document use case orchestration
"""

import logging
import re

from docchat.boundary.pdf import PDFExtractor
from docchat.boundary.store import RecordStore
from docchat.configs.uploads import UploadSettings
from docchat.core.exceptions import DocumentNotFoundError, ValidationError
from docchat.models.document import Document, NewDocument
from docchat.models.session import ChatSession

logger = logging.getLogger(__name__)

_PDF_SUFFIX = re.compile(r"\.pdf$", re.IGNORECASE)


def derive_title(filename: str) -> str:
    """Use the filename without its ``.pdf`` suffix as the title."""
    return _PDF_SUFFIX.sub("", filename) or filename


class DocumentService:
    """Document service orchestrator."""

    def __init__(
        self,
        store: RecordStore,
        extractor: PDFExtractor,
        upload_settings: UploadSettings,
    ) -> None:
        """
        Initialize document service.

        Args:
            store: Shared record store
            extractor: PDF text extractor
            upload_settings: Size and content type limits
        """
        self.store = store
        self.extractor = extractor
        self.upload_settings = upload_settings

    def validate_upload(self, filename: str | None, content_type: str | None, size: int) -> None:
        """
        Validate an uploaded file before any side effects.

        Raises:
            ValidationError: Missing file, wrong type, empty, or too large
        """
        if not filename:
            raise ValidationError("No file uploaded", field="file")
        if content_type not in self.upload_settings.allowed_content_types:
            raise ValidationError(
                "File must be a PDF",
                field="file",
                details={"content_type": content_type},
            )
        if size == 0:
            raise ValidationError("Uploaded file is empty", field="file")
        if size > self.upload_settings.max_file_size_bytes:
            max_mb = self.upload_settings.max_file_size_bytes // (1024 * 1024)
            raise ValidationError(
                f"File size must be less than {max_mb}MB",
                field="file",
                details={"size": size},
            )

    async def upload_document(
        self,
        data: bytes,
        filename: str | None,
        content_type: str | None,
    ) -> tuple[Document, ChatSession]:
        """
        Create a Document from uploaded PDF bytes and open its chat session.

        Args:
            data: Raw file bytes
            filename: Original filename
            content_type: MIME type reported by the client

        Returns:
            tuple[Document, ChatSession]: Created document and session

        Raises:
            ValidationError: If the upload is rejected
        """
        self.validate_upload(filename, content_type, len(data))

        extracted = await self.extractor.extract(data, filename)
        document = await self.store.create_document(
            NewDocument(
                title=derive_title(filename),
                filename=filename,
                content=extracted.text,
                size=len(data),
                page_count=extracted.page_count,
            )
        )
        session, _ = await self.store.get_or_create_session(document.id)

        logger.info(
            "Document uploaded",
            extra={
                "document_id": document.id,
                "session_id": session.id,
                "file_name": filename,
                "page_count": document.page_count,
                "degraded": extracted.degraded,
            },
        )
        return document, session

    async def list_documents(self) -> list[Document]:
        """Return all documents, newest first."""
        return await self.store.list_documents()

    async def get_document(self, document_id: str) -> Document:
        """
        Get document by ID.

        Raises:
            DocumentNotFoundError: If document not found
        """
        document = await self.store.get_document(document_id)
        if document is None:
            raise DocumentNotFoundError(document_id)
        return document

    async def delete_document(self, document_id: str) -> None:
        """
        Delete a document with its sessions and messages.

        Raises:
            DocumentNotFoundError: If document not found
        """
        if not await self.store.delete_document(document_id):
            raise DocumentNotFoundError(document_id)
        logger.info("Document deleted", extra={"document_id": document_id})
